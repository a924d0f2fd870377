"""Read a bounded window of records from one partition.

Each fetch uses a fresh consumer under a throwaway group id; nothing is ever
committed, so sampling leaves no trace in the cluster's group offsets.
"""
from __future__ import annotations

import base64
import logging
import uuid
from contextlib import closing
from typing import Any, Iterable, List, Optional, Tuple

from kafka import TopicPartition

from kafkalens.core.config import Settings, get_settings
from kafkalens.core.exceptions import KafkaLensError, RequestValidationError
from kafkalens.core.metrics import SAMPLED_MESSAGES
from kafkalens.domain.models.message import MessageFetchRequest, SampledMessage, TimestampType
from kafkalens.infra.kafka.errors import translate
from kafkalens.infra.kafka.registry import ClusterConnectionRegistry

logger = logging.getLogger(__name__)

_TIMESTAMP_TYPES = {0: TimestampType.CREATE_TIME, 1: TimestampType.LOG_APPEND_TIME}
# v0 message format records carry no timestamp at all
NO_TIMESTAMP = -1


def effective_limit(requested: Optional[int], default: int = 100, maximum: int = 1000) -> int:
    """*default* when nothing (or nothing positive) was asked for, else capped at *maximum*."""
    if requested is None or requested <= 0:
        return default
    return min(requested, maximum)


def decode(data: Optional[bytes]) -> Optional[str]:
    """UTF-8 text when the bytes are valid UTF-8, base64 otherwise."""
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(data).decode("ascii")


def validate(request: MessageFetchRequest) -> None:
    if not request.topic or not request.topic.strip():
        raise RequestValidationError("Topic must not be blank", field="topic")
    if request.partition is None or request.partition < 0:
        raise RequestValidationError("Partition must be >= 0", field="partition")
    if request.offset is not None and request.offset < 0:
        raise RequestValidationError("Offset must be >= 0", field="offset")


class MessageSampler:
    """Bounded, read-only sampling of partition contents."""

    def __init__(self, registry: ClusterConnectionRegistry, settings: Optional[Settings] = None) -> None:
        self._registry = registry
        self._settings = settings or get_settings()

    def fetch(self, cluster_id: str, request: MessageFetchRequest) -> List[SampledMessage]:
        """Return at most the effective limit of records starting at ``request.offset``.

        Raises
        ------
        RequestValidationError
            Blank topic, negative partition or negative offset.
        ClusterNotFoundError
            Unknown *cluster_id*.
        RemoteOperationError
            Any broker-side failure; partial results are discarded.
        """
        validate(request)
        descriptor = self._registry.descriptor(cluster_id)
        s = self._settings
        limit = effective_limit(request.limit, s.message_default_limit, s.message_max_limit)
        start = request.offset or 0
        tp = TopicPartition(request.topic, request.partition)
        group_id = f"{s.temp_group_prefix}{uuid.uuid4()}"

        logger.debug(
            "Sampling %s-%d from offset %d (limit=%d) on cluster %s",
            tp.topic, tp.partition, start, limit, cluster_id,
        )
        try:
            with closing(self._registry.create_consumer(descriptor, group_id)) as consumer:
                consumer.assign([tp])
                consumer.seek(tp, start)
                end = consumer.end_offsets([tp]).get(tp, 0)
                if start >= end:
                    logger.debug("Nothing to sample for %s-%d: start=%d end=%d", tp.topic, tp.partition, start, end)
                    return []
                records = self._poll(consumer, limit)
        except KafkaLensError:
            raise
        except Exception as exc:
            logger.error("Sampling %s-%d on cluster %s failed: %s", tp.topic, tp.partition, cluster_id, exc)
            raise translate(exc, cluster_id, "fetchMessages") from exc

        messages = [to_message(r) for r in records]
        SAMPLED_MESSAGES.inc(len(messages))
        logger.info("Fetched %d messages from %s-%d", len(messages), tp.topic, tp.partition)
        return messages

    def _poll(self, consumer, limit: int) -> List[Any]:
        s = self._settings
        out: List[Any] = []
        empty_polls = 0
        while len(out) < limit and empty_polls < s.message_max_empty_polls:
            batch = consumer.poll(timeout_ms=s.message_poll_timeout_ms, max_records=limit - len(out))
            records = [r for recs in batch.values() for r in recs] if batch else []
            if not records:
                empty_polls += 1
                continue
            empty_polls = 0
            out.extend(records[: limit - len(out)])
        return out


def to_message(record: Any) -> SampledMessage:
    return SampledMessage(
        topic=record.topic,
        partition=record.partition,
        offset=record.offset,
        timestamp=record.timestamp if record.timestamp is not None else NO_TIMESTAMP,
        timestamp_type=_TIMESTAMP_TYPES.get(record.timestamp_type, TimestampType.NO_TIMESTAMP_TYPE),
        key=decode(record.key),
        value=decode(record.value),
        headers=_headers(record.headers or ()),
    )


def _headers(headers: Iterable[Tuple[str, Optional[bytes]]]) -> dict:
    # dicts keep insertion order; a repeated key keeps its last value
    return {k: decode(v) for k, v in headers}
