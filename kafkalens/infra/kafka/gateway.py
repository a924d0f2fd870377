"""Bounded, normalized admin calls against configured clusters.

Every public method takes a cluster id, runs the blocking kafka-python call on
a shared worker pool and waits at most ``admin_default_timeout_sec`` for it.
Whatever goes wrong comes back as a :class:`KafkaLensError`; kafka-python
exception types never leave this module.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from kafka import KafkaAdminClient, TopicPartition
from kafka.admin import ConfigResource, ConfigResourceType
from kafka.errors import UnknownTopicOrPartitionError

from kafkalens.core.config import Settings, get_settings
from kafkalens.core.exceptions import OperationTimeoutError, RemoteOperationError, ResourceNotFoundError
from kafkalens.core.metrics import REMOTE_CALL_SECONDS, REMOTE_CALLS
from kafkalens.domain.models.cluster import Broker, ClusterInfo
from kafkalens.domain.models.consumer_group import (
    ConsumerGroup,
    ConsumerGroupListing,
    ConsumerMember,
    TopicPartitionAssignment,
)
from kafkalens.domain.models.topic import PartitionInfo, TopicDescription
from kafkalens.infra.kafka.errors import translate
from kafkalens.infra.kafka.registry import ClusterConnectionRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNKNOWN_TOPIC = UnknownTopicOrPartitionError.errno
_DEAD = "Dead"


class AdminGateway:
    """Read-only admin operations with a per-call deadline."""

    def __init__(
        self,
        registry: ClusterConnectionRegistry,
        settings: Optional[Settings] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or get_settings()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._settings.admin_max_workers,
            thread_name_prefix="kafka-lens-admin",
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ---------- Topics ----------
    def list_topics(self, cluster_id: str, include_internal: bool = False) -> List[str]:
        """Sorted topic names; internal topics only on request."""
        topics = self.describe_topics(cluster_id)
        return sorted(t.name for t in topics if include_internal or not t.internal)

    def describe_topics(self, cluster_id: str, names: Optional[Iterable[str]] = None) -> List[TopicDescription]:
        """Describe *names*, or every topic when *names* is None."""
        wanted = list(names) if names is not None else None

        def op(admin: KafkaAdminClient) -> List[TopicDescription]:
            try:
                raw = admin.describe_topics(wanted)
            except UnknownTopicOrPartitionError as exc:
                raise ResourceNotFoundError.topic(cluster_id, ",".join(wanted or [])) from exc
            out = []
            for t in raw:
                if t.get("error_code") == _UNKNOWN_TOPIC:
                    raise ResourceNotFoundError.topic(cluster_id, t.get("topic"))
                out.append(_topic_description(t))
            return out

        return self._call(cluster_id, "describeTopics", op)

    def describe_topic(self, cluster_id: str, name: str) -> TopicDescription:
        found = self.describe_topics(cluster_id, [name])
        if not found:
            raise ResourceNotFoundError.topic(cluster_id, name)
        return found[0]

    def describe_topic_configs(self, cluster_id: str, names: Iterable[str]) -> Dict[str, Dict[str, Optional[str]]]:
        resources = [ConfigResource(ConfigResourceType.TOPIC, n) for n in names]

        def op(admin: KafkaAdminClient) -> Dict[str, Dict[str, Optional[str]]]:
            return _parse_configs(admin.describe_configs(resources))

        return self._call(cluster_id, "describeTopicConfigs", op)

    # ---------- Consumer groups ----------
    def list_consumer_groups(self, cluster_id: str) -> List[ConsumerGroupListing]:
        def op(admin: KafkaAdminClient) -> List[ConsumerGroupListing]:
            return [
                ConsumerGroupListing(group_id=gid, protocol_type=ptype or None)
                for gid, ptype in admin.list_consumer_groups()
            ]

        return self._call(cluster_id, "listConsumerGroups", op)

    def describe_consumer_groups(self, cluster_id: str, group_ids: Iterable[str]) -> List[ConsumerGroup]:
        ids = list(group_ids)

        def op(admin: KafkaAdminClient) -> List[ConsumerGroup]:
            infos = admin.describe_consumer_groups(ids)
            for info in infos:
                if info.state == _DEAD and not info.members:
                    raise ResourceNotFoundError.consumer_group(cluster_id, info.group)
            # describe_consumer_groups does not report the coordinator
            coordinators = admin._find_coordinator_ids([info.group for info in infos])
            return [_consumer_group(info, coordinators.get(info.group)) for info in infos]

        return self._call(cluster_id, "describeConsumerGroups", op)

    def describe_consumer_group(self, cluster_id: str, group_id: str) -> ConsumerGroup:
        found = self.describe_consumer_groups(cluster_id, [group_id])
        if not found:
            raise ResourceNotFoundError.consumer_group(cluster_id, group_id)
        return found[0]

    def list_consumer_group_offsets(self, cluster_id: str, group_id: str) -> Dict[TopicPartition, int]:
        """Committed offsets of *group_id*; partitions without a commit are omitted."""

        def op(admin: KafkaAdminClient) -> Dict[TopicPartition, int]:
            raw = admin.list_consumer_group_offsets(group_id)
            return {tp: meta.offset for tp, meta in raw.items() if meta is not None and meta.offset >= 0}

        return self._call(cluster_id, "listConsumerGroupOffsets", op)

    # ---------- Offsets ----------
    def beginning_offsets(self, cluster_id: str, tps: Iterable[TopicPartition]) -> Dict[TopicPartition, int]:
        partitions = list(tps)
        return self._call_consumer(cluster_id, "beginningOffsets", lambda c: c.beginning_offsets(partitions))

    def end_offsets(self, cluster_id: str, tps: Iterable[TopicPartition]) -> Dict[TopicPartition, int]:
        partitions = list(tps)
        return self._call_consumer(cluster_id, "endOffsets", lambda c: c.end_offsets(partitions))

    # ---------- Cluster / Brokers ----------
    def describe_cluster(self, cluster_id: str) -> ClusterInfo:
        def op(admin: KafkaAdminClient) -> ClusterInfo:
            meta = admin.describe_cluster()
            controller = meta.get("controller_id")
            return ClusterInfo(
                cluster_id=meta.get("cluster_id"),
                controller_id=controller,
                brokers=[
                    Broker(
                        broker_id=b["node_id"],
                        host=b["host"],
                        port=b["port"],
                        rack=b.get("rack"),
                        controller=b["node_id"] == controller,
                    )
                    for b in meta.get("brokers", [])
                ],
            )

        return self._call(cluster_id, "describeCluster", op)

    def describe_broker_config(self, cluster_id: str, broker_id: int) -> Dict[str, Optional[str]]:
        resource = ConfigResource(ConfigResourceType.BROKER, str(broker_id))

        def op(admin: KafkaAdminClient) -> Dict[str, Optional[str]]:
            return _parse_configs(admin.describe_configs([resource])).get(str(broker_id), {})

        return self._call(cluster_id, "describeBrokerConfig", op)

    # ---------- Helpers ----------
    def _call(self, cluster_id: str, operation: str, fn: Callable[[KafkaAdminClient], T]) -> T:
        # unknown ids fail here, before anything is submitted
        self._registry.descriptor(cluster_id)
        return self._run(cluster_id, operation, lambda: fn(self._registry.get_or_create(cluster_id)))

    def _call_consumer(self, cluster_id: str, operation: str, fn: Callable[[Any], T]) -> T:
        descriptor = self._registry.descriptor(cluster_id)

        def op() -> T:
            with closing(self._registry.create_consumer(descriptor)) as consumer:
                return fn(consumer)

        return self._run(cluster_id, operation, op)

    def _run(self, cluster_id: str, operation: str, op: Callable[[], T]) -> T:
        timeout = self._settings.admin_default_timeout_sec
        logger.debug("Executing %s on cluster %s", operation, cluster_id)
        started = time.monotonic()
        future = self._executor.submit(op)
        try:
            result = future.result(timeout=timeout)
        except Exception as exc:
            future.cancel()
            error = translate(exc, cluster_id, operation)
            self._record(operation, error.code.value.lower(), started)
            if isinstance(error, OperationTimeoutError):
                logger.warning("%s on cluster %s timed out after %.1fs", operation, cluster_id, timeout)
            elif isinstance(error, RemoteOperationError):
                logger.error("%s on cluster %s failed: %s", operation, cluster_id, exc)
            if error is exc:
                raise
            raise error from exc
        self._record(operation, "success", started)
        return result

    @staticmethod
    def _record(operation: str, outcome: str, started: float) -> None:
        REMOTE_CALLS.labels(operation=operation, outcome=outcome).inc()
        REMOTE_CALL_SECONDS.labels(operation=operation).observe(time.monotonic() - started)


def _topic_description(raw: Dict[str, Any]) -> TopicDescription:
    return TopicDescription(
        name=raw["topic"],
        internal=bool(raw.get("is_internal", False)),
        partitions=sorted(
            (
                PartitionInfo(
                    partition=p["partition"],
                    leader=p.get("leader", -1),
                    replicas=list(p.get("replicas", [])),
                    isr=list(p.get("isr", [])),
                )
                for p in raw.get("partitions", [])
            ),
            key=lambda p: p.partition,
        ),
    )


def _consumer_group(info: Any, coordinator: Optional[int]) -> ConsumerGroup:
    members = []
    for m in info.members:
        assignment = getattr(m.member_assignment, "assignment", None) or []
        members.append(
            ConsumerMember(
                member_id=m.member_id,
                client_id=m.client_id,
                host=m.client_host,
                assignments=[
                    TopicPartitionAssignment(topic=topic, partition=p)
                    for topic, partitions in assignment
                    for p in partitions
                ],
            )
        )
    return ConsumerGroup(
        group_id=info.group,
        state=info.state or "Unknown",
        protocol_type=info.protocol_type or None,
        coordinator=coordinator if coordinator is not None else -1,
        members=members,
    )


def _parse_configs(responses: Any) -> Dict[str, Dict[str, Optional[str]]]:
    """Flatten DescribeConfigs responses into ``{resource_name: {key: value}}``.

    Sensitive values are reported as None.
    """
    if not isinstance(responses, list):
        responses = [responses]
    out: Dict[str, Dict[str, Optional[str]]] = {}
    for response in responses:
        for resource in getattr(response, "resources", []):
            # (error_code, error_message, resource_type, resource_name, config_entries)
            name, entries = resource[3], resource[4]
            configs: Dict[str, Optional[str]] = {}
            for entry in entries:
                key, value = entry[0], entry[1]
                sensitive = bool(entry[4]) if len(entry) > 4 else False
                configs[key] = None if sensitive else value
            out[str(name)] = configs
    return out
