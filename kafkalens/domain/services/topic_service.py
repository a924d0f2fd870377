"""Topic queries for the dashboard."""
from __future__ import annotations

from typing import List, Optional

from kafka import TopicPartition

from kafkalens.domain.models.topic import Topic, TopicDescription, TopicDetail
from kafkalens.infra.kafka.gateway import AdminGateway


class TopicService:
    """Stateless wrapper combining gateway calls into list and detail views."""

    def __init__(self, gateway: AdminGateway) -> None:
        self._gateway = gateway

    # ------------------------------------------------------------------ #
    # Queries                                                             #
    # ------------------------------------------------------------------ #
    def list_topics(
        self,
        cluster_id: str,
        include_internal: bool = False,
        name_filter: Optional[str] = None,
    ) -> List[Topic]:
        """Return topics sorted by name, optionally filtered by case-insensitive substring."""
        topics = self._gateway.describe_topics(cluster_id)
        if not include_internal:
            topics = [t for t in topics if not t.internal]
        if name_filter:
            needle = name_filter.lower()
            topics = [t for t in topics if needle in t.name.lower()]
        return sorted((_summary(t) for t in topics), key=lambda t: t.name)

    def get_topic(self, cluster_id: str, name: str) -> TopicDetail:
        """Partitions with offset ranges plus topic configuration.

        Raises ResourceNotFoundError when the topic does not exist.
        """
        description = self._gateway.describe_topic(cluster_id, name)
        tps = [TopicPartition(name, p.partition) for p in description.partitions]
        beginning = self._gateway.beginning_offsets(cluster_id, tps) if tps else {}
        end = self._gateway.end_offsets(cluster_id, tps) if tps else {}
        configs = self._gateway.describe_topic_configs(cluster_id, [name]).get(name, {})

        partitions = [
            p.model_copy(
                update={
                    "beginning_offset": beginning.get(TopicPartition(name, p.partition)),
                    "end_offset": end.get(TopicPartition(name, p.partition)),
                }
            )
            for p in description.partitions
        ]
        return TopicDetail(
            name=description.name,
            partition_count=len(partitions),
            replication_factor=description.replication_factor,
            internal=description.internal,
            partitions=partitions,
            configs=configs,
        )


def _summary(t: TopicDescription) -> Topic:
    return Topic(
        name=t.name,
        partition_count=len(t.partitions),
        replication_factor=t.replication_factor,
        internal=t.internal,
    )
