"""Operations for consumer groups: list, describe, members."""
from __future__ import annotations

from typing import List

from kafkalens.domain.models.consumer_group import ConsumerGroup, ConsumerGroupListing, ConsumerMember
from kafkalens.infra.kafka.gateway import AdminGateway


class ConsumerService:
    """Group-level queries."""

    def __init__(self, gateway: AdminGateway) -> None:
        self._gateway = gateway

    # ------------------------------------------------------------------ #
    # Queries                                                             #
    # ------------------------------------------------------------------ #
    def list_groups(self, cluster_id: str) -> List[ConsumerGroupListing]:
        """Return consumer group ids on the cluster, sorted."""
        return sorted(self._gateway.list_consumer_groups(cluster_id), key=lambda g: g.group_id)

    def get_group(self, cluster_id: str, group_id: str) -> ConsumerGroup:
        return self._gateway.describe_consumer_group(cluster_id, group_id)

    def get_members(self, cluster_id: str, group_id: str) -> List[ConsumerMember]:
        return self.get_group(cluster_id, group_id).members
