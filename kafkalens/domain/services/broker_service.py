"""Broker snapshots and configuration."""
from __future__ import annotations

from typing import Dict, List, Optional

from kafkalens.core.exceptions import ResourceNotFoundError
from kafkalens.domain.models.cluster import Broker
from kafkalens.infra.kafka.gateway import AdminGateway


class BrokerService:
    """Coordinates broker-level queries using the gateway."""

    def __init__(self, gateway: AdminGateway) -> None:
        self._gateway = gateway

    def list_brokers(self, cluster_id: str) -> List[Broker]:
        """Return broker snapshots sorted by id, with the controller flagged."""
        info = self._gateway.describe_cluster(cluster_id)
        return sorted(info.brokers, key=lambda b: b.broker_id)

    def get_broker(self, cluster_id: str, broker_id: int) -> Broker:
        """Return **Broker** or raise ResourceNotFoundError."""
        for b in self.list_brokers(cluster_id):
            if b.broker_id == broker_id:
                return b
        raise ResourceNotFoundError.broker(cluster_id, broker_id)

    def get_broker_config(self, cluster_id: str, broker_id: int) -> Dict[str, Optional[str]]:
        self.get_broker(cluster_id, broker_id)
        return dict(sorted(self._gateway.describe_broker_config(cluster_id, broker_id).items()))
