"""Business-level operations about configured clusters."""
from __future__ import annotations

import logging
from typing import List

from kafkalens.domain.models.cluster import ClusterSummary, ConnectionTestResult
from kafkalens.domain.repository import ClusterRepository
from kafkalens.infra.kafka.registry import ClusterConnectionRegistry

logger = logging.getLogger(__name__)


class ClusterService:
    """Lists descriptors and runs connection checks."""

    def __init__(self, repository: ClusterRepository, registry: ClusterConnectionRegistry) -> None:
        self._repository = repository
        self._registry = registry

    # --------------------------------------------------------------------- #
    # Cluster-level                                                          #
    # --------------------------------------------------------------------- #
    def list_clusters(self) -> List[ClusterSummary]:
        """Every configured cluster, sorted by id. No network access."""
        return [ClusterSummary.of(d) for d in sorted(self._repository.find_all(), key=lambda d: d.id)]

    def get_cluster(self, cluster_id: str) -> ClusterSummary:
        """Return the summary for *cluster_id* or raise ClusterNotFoundError."""
        return ClusterSummary.of(self._registry.descriptor(cluster_id))

    def test_connection(self, cluster_id: str) -> ConnectionTestResult:
        return self._registry.test_connection(cluster_id)

    def reload(self) -> int:
        """Re-read descriptors and drop every cached client; returns the new cluster count."""
        logger.info("Reloading cluster configuration")
        self._repository.reload()
        self._registry.evict_all()
        return len(self._repository.find_all())
