"""Feeds gateway offsets into the pure lag computation."""
from __future__ import annotations

import logging
from typing import Optional

from kafkalens.core.config import Settings, get_settings
from kafkalens.domain.lag import group_summary
from kafkalens.domain.models.consumer_group import GroupLagSummary
from kafkalens.infra.kafka.gateway import AdminGateway

logger = logging.getLogger(__name__)


class LagService:
    """Committed vs. end offsets for a consumer group."""

    def __init__(self, gateway: AdminGateway, settings: Optional[Settings] = None) -> None:
        self._gateway = gateway
        self._settings = settings or get_settings()

    def group_lag(self, cluster_id: str, group_id: str) -> GroupLagSummary:
        committed = self._gateway.list_consumer_group_offsets(cluster_id, group_id)
        end = self._gateway.end_offsets(cluster_id, committed.keys()) if committed else {}
        summary = group_summary(
            group_id,
            committed,
            end,
            warning=self._settings.lag_warning_threshold,
            critical=self._settings.lag_critical_threshold,
        )
        logger.info(
            "Lag for group %s on cluster %s: total=%d partitions=%d",
            group_id, cluster_id, summary.total_lag, summary.partition_count,
        )
        return summary
