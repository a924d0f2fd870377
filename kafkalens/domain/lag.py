"""Pure lag arithmetic: offsets in, operator-facing status out."""
from __future__ import annotations

from typing import Mapping

from kafka import TopicPartition

from kafkalens.domain.models.consumer_group import GroupLagSummary, LagStatus, PartitionLag

WARNING_THRESHOLD = 1_000
CRITICAL_THRESHOLD = 10_000


def lag(committed: int, end: int) -> int:
    """Messages the group still has to consume; never negative."""
    return max(0, end - committed)


def lag_status(
    value: int,
    warning: int = WARNING_THRESHOLD,
    critical: int = CRITICAL_THRESHOLD,
) -> LagStatus:
    """Classify a lag value.

    >>> lag_status(999), lag_status(1000), lag_status(10000)
    ('normal', 'warning', 'critical')
    """
    if value >= critical:
        return "critical"
    if value >= warning:
        return "warning"
    return "normal"


def group_summary(
    group_id: str,
    committed_offsets: Mapping[TopicPartition, int],
    end_offsets: Mapping[TopicPartition, int],
    warning: int = WARNING_THRESHOLD,
    critical: int = CRITICAL_THRESHOLD,
) -> GroupLagSummary:
    """Build the lag summary for every partition the group has committed to.

    Parameters
    ----------
    group_id : str
        Consumer group the offsets belong to.
    committed_offsets : Mapping[TopicPartition, int]
        Last committed offset per partition.
    end_offsets : Mapping[TopicPartition, int]
        Log end offset per partition. Partitions missing here are skipped.

    Returns
    -------
    GroupLagSummary
        Partitions ordered by (topic, partition); an empty committed mapping
        yields an empty summary with zero total lag.
    """
    partitions = []
    for tp in sorted(committed_offsets, key=lambda t: (t.topic, t.partition)):
        end = end_offsets.get(tp)
        if end is None:
            continue
        committed = committed_offsets[tp]
        value = lag(committed, end)
        partitions.append(
            PartitionLag(
                group_id=group_id,
                topic=tp.topic,
                partition=tp.partition,
                committed_offset=committed,
                end_offset=end,
                lag=value,
                status=lag_status(value, warning, critical),
            )
        )
    return GroupLagSummary(
        group_id=group_id,
        total_lag=sum(p.lag for p in partitions),
        partitions=partitions,
    )
