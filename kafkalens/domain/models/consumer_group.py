"""Consumer-group DTOs and lag summaries."""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

LagStatus = Literal["normal", "warning", "critical"]


class TopicPartitionAssignment(BaseModel):
    topic: str
    partition: int = Field(..., ge=0)


class ConsumerMember(BaseModel):
    """One member of a group and the partitions assigned to it."""

    member_id: str
    client_id: str
    host: str
    assignments: List[TopicPartitionAssignment] = Field(default_factory=list)


class ConsumerGroupListing(BaseModel):
    group_id: str
    protocol_type: str | None = None


class ConsumerGroup(BaseModel):
    """Aggregate view of a consumer group."""

    group_id: str = Field(..., min_length=1)
    state: str = "Unknown"  # Stable / PreparingRebalance / Empty / Dead …
    protocol_type: str | None = None
    coordinator: int = -1
    members: List[ConsumerMember] = Field(default_factory=list)

    @computed_field
    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def is_stable(self) -> bool:
        return self.state == "Stable"

    @property
    def is_rebalancing(self) -> bool:
        return self.state in ("PreparingRebalance", "CompletingRebalance")


class PartitionLag(BaseModel):
    """Lag information for one partition."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    topic: str
    partition: int = Field(..., ge=0)
    committed_offset: int
    end_offset: int
    lag: int = Field(..., ge=0)
    status: LagStatus = "normal"


class TopicLagSummary(BaseModel):
    topic: str
    total_lag: int = Field(..., ge=0)
    partitions: List[PartitionLag] = Field(default_factory=list)

    @computed_field
    @property
    def partition_count(self) -> int:
        return len(self.partitions)


class GroupLagSummary(BaseModel):
    """Lag of a group across every partition it has committed to."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    total_lag: int = Field(0, ge=0)
    partitions: List[PartitionLag] = Field(default_factory=list)

    @computed_field
    @property
    def partition_count(self) -> int:
        return len(self.partitions)

    @computed_field
    @property
    def warning_count(self) -> int:
        return sum(1 for p in self.partitions if p.status != "normal")

    @computed_field
    @property
    def critical_count(self) -> int:
        return sum(1 for p in self.partitions if p.status == "critical")

    @computed_field
    @property
    def topics(self) -> List[TopicLagSummary]:
        by_topic: Dict[str, List[PartitionLag]] = defaultdict(list)
        for p in self.partitions:
            by_topic[p.topic].append(p)
        return [
            TopicLagSummary(topic=t, total_lag=sum(p.lag for p in parts), partitions=parts)
            for t, parts in sorted(by_topic.items())
        ]
