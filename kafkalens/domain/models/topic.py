"""Topic metadata models used by the REST routes."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class PartitionInfo(BaseModel):
    """Leader/replica/ISR layout plus offset range of one partition."""

    partition: int = Field(..., ge=0)
    leader: int = -1
    replicas: List[int] = Field(default_factory=list)
    isr: List[int] = Field(default_factory=list)
    beginning_offset: int | None = None
    end_offset: int | None = None

    @property
    def under_replicated(self) -> bool:
        return len(self.isr) < len(self.replicas)


class TopicDescription(BaseModel):
    """Normalized describe-topics entry."""

    name: str
    internal: bool = False
    partitions: List[PartitionInfo] = Field(default_factory=list)

    @property
    def replication_factor(self) -> int:
        return len(self.partitions[0].replicas) if self.partitions else 0


class Topic(BaseModel):
    """List view of a topic."""

    name: str
    partition_count: int = Field(..., ge=0)
    replication_factor: int = Field(..., ge=0)
    internal: bool = False


class TopicDetail(Topic):
    """Detail view: partitions with offsets and topic configuration."""

    partitions: List[PartitionInfo] = Field(default_factory=list)
    configs: Dict[str, str | None] = Field(default_factory=dict)
