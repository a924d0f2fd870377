"""Message-sampling request and record models."""
from __future__ import annotations

import enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class TimestampType(str, enum.Enum):
    CREATE_TIME = "CreateTime"
    LOG_APPEND_TIME = "LogAppendTime"
    NO_TIMESTAMP_TYPE = "NoTimestampType"


class MessageFetchRequest(BaseModel):
    """Which window of which partition to sample.

    Deliberately unconstrained: the sampler validates it so that bad input
    surfaces as a domain validation error rather than a pydantic one.
    """

    model_config = ConfigDict(frozen=True)

    topic: str
    partition: int
    offset: int | None = None
    limit: int | None = None


class SampledMessage(BaseModel):
    """One decoded record. Keys, values and header values are text or base64."""

    model_config = ConfigDict(frozen=True)

    topic: str
    partition: int = Field(..., ge=0)
    offset: int = Field(..., ge=0)
    timestamp: int
    timestamp_type: TimestampType
    key: str | None = None
    value: str | None = None
    headers: Dict[str, str | None] = Field(default_factory=dict)
