"""Cluster descriptors, broker snapshots and connection-test results."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SaslConfig(BaseModel):
    """SASL credentials (PLAIN or SCRAM-SHA-256/512)."""

    model_config = ConfigDict(frozen=True)

    mechanism: str = "PLAIN"
    username: str | None = None
    password: str | None = None


class SslConfig(BaseModel):
    """PEM material for TLS connections."""

    model_config = ConfigDict(frozen=True)

    cafile: str | None = None
    certfile: str | None = None
    keyfile: str | None = None
    password: str | None = None
    check_hostname: bool = True


class SecurityConfig(BaseModel):
    """Transport security of a cluster."""

    model_config = ConfigDict(frozen=True)

    protocol: str = "PLAINTEXT"
    sasl: SaslConfig | None = None
    ssl: SslConfig | None = None

    @field_validator("protocol")
    @classmethod
    def _upper(cls, v: str) -> str:
        return (v or "PLAINTEXT").strip().upper()

    @property
    def is_secure(self) -> bool:
        return self.protocol != "PLAINTEXT"

    @property
    def uses_sasl(self) -> bool:
        return "SASL" in self.protocol

    @property
    def uses_ssl(self) -> bool:
        return "SSL" in self.protocol


class ClusterDescriptor(BaseModel):
    """Static, immutable definition of one logical cluster."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str | None = None
    environment: str = "development"
    bootstrap_servers: List[str] = Field(..., min_length=1)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Cluster id must not be blank")
        return v

    @field_validator("bootstrap_servers", mode="before")
    @classmethod
    def _split_servers(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return [str(s).strip() for s in v if str(s).strip()]

    @property
    def bootstrap(self) -> str:
        return ",".join(self.bootstrap_servers)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class ClusterSummary(BaseModel):
    """What the dashboard lists for every configured cluster."""

    id: str
    name: str
    description: str | None = None
    environment: str
    bootstrap_servers: List[str]
    secure: bool

    @classmethod
    def of(cls, descriptor: ClusterDescriptor) -> "ClusterSummary":
        return cls(
            id=descriptor.id,
            name=descriptor.name,
            description=descriptor.description,
            environment=descriptor.environment,
            bootstrap_servers=list(descriptor.bootstrap_servers),
            secure=descriptor.security.is_secure,
        )


class ConnectionTestResult(BaseModel):
    """Outcome of the operator's "test connection" action."""

    success: bool
    cluster_id: str
    cluster_name: str | None = None
    response_time_ms: int | None = None
    error_message: str | None = None
    tested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Broker(BaseModel):
    """Snapshot of a single broker."""

    broker_id: int = Field(..., ge=0, description="Numeric broker ID")
    host: str
    port: int = Field(..., ge=1, le=65535)
    rack: str | None = None
    controller: bool = False


class ClusterInfo(BaseModel):
    """Raw describe-cluster result."""

    cluster_id: str | None = None
    controller_id: int | None = None
    brokers: List[Broker] = Field(default_factory=list)

    @property
    def broker_count(self) -> int:
        return len(self.brokers)
