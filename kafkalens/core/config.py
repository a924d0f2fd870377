# kafkalens/core/config.py
import json
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """
    Central application settings loaded from environment variables (and .env).

    Notes
    -----
    - Every variable is prefixed with ``KAFKA_LENS_``, e.g.
      ``KAFKA_LENS_CLUSTERS_CONFIG_PATH=/etc/kafka-lens/clusters.yml``.
    - Cluster definitions themselves live in the YAML file, not here.
    - `cors_allow_origins` accepts JSON array or comma-separated string.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KAFKA_LENS_",
        extra="ignore",
    )

    # ---------- Cluster descriptors ----------
    clusters_config_path: str = Field("clusters.yml")

    # ---------- Kafka client/admin ----------
    client_id: str = "kafka-lens"
    kafka_api_version: str | None = None

    # Client timeouts (ms)
    request_timeout_ms: int = 30_000
    metadata_max_age_ms: int = 30_000
    api_version_auto_timeout_ms: int = 10_000
    connections_max_idle_ms: int = 540_000

    # Upper bound for a single admin call, as seen by the caller (seconds)
    admin_default_timeout_sec: float = Field(default=60.0, gt=0)
    admin_max_workers: int = Field(default=16, ge=1, le=128)
    admin_close_timeout_sec: float = 5.0

    # ---------- Message sampling ----------
    message_default_limit: int = Field(default=100, ge=1, le=1000)
    message_max_limit: int = Field(default=1000, ge=1, le=1000)
    message_poll_timeout_ms: int = Field(default=5_000, ge=1)
    message_max_empty_polls: int = Field(default=3, ge=1)
    consumer_max_poll_records: int = 500
    consumer_session_timeout_ms: int = 10_000
    temp_group_prefix: str = "kafka-lens-temp-"

    # ---------- Lag thresholds ----------
    lag_warning_threshold: int = 1_000
    lag_critical_threshold: int = 10_000

    # ---------- API auth ----------
    auth_enabled: bool = False
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # ---------- Observability ----------
    metrics_enabled: bool = True
    log_level: str = "INFO"

    # ---------- CORS ----------
    cors_allow_origins: list[str] | None = None

    @field_validator("cors_allow_origins", mode="before")
    def _parse_cors_origins(cls, v):
        """Accept JSON array or comma-separated string."""
        if v is None:
            return None
        if isinstance(v, str):
            try:
                parsed = json.loads(v)  # JSON array
            except ValueError:
                return [s.strip() for s in v.split(",") if s.strip()]
            if isinstance(parsed, list):
                return [str(s).strip() for s in parsed if str(s).strip()]
            return [str(parsed).strip()]
        return v


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return settings
