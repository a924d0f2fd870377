"""Where cluster descriptors come from.

The YAML layout mirrors what operators already write for other Kafka tools::

    defaults:
      security:
        protocol: SASL_SSL
      properties:
        request_timeout_ms: 20000
    clusters:
      - id: local
        name: Local
        bootstrap-servers: localhost:9092
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import yaml
from pydantic import ValidationError

from kafkalens.core.exceptions import ClusterConfigError
from kafkalens.domain.models.cluster import ClusterDescriptor, SaslConfig, SecurityConfig, SslConfig

logger = logging.getLogger(__name__)


class ClusterRepository(Protocol):
    def find_all(self) -> List[ClusterDescriptor]: ...

    def find_by_id(self, cluster_id: str) -> Optional[ClusterDescriptor]: ...

    def exists_by_id(self, cluster_id: str) -> bool: ...

    def find_by_environment(self, environment: str) -> List[ClusterDescriptor]: ...

    def reload(self) -> None: ...


class InMemoryClusterRepository:
    """Fixed set of descriptors, mostly for tests and embedding."""

    def __init__(self, descriptors: Iterable[ClusterDescriptor] = ()) -> None:
        self._clusters: Dict[str, ClusterDescriptor] = {d.id: d for d in descriptors}

    def find_all(self) -> List[ClusterDescriptor]:
        return list(self._clusters.values())

    def find_by_id(self, cluster_id: str) -> Optional[ClusterDescriptor]:
        return self._clusters.get(cluster_id)

    def exists_by_id(self, cluster_id: str) -> bool:
        return cluster_id in self._clusters

    def find_by_environment(self, environment: str) -> List[ClusterDescriptor]:
        env = environment.lower()
        return [c for c in self._clusters.values() if c.environment.lower() == env]

    def reload(self) -> None:
        return None


class YamlClusterRepository(InMemoryClusterRepository):
    """Descriptors loaded from a YAML file; `reload()` re-reads it."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)
        self._reload_lock = threading.Lock()
        self.reload()

    def reload(self) -> None:
        with self._reload_lock:
            logger.info("Loading cluster configuration from: %s", self._path)
            if not self._path.exists():
                logger.warning("Cluster configuration file not found: %s", self._path)
                self._clusters = {}
                return
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    document = yaml.safe_load(fh)
            except (OSError, yaml.YAMLError) as exc:
                raise ClusterConfigError(f"Failed to load cluster configuration: {exc}") from exc
            self._clusters = parse_clusters(document)
            logger.info("Loaded %d clusters from configuration", len(self._clusters))


def parse_clusters(document: Any) -> Dict[str, ClusterDescriptor]:
    """Turn a parsed YAML document into descriptors keyed by id.

    Entries that fail validation are logged and skipped so one typo does not
    take every cluster offline.
    """
    if not isinstance(document, dict) or not document.get("clusters"):
        logger.warning("No clusters defined in configuration")
        return {}
    if not isinstance(document["clusters"], list):
        raise ClusterConfigError("'clusters' must be a list")

    defaults = document.get("defaults") or {}
    out: Dict[str, ClusterDescriptor] = {}
    for entry in document["clusters"]:
        try:
            descriptor = _parse_cluster(entry, defaults)
        except (ValidationError, TypeError, ValueError, AttributeError) as exc:
            ident = entry.get("id") if isinstance(entry, dict) else entry
            logger.error("Failed to parse cluster %s: %s", ident, exc)
            continue
        out[descriptor.id] = descriptor
        logger.debug("Loaded cluster: %s (%s)", descriptor.id, descriptor.name)
    return out


def _parse_cluster(data: Dict[str, Any], defaults: Dict[str, Any]) -> ClusterDescriptor:
    security = {**(defaults.get("security") or {}), **(data.get("security") or {})}
    properties = {**(defaults.get("properties") or {}), **(data.get("properties") or {})}
    return ClusterDescriptor(
        id=data.get("id"),
        name=data.get("name") or data.get("id"),
        description=data.get("description"),
        environment=data.get("environment", "development"),
        bootstrap_servers=data.get("bootstrap-servers") or data.get("bootstrap_servers"),
        security=_parse_security(security),
        properties={k: v for k, v in properties.items() if v is not None},
    )


def _parse_security(data: Dict[str, Any]) -> SecurityConfig:
    if not data:
        return SecurityConfig()
    sasl = data.get("sasl")
    ssl = data.get("ssl")
    return SecurityConfig(
        protocol=data.get("protocol", "PLAINTEXT"),
        sasl=SaslConfig(**_snake(sasl)) if sasl else None,
        ssl=SslConfig(**_snake(ssl)) if ssl else None,
    )


def _snake(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k.replace("-", "_"): v for k, v in d.items()}
