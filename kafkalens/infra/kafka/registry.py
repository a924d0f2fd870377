"""One cached KafkaAdminClient per logical cluster."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Dict, Optional

from kafka import KafkaAdminClient, KafkaConsumer

from kafkalens.core.config import Settings, get_settings
from kafkalens.core.exceptions import ClusterConfigError, ClusterNotFoundError, KafkaLensError
from kafkalens.core.metrics import CACHED_CLIENTS
from kafkalens.domain.models.cluster import ClusterDescriptor, ConnectionTestResult
from kafkalens.domain.repository import ClusterRepository
from kafkalens.infra.kafka.errors import translate

logger = logging.getLogger(__name__)

_SASL_USER_PASSWORD = ("PLAIN", "SCRAM-SHA-256", "SCRAM-SHA-512")


class ClusterConnectionRegistry:
    """
    Lazily creates, caches and closes admin clients keyed by cluster id.

    Each cache slot is a ``Future``. The first caller for an id inserts the
    slot under a short lock and builds the client outside it; concurrent
    callers for the same id wait on that slot instead of connecting again.
    """

    def __init__(
        self,
        repository: ClusterRepository,
        settings: Optional[Settings] = None,
        admin_factory: Callable[..., KafkaAdminClient] = KafkaAdminClient,
        consumer_factory: Callable[..., KafkaConsumer] = KafkaConsumer,
    ) -> None:
        self._repository = repository
        self._settings = settings or get_settings()
        self._admin_factory = admin_factory
        self._consumer_factory = consumer_factory
        self._clients: Dict[str, Future] = {}
        self._lock = threading.Lock()

    # ---------- descriptors ----------
    def descriptor(self, cluster_id: str) -> ClusterDescriptor:
        """Return the descriptor for *cluster_id* or raise ClusterNotFoundError."""
        descriptor = self._repository.find_by_id(cluster_id)
        if descriptor is None:
            raise ClusterNotFoundError(cluster_id)
        return descriptor

    # ---------- bootstrap common kwargs ----------
    def client_kwargs(self, descriptor: ClusterDescriptor) -> dict:
        s = self._settings
        kw = dict(
            bootstrap_servers=list(descriptor.bootstrap_servers),
            client_id=s.client_id,
            request_timeout_ms=s.request_timeout_ms,
            metadata_max_age_ms=s.metadata_max_age_ms,
            api_version_auto_timeout_ms=s.api_version_auto_timeout_ms,
            connections_max_idle_ms=s.connections_max_idle_ms,
        )
        if s.kafka_api_version:
            kw["api_version"] = tuple(int(p) for p in s.kafka_api_version.split("."))

        security = descriptor.security
        if security.is_secure:
            kw["security_protocol"] = security.protocol
        if security.uses_sasl and security.sasl is not None:
            mechanism = security.sasl.mechanism.upper()
            if mechanism not in _SASL_USER_PASSWORD:
                raise ClusterConfigError(
                    f"Unsupported SASL mechanism: {security.sasl.mechanism}",
                    {"clusterId": descriptor.id},
                )
            kw.update(
                sasl_mechanism=mechanism,
                sasl_plain_username=security.sasl.username,
                sasl_plain_password=security.sasl.password,
            )
        if security.uses_ssl and security.ssl is not None:
            ssl = security.ssl
            kw["ssl_check_hostname"] = ssl.check_hostname
            for key, value in (
                ("ssl_cafile", ssl.cafile),
                ("ssl_certfile", ssl.certfile),
                ("ssl_keyfile", ssl.keyfile),
                ("ssl_password", ssl.password),
            ):
                if value is not None:
                    kw[key] = value

        # cluster-specific overrides win
        kw.update(descriptor.properties)
        return kw

    def consumer_kwargs(self, descriptor: ClusterDescriptor, group_id: Optional[str] = None) -> dict:
        s = self._settings
        kw = self.client_kwargs(descriptor)
        kw.update(
            group_id=group_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
            max_poll_records=s.consumer_max_poll_records,
            session_timeout_ms=s.consumer_session_timeout_ms,
        )
        return kw

    def create_consumer(self, descriptor: ClusterDescriptor, group_id: Optional[str] = None) -> KafkaConsumer:
        """Build a standalone consumer; the caller owns closing it."""
        logger.debug("Creating KafkaConsumer for cluster: %s (group=%s)", descriptor.id, group_id)
        return self._consumer_factory(**self.consumer_kwargs(descriptor, group_id))

    # ---------- admin client cache ----------
    def get_or_create(self, cluster_id: str) -> KafkaAdminClient:
        """Return the cached admin client for *cluster_id*, creating it once."""
        descriptor = self.descriptor(cluster_id)

        while True:
            with self._lock:
                slot = self._clients.get(cluster_id)
                owner = slot is None
                if owner:
                    slot = Future()
                    self._clients[cluster_id] = slot

            if owner:
                try:
                    client = self._create_admin(descriptor)
                except BaseException as exc:
                    with self._lock:
                        if self._clients.get(cluster_id) is slot:
                            del self._clients[cluster_id]
                    slot.set_exception(exc)
                    raise
                slot.set_result(client)
            else:
                client = slot.result()

            # an evict() that raced with creation has already closed this client
            with self._lock:
                current = self._clients.get(cluster_id) is slot
            if current:
                CACHED_CLIENTS.set(self.cached_count())
                return client
            logger.info("Admin client for cluster %s was evicted while connecting; reconnecting", cluster_id)

    def recreate(self, cluster_id: str) -> KafkaAdminClient:
        self.evict(cluster_id)
        return self.get_or_create(cluster_id)

    def evict(self, cluster_id: str) -> None:
        """Close and forget the client for *cluster_id*; no-op when absent."""
        with self._lock:
            slot = self._clients.pop(cluster_id, None)
        CACHED_CLIENTS.set(self.cached_count())
        if slot is None:
            return
        # a creation still in flight is closed as soon as it completes
        slot.add_done_callback(lambda f: self._close(cluster_id, f))

    def evict_all(self) -> None:
        logger.info("Closing all admin clients")
        with self._lock:
            ids = list(self._clients)
        for cluster_id in ids:
            self.evict(cluster_id)

    def is_cached(self, cluster_id: str) -> bool:
        with self._lock:
            return cluster_id in self._clients

    def cached_count(self) -> int:
        with self._lock:
            return len(self._clients)

    # ---------- connection test ----------
    def test_connection(self, cluster_id: str) -> ConnectionTestResult:
        """Describe the cluster and report the outcome as data.

        Unknown ids still raise ClusterNotFoundError; every other failure is
        returned as an unsuccessful result and drops the cached client.
        """
        descriptor = self.descriptor(cluster_id)
        logger.info("Testing connection to cluster: %s", cluster_id)
        started = time.monotonic()
        try:
            self.get_or_create(cluster_id).describe_cluster()
        except Exception as exc:
            elapsed = int((time.monotonic() - started) * 1000)
            error = translate(exc, cluster_id, "testConnection")
            cause = exc.__cause__ or exc
            logger.warning("Connection test failed for cluster %s: %s", cluster_id, cause)
            self.evict(cluster_id)
            return ConnectionTestResult(
                success=False,
                cluster_id=descriptor.id,
                cluster_name=descriptor.name,
                response_time_ms=elapsed,
                error_message=error.message if cause is error else f"{error.message}: {cause}",
            )
        elapsed = int((time.monotonic() - started) * 1000)
        logger.info("Connection test succeeded for cluster: %s (%dms)", cluster_id, elapsed)
        return ConnectionTestResult(
            success=True,
            cluster_id=descriptor.id,
            cluster_name=descriptor.name,
            response_time_ms=elapsed,
        )

    # ---------- internals ----------
    def _create_admin(self, descriptor: ClusterDescriptor) -> KafkaAdminClient:
        logger.info("Creating KafkaAdminClient for cluster: %s (%s)", descriptor.id, descriptor.name)
        kwargs = self.client_kwargs(descriptor)
        try:
            return self._admin_factory(**kwargs)
        except KafkaLensError:
            raise
        except Exception as exc:
            logger.error("Failed to create KafkaAdminClient for cluster %s: %s", descriptor.id, exc)
            raise translate(exc, descriptor.id, "createAdminClient") from exc

    def _close(self, cluster_id: str, slot: Future) -> None:
        if slot.cancelled() or slot.exception() is not None:
            return
        logger.info("Closing KafkaAdminClient for cluster: %s", cluster_id)
        try:
            slot.result().close()
        except Exception as exc:
            logger.warning("Error closing KafkaAdminClient for cluster %s: %s", cluster_id, exc)
