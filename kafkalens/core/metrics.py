"""Prometheus instruments for remote calls and sampling."""
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

REGISTRY = CollectorRegistry()

REMOTE_CALLS = Counter(
    "kafka_lens_remote_calls_total",
    "Remote Kafka calls by operation and outcome",
    ["operation", "outcome"],
    registry=REGISTRY,
)
REMOTE_CALL_SECONDS = Histogram(
    "kafka_lens_remote_call_seconds",
    "Wall-clock duration of remote Kafka calls",
    ["operation"],
    registry=REGISTRY,
)
SAMPLED_MESSAGES = Counter(
    "kafka_lens_sampled_messages_total",
    "Records returned by the message sampler",
    registry=REGISTRY,
)
CACHED_CLIENTS = Gauge(
    "kafka_lens_cached_clients",
    "Admin clients currently held by the connection registry",
    registry=REGISTRY,
)
