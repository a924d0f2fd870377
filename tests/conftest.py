"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import pytest
from kafka import KafkaAdminClient, KafkaConsumer

from kafkalens.core.config import Settings
from kafkalens.domain.models.cluster import ClusterDescriptor, SaslConfig, SecurityConfig, SslConfig
from kafkalens.domain.repository import InMemoryClusterRepository
from kafkalens.infra.kafka.registry import ClusterConnectionRegistry


# Settings / descriptors
@pytest.fixture
def test_settings():
    """Settings with short deadlines so timeout tests stay fast."""
    return Settings(
        admin_default_timeout_sec=0.5,
        admin_max_workers=4,
        message_poll_timeout_ms=100,
    )


@pytest.fixture
def local_cluster():
    return ClusterDescriptor(id="local", name="Local", bootstrap_servers="localhost:9092")


@pytest.fixture
def secure_cluster():
    return ClusterDescriptor(
        id="prod",
        name="Production",
        environment="production",
        bootstrap_servers=["kafka-1:9093", "kafka-2:9093"],
        security=SecurityConfig(
            protocol="sasl_ssl",
            sasl=SaslConfig(mechanism="SCRAM-SHA-512", username="lens", password="secret"),
            ssl=SslConfig(cafile="/etc/ca.pem"),
        ),
        properties={"request_timeout_ms": 20000},
    )


@pytest.fixture
def repository(local_cluster, secure_cluster):
    return InMemoryClusterRepository([local_cluster, secure_cluster])


# Kafka client doubles
@pytest.fixture
def admin_client():
    """A KafkaAdminClient double."""
    return MagicMock(spec=KafkaAdminClient, name="KafkaAdminClient")


@pytest.fixture
def admin_factory(admin_client):
    return MagicMock(name="admin_factory", return_value=admin_client)


@pytest.fixture
def consumer():
    """A KafkaConsumer double that returns no records by default."""
    mock = MagicMock(spec=KafkaConsumer, name="KafkaConsumer")
    mock.poll.return_value = {}
    return mock


@pytest.fixture
def consumer_factory(consumer):
    return MagicMock(name="consumer_factory", return_value=consumer)


@pytest.fixture
def registry(repository, test_settings, admin_factory, consumer_factory):
    return ClusterConnectionRegistry(
        repository,
        test_settings,
        admin_factory=admin_factory,
        consumer_factory=consumer_factory,
    )
