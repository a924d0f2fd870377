"""
Tests for AdminGateway: normalization, deadlines and error mapping.
"""

import threading
from types import SimpleNamespace

import pytest
from kafka import TopicPartition
from kafka.errors import (
    GroupAuthorizationFailedError,
    KafkaTimeoutError,
    NoBrokersAvailable,
    SaslAuthenticationFailedError,
    UnknownTopicOrPartitionError,
)

from kafkalens.core.exceptions import (
    AuthenticationFailureError,
    AuthorizationFailureError,
    ClusterNotFoundError,
    ConnectionFailureError,
    ErrorCode,
    OperationTimeoutError,
    RemoteErrorKind,
    ResourceNotFoundError,
)
from kafkalens.infra.kafka.gateway import AdminGateway


@pytest.fixture
def gateway(registry, test_settings):
    gw = AdminGateway(registry, test_settings)
    yield gw
    gw.shutdown()


def _topic(name, partitions=2, internal=False, error_code=0):
    return {
        "error_code": error_code,
        "topic": name,
        "is_internal": internal,
        "partitions": [
            {"error_code": 0, "partition": p, "leader": 1, "replicas": [1, 2, 3], "isr": [1, 2]}
            for p in reversed(range(partitions))
        ],
    }


class TestTopics:
    def test_describe_topics_normalizes(self, gateway, admin_client):
        admin_client.describe_topics.return_value = [_topic("orders", partitions=3)]

        [orders] = gateway.describe_topics("local", ["orders"])

        assert orders.name == "orders"
        assert [p.partition for p in orders.partitions] == [0, 1, 2]
        assert orders.replication_factor == 3
        assert orders.partitions[0].under_replicated
        admin_client.describe_topics.assert_called_once_with(["orders"])

    def test_list_topics_hides_internal(self, gateway, admin_client):
        admin_client.describe_topics.return_value = [
            _topic("payments"),
            _topic("__consumer_offsets", internal=True),
            _topic("orders"),
        ]

        assert gateway.list_topics("local") == ["orders", "payments"]
        assert gateway.list_topics("local", include_internal=True) == [
            "__consumer_offsets", "orders", "payments",
        ]

    def test_unknown_topic_error_code(self, gateway, admin_client):
        admin_client.describe_topics.return_value = [
            _topic("ghost", partitions=0, error_code=UnknownTopicOrPartitionError.errno)
        ]

        with pytest.raises(ResourceNotFoundError) as exc_info:
            gateway.describe_topic("local", "ghost")

        assert exc_info.value.code == ErrorCode.TOPIC_NOT_FOUND

    def test_unknown_topic_exception(self, gateway, admin_client):
        admin_client.describe_topics.side_effect = UnknownTopicOrPartitionError()

        with pytest.raises(ResourceNotFoundError):
            gateway.describe_topic("local", "ghost")

    def test_topic_configs_hide_sensitive_values(self, gateway, admin_client):
        entries = [
            ("retention.ms", "604800000", False, False, False, []),
            ("sasl.jaas.config", "secret", False, False, True, []),
        ]
        admin_client.describe_configs.return_value = [
            SimpleNamespace(resources=[(0, "", 2, "orders", entries)])
        ]

        configs = gateway.describe_topic_configs("local", ["orders"])

        assert configs == {"orders": {"retention.ms": "604800000", "sasl.jaas.config": None}}


class TestConsumerGroups:
    def test_list_consumer_groups(self, gateway, admin_client):
        admin_client.list_consumer_groups.return_value = [("billing", "consumer"), ("legacy", "")]

        groups = gateway.list_consumer_groups("local")

        assert [(g.group_id, g.protocol_type) for g in groups] == [("billing", "consumer"), ("legacy", None)]

    def test_describe_consumer_group(self, gateway, admin_client):
        member = SimpleNamespace(
            member_id="m-1",
            client_id="billing-1",
            client_host="/10.0.0.5",
            member_metadata=None,
            member_assignment=SimpleNamespace(assignment=[("orders", [0, 1])]),
        )
        admin_client.describe_consumer_groups.return_value = [
            SimpleNamespace(group="billing", state="Stable", protocol_type="consumer", members=[member])
        ]
        admin_client._find_coordinator_ids.return_value = {"billing": 2}

        group = gateway.describe_consumer_group("local", "billing")

        assert group.is_stable
        assert group.coordinator == 2
        assert group.member_count == 1
        assert [(a.topic, a.partition) for a in group.members[0].assignments] == [("orders", 0), ("orders", 1)]
        admin_client._find_coordinator_ids.assert_called_once_with(["billing"])

    def test_admin_double_only_exposes_real_methods(self, admin_client):
        assert not hasattr(admin_client, "_find_coordinator_id")
        assert hasattr(admin_client, "_find_coordinator_ids")

    def test_describe_several_groups_resolves_coordinators_once(self, gateway, admin_client):
        admin_client.describe_consumer_groups.return_value = [
            SimpleNamespace(group="billing", state="Empty", protocol_type="consumer", members=[]),
            SimpleNamespace(group="audit", state="Stable", protocol_type="consumer", members=[]),
        ]
        admin_client._find_coordinator_ids.return_value = {"billing": 1}

        groups = gateway.describe_consumer_groups("local", ["billing", "audit"])

        assert [(g.group_id, g.coordinator) for g in groups] == [("billing", 1), ("audit", -1)]
        admin_client._find_coordinator_ids.assert_called_once_with(["billing", "audit"])

    def test_dead_group_is_not_found(self, gateway, admin_client):
        admin_client.describe_consumer_groups.return_value = [
            SimpleNamespace(group="ghost", state="Dead", protocol_type="", members=[])
        ]

        with pytest.raises(ResourceNotFoundError) as exc_info:
            gateway.describe_consumer_group("local", "ghost")

        assert exc_info.value.code == ErrorCode.CONSUMER_GROUP_NOT_FOUND

    def test_offsets_skip_missing_commits(self, gateway, admin_client):
        tp0, tp1 = TopicPartition("orders", 0), TopicPartition("orders", 1)
        admin_client.list_consumer_group_offsets.return_value = {
            tp0: SimpleNamespace(offset=42),
            tp1: SimpleNamespace(offset=-1),
        }

        assert gateway.list_consumer_group_offsets("local", "billing") == {tp0: 42}


class TestOffsetsAndCluster:
    def test_end_offsets_use_throwaway_consumer(self, gateway, consumer):
        tp = TopicPartition("orders", 0)
        consumer.end_offsets.return_value = {tp: 100}

        assert gateway.end_offsets("local", [tp]) == {tp: 100}
        consumer.close.assert_called_once()

    def test_describe_cluster_flags_controller(self, gateway, admin_client):
        admin_client.describe_cluster.return_value = {
            "cluster_id": "abc",
            "controller_id": 2,
            "brokers": [
                {"node_id": 1, "host": "k1", "port": 9092, "rack": None},
                {"node_id": 2, "host": "k2", "port": 9092, "rack": "r1"},
            ],
        }

        info = gateway.describe_cluster("local")

        assert info.broker_count == 2
        assert [b.controller for b in info.brokers] == [False, True]

    def test_describe_broker_config(self, gateway, admin_client):
        admin_client.describe_configs.return_value = [
            SimpleNamespace(resources=[(0, "", 4, "1", [("log.retention.hours", "168", True, True, False)])])
        ]

        assert gateway.describe_broker_config("local", 1) == {"log.retention.hours": "168"}


class TestErrorMapping:
    def test_unknown_cluster_makes_no_remote_call(self, gateway, admin_factory, consumer_factory):
        with pytest.raises(ClusterNotFoundError):
            gateway.list_topics("nope")
        with pytest.raises(ClusterNotFoundError):
            gateway.end_offsets("nope", [TopicPartition("orders", 0)])

        admin_factory.assert_not_called()
        consumer_factory.assert_not_called()

    @pytest.mark.parametrize(
        "raised, expected, kind",
        [
            (KafkaTimeoutError(), OperationTimeoutError, RemoteErrorKind.TIMEOUT),
            (NoBrokersAvailable(), ConnectionFailureError, RemoteErrorKind.CONNECTION_FAILURE),
            (SaslAuthenticationFailedError(), AuthenticationFailureError, RemoteErrorKind.AUTHENTICATION_FAILURE),
            (GroupAuthorizationFailedError(), AuthorizationFailureError, RemoteErrorKind.AUTHORIZATION_FAILURE),
            (OSError("connection reset"), ConnectionFailureError, RemoteErrorKind.CONNECTION_FAILURE),
        ],
    )
    def test_remote_errors_are_translated(self, gateway, admin_client, raised, expected, kind):
        admin_client.list_consumer_groups.side_effect = raised

        with pytest.raises(expected) as exc_info:
            gateway.list_consumer_groups("local")

        err = exc_info.value
        assert err.kind == kind
        assert err.cluster_id == "local"
        assert err.operation == "listConsumerGroups"
        assert err.__cause__ is raised

    def test_deadline_exceeded_is_timeout(self, gateway, admin_client):
        release = threading.Event()
        admin_client.describe_cluster.side_effect = lambda: release.wait(5)

        try:
            with pytest.raises(OperationTimeoutError) as exc_info:
                gateway.describe_cluster("local")
        finally:
            release.set()

        assert exc_info.value.operation == "describeCluster"

    def test_client_creation_failure_is_connection_failure(self, gateway, admin_factory):
        admin_factory.side_effect = NoBrokersAvailable()

        with pytest.raises(ConnectionFailureError):
            gateway.describe_cluster("local")
