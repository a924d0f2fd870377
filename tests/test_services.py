"""
Tests for the read-only dashboard services.
"""

from unittest.mock import MagicMock

import pytest
from kafka import TopicPartition

from kafkalens.core.exceptions import ClusterNotFoundError, ErrorCode, ResourceNotFoundError
from kafkalens.domain.models.cluster import Broker, ClusterInfo
from kafkalens.domain.models.consumer_group import ConsumerGroup, ConsumerGroupListing, ConsumerMember
from kafkalens.domain.models.topic import PartitionInfo, TopicDescription
from kafkalens.domain.services.broker_service import BrokerService
from kafkalens.domain.services.cluster_service import ClusterService
from kafkalens.domain.services.consumer_service import ConsumerService
from kafkalens.domain.services.topic_service import TopicService


@pytest.fixture
def gateway():
    return MagicMock(name="AdminGateway")


def _description(name, internal=False):
    return TopicDescription(
        name=name,
        internal=internal,
        partitions=[PartitionInfo(partition=p, leader=1, replicas=[1, 2], isr=[1, 2]) for p in range(2)],
    )


class TestClusterService:
    def test_list_clusters_sorted(self, repository, registry):
        svc = ClusterService(repository, registry)

        assert [c.id for c in svc.list_clusters()] == ["local", "prod"]

    def test_get_unknown_cluster(self, repository, registry):
        with pytest.raises(ClusterNotFoundError):
            ClusterService(repository, registry).get_cluster("nope")

    def test_reload_evicts_clients(self, repository, registry, admin_client):
        registry.get_or_create("local")

        count = ClusterService(repository, registry).reload()

        assert count == 2
        assert registry.cached_count() == 0
        admin_client.close.assert_called_once()


class TestTopicService:
    def test_list_topics_filters_and_sorts(self, gateway):
        gateway.describe_topics.return_value = [
            _description("payments"),
            _description("Orders-v2"),
            _description("__consumer_offsets", internal=True),
            _description("orders"),
        ]
        svc = TopicService(gateway)

        assert [t.name for t in svc.list_topics("local")] == ["Orders-v2", "orders", "payments"]
        assert [t.name for t in svc.list_topics("local", name_filter="ORD")] == ["Orders-v2", "orders"]
        assert len(svc.list_topics("local", include_internal=True)) == 4

    def test_get_topic_merges_offsets_and_configs(self, gateway):
        gateway.describe_topic.return_value = _description("orders")
        gateway.beginning_offsets.return_value = {TopicPartition("orders", 0): 0, TopicPartition("orders", 1): 5}
        gateway.end_offsets.return_value = {TopicPartition("orders", 0): 10, TopicPartition("orders", 1): 50}
        gateway.describe_topic_configs.return_value = {"orders": {"cleanup.policy": "delete"}}

        detail = TopicService(gateway).get_topic("local", "orders")

        assert detail.partition_count == 2
        assert detail.replication_factor == 2
        assert [(p.beginning_offset, p.end_offset) for p in detail.partitions] == [(0, 10), (5, 50)]
        assert detail.configs == {"cleanup.policy": "delete"}


class TestConsumerService:
    def test_list_groups_sorted(self, gateway):
        gateway.list_consumer_groups.return_value = [
            ConsumerGroupListing(group_id="zeta"),
            ConsumerGroupListing(group_id="alpha", protocol_type="consumer"),
        ]

        assert [g.group_id for g in ConsumerService(gateway).list_groups("local")] == ["alpha", "zeta"]

    def test_get_members(self, gateway):
        member = ConsumerMember(member_id="m-1", client_id="c", host="h")
        gateway.describe_consumer_group.return_value = ConsumerGroup(group_id="billing", members=[member])

        assert ConsumerService(gateway).get_members("local", "billing") == [member]


class TestBrokerService:
    @pytest.fixture
    def svc(self, gateway):
        gateway.describe_cluster.return_value = ClusterInfo(
            cluster_id="abc",
            controller_id=1,
            brokers=[
                Broker(broker_id=2, host="k2", port=9092),
                Broker(broker_id=1, host="k1", port=9092, controller=True),
            ],
        )
        gateway.describe_broker_config.return_value = {"num.io.threads": "8", "log.dirs": "/data"}
        return BrokerService(gateway)

    def test_list_brokers_sorted(self, svc):
        assert [b.broker_id for b in svc.list_brokers("local")] == [1, 2]

    def test_get_missing_broker(self, svc):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            svc.get_broker("local", 9)

        assert exc_info.value.code == ErrorCode.BROKER_NOT_FOUND

    def test_get_broker_config_sorted(self, svc):
        assert list(svc.get_broker_config("local", 1)) == ["log.dirs", "num.io.threads"]
