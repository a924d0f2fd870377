"""
Tests for the YAML cluster descriptor repository.
"""

import textwrap

import pytest

from kafkalens.core.exceptions import ClusterConfigError
from kafkalens.domain.repository import YamlClusterRepository, parse_clusters


def _write(tmp_path, body):
    path = tmp_path / "clusters.yml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class TestYamlClusterRepository:
    def test_loads_clusters_with_defaults(self, tmp_path):
        path = _write(tmp_path, """
            defaults:
              security:
                protocol: sasl_ssl
                sasl:
                  mechanism: PLAIN
                  username: lens
                  password: secret
              properties:
                request_timeout_ms: 20000
            clusters:
              - id: local
                name: Local
                bootstrap-servers: localhost:9092, localhost:9093
                security:
                  protocol: PLAINTEXT
              - id: prod
                environment: production
                bootstrap-servers:
                  - kafka-1:9093
                properties:
                  request_timeout_ms: 5000
        """)

        repo = YamlClusterRepository(path)

        local = repo.find_by_id("local")
        assert local.bootstrap_servers == ["localhost:9092", "localhost:9093"]
        assert local.security.protocol == "PLAINTEXT"
        assert local.properties == {"request_timeout_ms": 20000}

        prod = repo.find_by_id("prod")
        assert prod.name == "prod"
        assert prod.is_production
        assert prod.security.protocol == "SASL_SSL"
        assert prod.security.sasl.username == "lens"
        assert prod.properties == {"request_timeout_ms": 5000}
        assert [c.id for c in repo.find_by_environment("PRODUCTION")] == ["prod"]

    def test_missing_file_yields_no_clusters(self, tmp_path):
        repo = YamlClusterRepository(tmp_path / "absent.yml")

        assert repo.find_all() == []
        assert not repo.exists_by_id("local")

    def test_invalid_yaml_raises(self, tmp_path):
        path = _write(tmp_path, "clusters: [unclosed\n")

        with pytest.raises(ClusterConfigError):
            YamlClusterRepository(path)

    def test_bad_entry_is_skipped(self, tmp_path):
        path = _write(tmp_path, """
            clusters:
              - id: good
                bootstrap-servers: localhost:9092
              - id: no-servers
              - just-a-string
        """)

        repo = YamlClusterRepository(path)

        assert [c.id for c in repo.find_all()] == ["good"]

    def test_reload_picks_up_changes(self, tmp_path):
        path = _write(tmp_path, """
            clusters:
              - id: a
                bootstrap-servers: a:9092
        """)
        repo = YamlClusterRepository(path)

        _write(tmp_path, """
            clusters:
              - id: b
                bootstrap-servers: b:9092
        """)
        repo.reload()

        assert repo.find_by_id("a") is None
        assert repo.exists_by_id("b")


def test_parse_clusters_rejects_non_list():
    with pytest.raises(ClusterConfigError):
        parse_clusters({"clusters": {"id": "local"}})


def test_parse_clusters_empty_document():
    assert parse_clusters(None) == {}
