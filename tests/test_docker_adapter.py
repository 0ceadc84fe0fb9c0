"""Tests for DockerRuntimeAdapter."""

from __future__ import annotations

from unittest.mock import MagicMock

import docker
import pytest
import requests
from docker.errors import APIError, DockerException

from dex_exporter.core.schemas import ExporterConfig
from dex_exporter.monitoring.base import (
    ContainerListError,
    ContainerState,
    StatsDecodeError,
    StatsFetchError,
)
from dex_exporter.monitoring.docker_adapter import DockerRuntimeAdapter


class TestListContainers:
    """Tests for container listing."""

    def test_parse_containers(self) -> None:
        client = MagicMock()
        client.api.containers.return_value = [
            {"Id": "abc123", "Names": ["/web"], "State": "running", "Image": "nginx"},
            {"Id": "def456", "Names": ["/db", "/web/db"], "State": "exited"},
        ]
        adapter = DockerRuntimeAdapter(client)

        containers = adapter.list_containers(include_stopped=True)

        client.api.containers.assert_called_once_with(all=True)
        assert [c.id for c in containers] == ["abc123", "def456"]
        assert containers[0].state is ContainerState.RUNNING
        assert containers[0].display_name == "web"
        assert containers[1].state is ContainerState.OTHER
        assert containers[1].names == ("/db", "/web/db")

    def test_paused_is_not_running(self) -> None:
        client = MagicMock()
        client.api.containers.return_value = [{"Id": "a", "Names": ["/x"], "State": "paused"}]
        containers = DockerRuntimeAdapter(client).list_containers()
        assert containers[0].is_running is False

    def test_running_only(self) -> None:
        client = MagicMock()
        client.api.containers.return_value = []
        DockerRuntimeAdapter(client).list_containers(include_stopped=False)
        client.api.containers.assert_called_once_with(all=False)

    def test_missing_names(self) -> None:
        client = MagicMock()
        client.api.containers.return_value = [{"Id": "a", "Names": None, "State": "running"}]
        containers = DockerRuntimeAdapter(client).list_containers()
        assert containers[0].display_name == ""

    @pytest.mark.parametrize(
        "error",
        [APIError("server error"), requests.exceptions.ConnectionError("refused")],
    )
    def test_list_errors_are_wrapped(self, error: Exception) -> None:
        client = MagicMock()
        client.api.containers.side_effect = error

        with pytest.raises(ContainerListError):
            DockerRuntimeAdapter(client).list_containers()


class TestFetchStats:
    """Tests for stats fetching and decoding."""

    def test_fetch_stats(self) -> None:
        client = MagicMock()
        client.api.stats.return_value = {
            "read": "2024-01-01T00:00:00Z",
            "cpu_stats": {"cpu_usage": {"total_usage": 1100}, "system_cpu_usage": 20100},
            "precpu_stats": {"cpu_usage": {"total_usage": 1000}, "system_cpu_usage": 20000},
            "memory_stats": {"usage": 1000, "limit": 4000, "stats": {"cache": 200}},
            "networks": {"eth0": {"rx_bytes": 10, "tx_bytes": 20, "rx_packets": 1}},
            "blkio_stats": {"io_service_bytes_recursive": None},
            "pids_stats": {"current": 3},
        }

        snapshot = DockerRuntimeAdapter(client).fetch_stats("abc123")

        client.api.stats.assert_called_once_with("abc123", stream=False)
        assert snapshot.cpu_stats.cpu_usage.total_usage == 1100
        assert snapshot.precpu_stats.system_cpu_usage == 20000
        assert snapshot.memory_stats.stats == {"cache": 200}
        assert snapshot.networks["eth0"].tx_bytes == 20
        assert snapshot.blkio_stats.io_service_bytes_recursive == []
        assert snapshot.pids_stats.current == 3

    def test_transport_error_is_fetch_error(self) -> None:
        client = MagicMock()
        client.api.stats.side_effect = requests.exceptions.ReadTimeout("timed out")

        with pytest.raises(StatsFetchError) as exc_info:
            DockerRuntimeAdapter(client).fetch_stats("abc123")

        assert not isinstance(exc_info.value, StatsDecodeError)
        assert exc_info.value.container_id == "abc123"

    def test_api_error_is_fetch_error(self) -> None:
        client = MagicMock()
        client.api.stats.side_effect = APIError("404 Client Error: No such container")

        with pytest.raises(StatsFetchError):
            DockerRuntimeAdapter(client).fetch_stats("gone")

    def test_invalid_json_is_decode_error(self) -> None:
        client = MagicMock()
        client.api.stats.side_effect = ValueError("Expecting value: line 1 column 1")

        with pytest.raises(StatsDecodeError):
            DockerRuntimeAdapter(client).fetch_stats("abc123")

    def test_invalid_document_is_decode_error(self) -> None:
        client = MagicMock()
        client.api.stats.return_value = {"pids_stats": {"current": "many"}}

        with pytest.raises(StatsDecodeError):
            DockerRuntimeAdapter(client).fetch_stats("abc123")

    def test_non_object_is_decode_error(self) -> None:
        client = MagicMock()
        client.api.stats.return_value = ["not", "a", "dict"]

        with pytest.raises(StatsDecodeError):
            DockerRuntimeAdapter(client).fetch_stats("abc123")


class TestClientLifecycle:
    """Tests for client construction, ping and close."""

    def test_from_config_uses_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from_env = MagicMock()
        monkeypatch.setattr(docker, "from_env", from_env)

        DockerRuntimeAdapter.from_config(ExporterConfig(docker_timeout_seconds=5, max_workers=4))

        from_env.assert_called_once_with(timeout=5, max_pool_size=4)

    def test_from_config_uses_docker_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        docker_client = MagicMock()
        monkeypatch.setattr(docker, "DockerClient", docker_client)

        DockerRuntimeAdapter.from_config(ExporterConfig(docker_host="tcp://10.0.0.1:2375"))

        docker_client.assert_called_once_with(
            base_url="tcp://10.0.0.1:2375", version="auto", timeout=10, max_pool_size=16
        )

    def test_ping(self) -> None:
        client = MagicMock()
        client.ping.return_value = True
        assert DockerRuntimeAdapter(client).ping() is True

    def test_ping_failure(self) -> None:
        client = MagicMock()
        client.ping.side_effect = DockerException("no socket")
        assert DockerRuntimeAdapter(client).ping() is False

    def test_context_manager_closes_client(self) -> None:
        client = MagicMock()
        with DockerRuntimeAdapter(client):
            pass
        client.close.assert_called_once()
