"""Docker Engine implementation of the RuntimeAdapter interface.

Wraps one long-lived docker SDK client. The client is created explicitly at
startup, injected into the collector and closed on shutdown.
"""

from __future__ import annotations

import logging
from typing import Any

import docker
import requests
from docker.errors import DockerException
from pydantic import ValidationError

from dex_exporter.core.schemas import ExporterConfig, RawStatsSnapshot
from dex_exporter.monitoring.base import (
    ContainerInfo,
    ContainerListError,
    ContainerState,
    RuntimeAdapter,
    StatsDecodeError,
    StatsFetchError,
)

logger = logging.getLogger(__name__)


class DockerRuntimeAdapter(RuntimeAdapter):
    """RuntimeAdapter backed by the Docker Engine API.

    Uses the low-level API client so container listings and stats come back as
    the raw JSON documents the daemon sends.

    Example:
        ```python
        with DockerRuntimeAdapter.from_config(config) as adapter:
            for container in adapter.list_containers(include_stopped=True):
                print(container.display_name, container.state)
        ```
    """

    def __init__(self, client: docker.DockerClient) -> None:
        """Initialize the adapter.

        Args:
            client: Docker client, owned by the adapter from now on
        """
        self._client = client

    @classmethod
    def from_config(cls, config: ExporterConfig) -> DockerRuntimeAdapter:
        """Create an adapter from exporter configuration.

        Falls back to the environment (DOCKER_HOST etc.) when no host is configured.
        The HTTP connection pool is sized to max_workers so concurrent stats
        requests do not queue for a connection.

        Raises:
            docker.errors.DockerException: If the client cannot be constructed
        """
        if config.docker_host:
            client = docker.DockerClient(
                base_url=config.docker_host,
                version="auto",
                timeout=config.docker_timeout_seconds,
                max_pool_size=config.max_workers,
            )
        else:
            client = docker.from_env(
                timeout=config.docker_timeout_seconds, max_pool_size=config.max_workers
            )
        logger.debug(f"Docker client created for {client.api.base_url}")
        return cls(client)

    def ping(self) -> bool:
        """Check if the Docker daemon is responsive."""
        try:
            return bool(self._client.ping())
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.debug(f"Docker ping failed: {e}")
            return False

    def list_containers(self, include_stopped: bool = True) -> list[ContainerInfo]:
        try:
            items = self._client.api.containers(all=include_stopped)
        except (DockerException, requests.exceptions.RequestException) as e:
            raise ContainerListError(f"Can't list containers: {e}") from e

        return [self._parse_container(item) for item in items or []]

    def fetch_stats(self, container_id: str) -> RawStatsSnapshot:
        try:
            data = self._client.api.stats(container_id, stream=False)
        except ValueError as e:
            # Body was not valid JSON
            raise StatsDecodeError(container_id, f"can't read api stats: {e}") from e
        except (DockerException, requests.exceptions.RequestException) as e:
            raise StatsFetchError(container_id, str(e)) from e

        return self._parse_stats(container_id, data)

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as e:
            logger.warning(f"Error closing Docker client: {e}")

    @staticmethod
    def _parse_container(item: dict[str, Any]) -> ContainerInfo:
        """Convert one /containers/json entry into a ContainerInfo."""
        state = ContainerState.RUNNING if item.get("State") == "running" else ContainerState.OTHER
        return ContainerInfo(
            id=item.get("Id", ""),
            names=tuple(item.get("Names") or ()),
            state=state,
        )

    @staticmethod
    def _parse_stats(container_id: str, data: Any) -> RawStatsSnapshot:
        """Decode a stats document into a RawStatsSnapshot."""
        if not isinstance(data, dict):
            raise StatsDecodeError(
                container_id, f"expected a JSON object, got {type(data).__name__}"
            )
        try:
            return RawStatsSnapshot.model_validate(data)
        except ValidationError as e:
            raise StatsDecodeError(container_id, f"invalid stats document: {e}") from e
