"""Tests for configuration loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from dex_exporter.core.config import load_config
from dex_exporter.core.schemas import ExporterConfig


class TestExporterConfig:
    """Tests for the ExporterConfig schema."""

    def test_defaults(self) -> None:
        config = ExporterConfig()
        assert config.listen_address == "0.0.0.0"
        assert config.port == 8080
        assert config.docker_host is None
        assert config.include_stopped is True
        assert config.max_workers == 16
        assert config.network_interfaces == ["eth0"]
        assert config.log_level == "INFO"

    def test_log_level_normalized(self) -> None:
        assert ExporterConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            ExporterConfig(log_level="chatty")

    @pytest.mark.parametrize("port", [0, 70000])
    def test_invalid_port(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ExporterConfig(port=port)

    def test_invalid_max_workers(self) -> None:
        with pytest.raises(ValidationError):
            ExporterConfig(max_workers=0)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("port: 9100\nnetwork_interfaces: [eth0, eth1]\ninclude_stopped: false\n")

        config = load_config(path)

        assert config.port == 9100
        assert config.network_interfaces == ["eth0", "eth1"]
        assert config.include_stopped is False

    def test_load_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"docker_host": "unix:///run/docker.sock", "max_workers": 4}))

        config = load_config(path)

        assert config.docker_host == "unix:///run/docker.sock"
        assert config.max_workers == 4

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path) == ExporterConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("port = 1")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("port: not-a-port\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_suffix_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "CONFIG.YAML"
        path.write_text("port: 9200\n")
        assert load_config(path).port == 9200

    def test_document_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- port: 9100\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)
