"""Exporter configuration file loading.

The file holds a single mapping of ExporterConfig fields; anything not given
keeps its default, so an empty file is a valid configuration.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import yaml

from dex_exporter.core.schemas import ExporterConfig

_LOADERS: dict[str, Callable[[IO[str]], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def load_config(path: Path | str) -> ExporterConfig:
    """Read an exporter config file and validate it against ExporterConfig.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not .yaml/.yml/.json, or the document
            is not a mapping
        pydantic.ValidationError: If a field value is invalid
    """
    path = Path(path)
    loader = _LOADERS.get(path.suffix.lower())
    if loader is None:
        supported = ", ".join(sorted(_LOADERS))
        raise ValueError(f"Unsupported config format: {path.suffix or path.name} ({supported})")
    if not path.is_file():
        raise FileNotFoundError(f"Exporter config not found: {path}")

    with path.open(encoding="utf-8") as f:
        document = loader(f)

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValueError(f"Exporter config must be a mapping, got {type(document).__name__}")
    return ExporterConfig.model_validate(document)
