"""Exposition module - serving collected metrics to Prometheus."""

from __future__ import annotations

from dex_exporter.exposition.prometheus import (
    DexPrometheusCollector,
    build_registry,
    make_metrics_app,
    serve,
    to_metric_families,
)

__all__ = ["DexPrometheusCollector", "build_registry", "make_metrics_app", "serve", "to_metric_families"]
