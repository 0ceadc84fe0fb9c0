"""Shared constants for the dex exporter.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Every exported metric name starts with this prefix.
METRIC_PREFIX = "dex_"

# The single label carried by every metric point.
LABEL_CONTAINER_NAME = "container_name"

# Memory accounting key holding the kernel page cache.
# cgroup v1 calls it "cache", cgroup v2 calls it "file".
CGROUP_V1_CACHE_KEY = "cache"
CGROUP_V2_FILE_KEY = "file"

# Interface whose traffic is reported when nothing else is configured.
DEFAULT_NETWORK_INTERFACE = "eth0"

# CPU usage counters are reported by the runtime in nanoseconds.
NANOSECONDS_PER_SECOND = 1e9

# Separator used when a container reports more than one name.
CONTAINER_NAME_SEPARATOR = ";"

DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_PORT = 8080

# Upper bound on concurrent per-container stats requests within one scrape.
DEFAULT_MAX_WORKERS = 16
