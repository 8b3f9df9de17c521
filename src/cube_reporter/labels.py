"""Report keys and data labels used by the docker environment reports."""

from __future__ import annotations

from cube_reporter.report import Label

# Report keys.
DOCKER_ENVIRONMENT = "Docker Environment"
DOCKER_HOST_INFORMATION = "Docker Host Information"
DOCKER_VERSION = "Version"
DOCKER_OS = "Operating System"
DOCKER_KERNEL = "Kernel"
DOCKER_API_VERSION = "Api Version"
DOCKER_ARCH = "Arch"
DOCKER_COMPOSITION_SCHEMA = "Docker Composition Schema"
NETWORK_TOPOLOGY_SCHEMA = "Network Topology Schema"
LOG_PATH = "Log Path"
MEMORY_STATISTICS = "Memory statistics"
IO_STATISTICS = "IO statistics"
NETWORK_STATISTICS = "Networks statistics"
USAGE = "usage"
MAX_USAGE = "max_usage"
LIMIT = "limit"

ADAPTER_LABEL = Label("Adapter")
RX_BYTES_LABEL = Label("rx_bytes")
TX_BYTES_LABEL = Label("tx_bytes")
BEFORE_TEST_LABEL = Label("Before Test")
AFTER_TEST_LABEL = Label("After Test")
USE_LABEL = Label("Use")

USAGE_LABEL = Label(USAGE)
MAX_USAGE_LABEL = Label(MAX_USAGE)
LIMIT_LABEL = Label(LIMIT)

IO_BYTES_READ_LABEL = Label("io_bytes_read")
IO_BYTES_WRITE_LABEL = Label("io_bytes_write")


def statistics_report_name(container_id: str) -> str:
    return f"{container_id} Statistics"


__all__ = [
    "ADAPTER_LABEL",
    "AFTER_TEST_LABEL",
    "BEFORE_TEST_LABEL",
    "DOCKER_API_VERSION",
    "DOCKER_ARCH",
    "DOCKER_COMPOSITION_SCHEMA",
    "DOCKER_ENVIRONMENT",
    "DOCKER_HOST_INFORMATION",
    "DOCKER_KERNEL",
    "DOCKER_OS",
    "DOCKER_VERSION",
    "IO_BYTES_READ_LABEL",
    "IO_BYTES_WRITE_LABEL",
    "IO_STATISTICS",
    "LIMIT",
    "LIMIT_LABEL",
    "LOG_PATH",
    "MAX_USAGE",
    "MAX_USAGE_LABEL",
    "MEMORY_STATISTICS",
    "NETWORK_STATISTICS",
    "NETWORK_TOPOLOGY_SCHEMA",
    "RX_BYTES_LABEL",
    "TX_BYTES_LABEL",
    "USAGE",
    "USAGE_LABEL",
    "USE_LABEL",
    "statistics_report_name",
]
