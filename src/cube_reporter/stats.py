"""Container resource statistics extracted from the engine's stats payload."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

NETWORK_COUNTERS = (
    "rx_bytes",
    "rx_packets",
    "rx_errors",
    "rx_dropped",
    "tx_bytes",
    "tx_packets",
    "tx_errors",
    "tx_dropped",
)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {}


def _sum_blkio(entries: Any, op: str) -> int:
    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
        return 0
    total = 0
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        if str(entry.get("op", "")).lower() != op:
            continue
        total += _as_int(entry.get("value")) or 0
    return total


def _extract_networks(payload: Mapping[str, Any]) -> dict[str, dict[str, int]]:
    networks: dict[str, dict[str, int]] = {}
    raw = payload.get("networks")
    if not isinstance(raw, Mapping):
        # Engines reporting a single interface use the legacy "network" key.
        legacy = payload.get("network")
        raw = {"eth0": legacy} if isinstance(legacy, Mapping) else {}
    for adapter, counters in raw.items():
        if not isinstance(counters, Mapping):
            continue
        values: dict[str, int] = {}
        for name, value in counters.items():
            number = _as_int(value)
            if number is not None:
                values[str(name)] = number
        networks[str(adapter)] = values
    return networks


@dataclass(frozen=True)
class ContainerStatistics:
    usage: int = 0
    max_usage: int = 0
    limit: int = 0
    io_bytes_read: int = 0
    io_bytes_write: int = 0
    networks: Mapping[str, Mapping[str, int]] = field(default_factory=dict)

    @classmethod
    def from_docker(cls, payload: Optional[Mapping[str, Any]]) -> "ContainerStatistics":
        """Build statistics from a ``stats(stream=False)`` response.

        cgroup v2 hosts do not report ``max_usage``; it is reported as 0.
        """
        if not payload:
            return cls()
        memory = _as_mapping(payload.get("memory_stats"))
        blkio = _as_mapping(payload.get("blkio_stats"))
        io_entries = blkio.get("io_service_bytes_recursive")
        return cls(
            usage=_as_int(memory.get("usage")) or 0,
            max_usage=_as_int(memory.get("max_usage")) or 0,
            limit=_as_int(memory.get("limit")) or 0,
            io_bytes_read=_sum_blkio(io_entries, "read"),
            io_bytes_write=_sum_blkio(io_entries, "write"),
            networks=_extract_networks(payload),
        )

    def network_counter(self, adapter: str, counter: str) -> int:
        return int(self.networks.get(adapter, {}).get(counter, 0))


__all__ = ["NETWORK_COUNTERS", "ContainerStatistics"]
