"""Deterministic in-memory executor for dry runs and tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import copy
from typing import IO, Any, Optional, Union

from cube_reporter.docker.base import ContainerExecutor, DockerVersion
from cube_reporter.errors import DockerError
from cube_reporter.registry import register
from cube_reporter.stats import NETWORK_COUNTERS

_DEFAULT_VERSION = DockerVersion(
    version="24.0.0-dummy",
    os="linux",
    kernel_version="6.0.0-dummy",
    api_version="1.43",
    arch="amd64",
)

_MIB = 1024 * 1024


def synthetic_stats(sample: int, *, adapters: Sequence[str] = ("eth0",)) -> dict[str, Any]:
    """Stats payload whose counters grow linearly with ``sample``."""
    networks = {}
    for index, adapter in enumerate(adapters):
        counters = {}
        for offset, counter in enumerate(NETWORK_COUNTERS):
            step = 4096 if counter.endswith("_bytes") else 4
            counters[counter] = (index + 1) * (offset + 1) * step * (sample + 1)
        networks[adapter] = counters
    return {
        "memory_stats": {
            "usage": (64 + 8 * sample) * _MIB,
            "max_usage": (72 + 8 * sample) * _MIB,
            "limit": 2048 * _MIB,
        },
        "blkio_stats": {
            "io_service_bytes_recursive": [
                {"major": 8, "minor": 0, "op": "Read", "value": 1_000_000 * (sample + 1)},
                {"major": 8, "minor": 0, "op": "Write", "value": 250_000 * (sample + 1)},
                {"major": 8, "minor": 0, "op": "Total", "value": 1_250_000 * (sample + 1)},
            ]
        },
        "networks": networks,
    }


class DummyExecutor(ContainerExecutor):
    """Executor returning canned payloads.

    ``stats`` maps a container id to a list of payloads served in order; the
    last payload repeats once the list is exhausted. Containers without canned
    stats get :func:`synthetic_stats` samples.
    """

    name = "dummy"

    def __init__(
        self,
        *,
        version: Optional[Union[DockerVersion, Mapping[str, Any]]] = None,
        stats: Optional[Mapping[str, Sequence[Mapping[str, Any]]]] = None,
        inspect: Optional[Mapping[str, Mapping[str, Any]]] = None,
        logs: Optional[Mapping[str, Union[str, bytes]]] = None,
        missing: Sequence[str] = (),
    ) -> None:
        if isinstance(version, Mapping):
            version = DockerVersion(**version)
        self.version = version or _DEFAULT_VERSION
        self._stats = {key: list(values) for key, values in (stats or {}).items()}
        self._inspect = dict(inspect or {})
        self._logs = {
            key: value.encode("utf-8") if isinstance(value, str) else value
            for key, value in (logs or {}).items()
        }
        self._missing = set(missing)
        self._samples: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def _check(self, container_id: str) -> None:
        if container_id in self._missing:
            raise DockerError(
                f"Container {container_id!r} not found.",
                context={"container": container_id},
            )

    def docker_host_version(self) -> DockerVersion:
        self.calls.append(("version", ""))
        return self.version

    def stats_container(self, container_id: str) -> Mapping[str, Any]:
        self.calls.append(("stats", container_id))
        self._check(container_id)
        sample = self._samples.get(container_id, 0)
        self._samples[container_id] = sample + 1
        canned = self._stats.get(container_id)
        if canned:
            return copy.deepcopy(canned[min(sample, len(canned) - 1)])
        return synthetic_stats(sample)

    def inspect_container(self, container_id: str) -> Mapping[str, Any]:
        self.calls.append(("inspect", container_id))
        self._check(container_id)
        payload = self._inspect.get(container_id)
        if payload is None:
            return {"Id": container_id, "HostConfig": {"NetworkMode": "bridge"}}
        return copy.deepcopy(payload)

    def copy_log(
        self,
        container_id: str,
        stream: IO[bytes],
        *,
        follow: bool = False,
        stdout: bool = True,
        stderr: bool = True,
        timestamps: bool = True,
        tail: int = -1,
    ) -> None:
        self.calls.append(("logs", container_id))
        self._check(container_id)
        payload = self._logs.get(container_id, f"{container_id} started\n".encode("utf-8"))
        if tail >= 0:
            lines = payload.splitlines(keepends=True)
            payload = b"".join(lines[-tail:]) if tail else b""
        stream.write(payload)

    def close(self) -> None:
        self.closed = True


register("executor", DummyExecutor.name, DummyExecutor)

__all__ = ["DummyExecutor", "synthetic_stats"]
