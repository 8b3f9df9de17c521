"""Executor interface shared by the docker client and the dummy engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import IO, Any, Optional


@dataclass(frozen=True)
class DockerVersion:
    version: Optional[str] = None
    os: Optional[str] = None
    kernel_version: Optional[str] = None
    api_version: Optional[str] = None
    arch: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DockerVersion":
        return cls(
            version=payload.get("Version"),
            os=payload.get("Os"),
            kernel_version=payload.get("KernelVersion"),
            api_version=payload.get("ApiVersion"),
            arch=payload.get("Arch"),
        )


class ContainerExecutor(ABC):
    """Operations the reporter needs from a container engine."""

    name: str

    @abstractmethod
    def docker_host_version(self) -> DockerVersion:
        """Return engine version information."""

    @abstractmethod
    def stats_container(self, container_id: str) -> Mapping[str, Any]:
        """Return a single, non-streamed stats sample for the container."""

    @abstractmethod
    def inspect_container(self, container_id: str) -> Mapping[str, Any]:
        """Return the low-level inspect payload for the container."""

    @abstractmethod
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
        """Write the container log into ``stream``."""

    def close(self) -> None:
        return None

    def __enter__(self) -> "ContainerExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def network_mode_from_inspect(payload: Mapping[str, Any]) -> Optional[str]:
    host_config = payload.get("HostConfig")
    if not isinstance(host_config, Mapping):
        return None
    mode = host_config.get("NetworkMode")
    if not isinstance(mode, str) or not mode.strip():
        return None
    return mode


__all__ = ["ContainerExecutor", "DockerVersion", "network_mode_from_inspect"]
