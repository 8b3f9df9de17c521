"""Executor backed by the docker SDK."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import IO, Any, Optional

import docker
from docker.errors import DockerException, NotFound
import requests

from cube_reporter.docker.base import ContainerExecutor, DockerVersion
from cube_reporter.errors import DockerError
from cube_reporter.registry import register

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60
# Transport failures (daemon restarts, timeouts) surface as requests errors.
_ENGINE_ERRORS = (DockerException, requests.exceptions.RequestException)


class DockerClientExecutor(ContainerExecutor):
    name = "docker"

    def __init__(
        self,
        client: Optional[Any] = None,
        *,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT_S,
    ) -> None:
        if client is None:
            try:
                if base_url:
                    client = docker.DockerClient(base_url=base_url, timeout=timeout)
                else:
                    client = docker.from_env(timeout=timeout)
            except _ENGINE_ERRORS as exc:
                raise DockerError(
                    f"Docker is not available: {exc}",
                    context={"base_url": base_url},
                ) from exc
        self.client = client

    def docker_host_version(self) -> DockerVersion:
        try:
            payload = self.client.version()
        except _ENGINE_ERRORS as exc:
            raise DockerError(f"Failed to read docker version: {exc}") from exc
        return DockerVersion.from_payload(payload)

    def stats_container(self, container_id: str) -> Mapping[str, Any]:
        try:
            return self.client.api.stats(container_id, stream=False)
        except NotFound as exc:
            raise DockerError(
                f"Container {container_id!r} not found while reading stats.",
                context={"container": container_id},
            ) from exc
        except _ENGINE_ERRORS as exc:
            raise DockerError(
                f"Failed to read stats for container {container_id!r}: {exc}",
                context={"container": container_id},
            ) from exc

    def inspect_container(self, container_id: str) -> Mapping[str, Any]:
        try:
            return self.client.api.inspect_container(container_id)
        except _ENGINE_ERRORS as exc:
            raise DockerError(
                f"Failed to inspect container {container_id!r}: {exc}",
                context={"container": container_id},
            ) from exc

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
        tail_arg: Any = "all" if tail < 0 else tail
        try:
            if follow:
                for chunk in self.client.api.logs(
                    container_id,
                    stdout=stdout,
                    stderr=stderr,
                    timestamps=timestamps,
                    stream=True,
                    follow=True,
                    tail=tail_arg,
                ):
                    stream.write(chunk)
                return
            payload = self.client.api.logs(
                container_id,
                stdout=stdout,
                stderr=stderr,
                timestamps=timestamps,
                stream=False,
                tail=tail_arg,
            )
        except _ENGINE_ERRORS as exc:
            raise DockerError(
                f"Failed to copy logs of container {container_id!r}: {exc}",
                context={"container": container_id},
            ) from exc
        stream.write(payload)

    def close(self) -> None:
        try:
            self.client.close()
        except _ENGINE_ERRORS as exc:
            logger.debug("Docker client close failed: %s", exc)


register("executor", DockerClientExecutor.name, DockerClientExecutor)

__all__ = ["DockerClientExecutor"]
