"""Container engine executors."""

from cube_reporter.docker.base import ContainerExecutor, DockerVersion
from cube_reporter.docker.client import DockerClientExecutor
from cube_reporter.docker.dummy import DummyExecutor

__all__ = ["ContainerExecutor", "DockerClientExecutor", "DockerVersion", "DummyExecutor"]
