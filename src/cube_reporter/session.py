"""Wiring of settings, executor, containers and collector for one report run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cube_reporter.composition import DockerCompositions, load_compositions
from cube_reporter.config.settings import ReporterSettings
from cube_reporter.docker.base import ContainerExecutor
from cube_reporter.environment import DockerEnvironmentReporter
from cube_reporter.errors import ConfigError
from cube_reporter.events import BeforeStop
from cube_reporter.logging_utils import attach_file_handler, detach_handler
from cube_reporter.registry import ContainerRegistry, resolve_executor
from cube_reporter.report import ReportCollector

logger = logging.getLogger(__name__)


def create_executor(settings: ReporterSettings) -> ContainerExecutor:
    factory = resolve_executor(settings.executor)
    if settings.executor != "dummy":
        return factory(base_url=settings.base_url, timeout=settings.timeout)
    try:
        return factory(**settings.dummy)
    except TypeError as exc:
        raise ConfigError(f"Invalid dummy executor config: {exc}") from exc


def build_container_registry(
    settings: ReporterSettings,
    compositions: DockerCompositions,
) -> ContainerRegistry:
    """Explicit containers win; otherwise every non-manual composed container."""
    registry = ContainerRegistry(settings.containers)
    if not settings.containers:
        for container_id in compositions.automatic_ids():
            registry.add(container_id)
    return registry


class ReportSession:
    def __init__(
        self,
        settings: ReporterSettings,
        *,
        executor: Optional[ContainerExecutor] = None,
        collector: Optional[ReportCollector] = None,
    ) -> None:
        self.settings = settings
        self.collector = collector or ReportCollector(title=settings.title)
        self._executor = executor
        self.reporter: Optional[DockerEnvironmentReporter] = None
        self._log_handler: Optional[logging.Handler] = None

    def start(self) -> DockerEnvironmentReporter:
        log_path = self.settings.log_file_path
        if log_path is not None and self._log_handler is None:
            self._log_handler = attach_file_handler(log_path)
        compositions = DockerCompositions()
        if self.settings.composition_path is not None:
            compositions = load_compositions(self.settings.composition_path)
        executor = self._executor or create_executor(self.settings)
        self.reporter = DockerEnvironmentReporter(
            self.collector,
            executor,
            self.settings,
            compositions=compositions,
            containers=build_container_registry(self.settings, compositions),
        )
        logger.info(
            "Docker report enabled for %d container(s); writing to %s",
            len(self.reporter.containers),
            self.settings.reports_dir,
        )
        return self.reporter

    def stop_containers(self) -> None:
        """Deliver a stop event for every registered container."""
        if self.reporter is None:
            return
        for container_id in self.reporter.containers:
            self.reporter.report_container_logs(BeforeStop(container_id))

    def write_outputs(self) -> list[Path]:
        written: list[Path] = []
        if self.settings.write_json:
            written.append(self.collector.write_json(self.settings.report_json_path))
        if self.settings.write_html:
            written.append(self.collector.write_html(self.settings.report_html_path))
        for path in written:
            logger.info("Docker report written to %s", path)
        return written

    def close(self) -> None:
        if self.reporter is not None and self.reporter.executor is not None:
            self.reporter.executor.close()
        detach_handler(self._log_handler)
        self._log_handler = None


__all__ = ["ReportSession", "build_container_registry", "create_executor"]
