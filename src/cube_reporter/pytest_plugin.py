"""pytest integration: binds the reporter handlers to the test session lifecycle."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
from typing import Any, Generator, Optional

import pytest

from cube_reporter.config.settings import ReporterSettings
from cube_reporter.environment import DockerEnvironmentReporter
from cube_reporter.errors import CubeReporterError
from cube_reporter.events import AfterAutoStart, AfterTest, BeforeTest
from cube_reporter.logging_utils import log_exception
from cube_reporter.session import ReportSession

logger = logging.getLogger(__name__)

PLUGIN_NAME = "cube-reporter-session"
SESSION_LOG_FILE = "reports/cube_reporter.log"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("docker-report", "container statistics reporting")
    group.addoption(
        "--docker-report",
        action="store_true",
        default=None,
        help="Collect docker environment and container statistics into a report.",
    )
    group.addoption(
        "--docker-report-dir",
        default=None,
        help="Root directory of the generated report (default: target).",
    )
    group.addoption(
        "--docker-composition",
        default=None,
        help="Cube or docker-compose file describing the containers.",
    )
    group.addoption(
        "--docker-container",
        action="append",
        default=[],
        help="Id or name of a started container to sample (repeatable).",
    )
    group.addoption(
        "--docker-report-decimal",
        action="store_true",
        default=None,
        help="Format byte counts with decimal (kB, MB) instead of binary units.",
    )
    group.addoption(
        "--docker-executor",
        default=None,
        help="Executor used to reach the engine (docker or dummy).",
    )
    group.addoption(
        "--docker-base-url",
        default=None,
        help="Docker engine URL; defaults to DOCKER_HOST or the local socket.",
    )
    parser.addini("docker_report", "Enable the docker report.", type="bool", default=False)
    parser.addini(
        "docker_report_decimal",
        "Format byte counts with decimal units.",
        type="bool",
        default=False,
    )
    parser.addini(
        "docker_containers",
        "Containers to sample, one per line.",
        type="linelist",
        default=[],
    )
    parser.addini("docker_report_dir", "Root directory of the generated report.")
    parser.addini("docker_composition", "Cube or docker-compose file describing the containers.")
    parser.addini("docker_executor", "Executor used to reach the engine.")
    parser.addini("docker_base_url", "Docker engine URL.")


def _option(config: pytest.Config, name: str) -> Any:
    value = config.getoption(name)
    if value is None:
        value = config.getini(name)
    return value


def settings_from_pytest(config: pytest.Config) -> ReporterSettings:
    root_dir = Path(_option(config, "docker_report_dir") or "target")
    if not root_dir.is_absolute():
        root_dir = Path(str(config.rootpath)) / root_dir
    composition = _option(config, "docker_composition") or None
    if composition and not Path(composition).is_absolute():
        composition = str(Path(str(config.rootpath)) / composition)
    containers = list(config.getoption("docker_container") or []) or list(
        config.getini("docker_containers") or []
    )
    return ReporterSettings.from_mapping(
        {
            "reporter": {
                "root_dir": str(root_dir),
                "decimal": bool(_option(config, "docker_report_decimal")),
                "log_file": SESSION_LOG_FILE,
            },
            "docker": {
                "executor": _option(config, "docker_executor") or "docker",
                "base_url": _option(config, "docker_base_url") or None,
                "containers": containers,
            },
            "composition": {"path": composition},
        }
    )


class DockerReportPlugin:
    """Session-scoped plugin instance; reporting failures never fail the run."""

    def __init__(self, settings: ReporterSettings) -> None:
        self.session = ReportSession(settings)

    @property
    def reporter(self) -> Optional[DockerEnvironmentReporter]:
        return self.session.reporter

    def _guard(self, action: str, func: Callable[..., Any], *args: Any) -> bool:
        try:
            func(*args)
        except Exception as exc:
            logger.warning("Docker report: %s failed.", action)
            log_exception(logger, exc)
            return False
        return True

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        if not self._guard("session start", self.session.start):
            self.session.reporter = None
            return
        self._guard(
            "environment report", self.session.reporter.report_docker_environment, AfterAutoStart()
        )

    @pytest.hookimpl(wrapper=True)
    def pytest_runtest_call(self, item: pytest.Item) -> Generator[None, None, None]:
        reporter = self.reporter
        if reporter is None:
            return (yield)
        self._guard(
            "statistics before test",
            reporter.capture_container_stats_before_test,
            BeforeTest(item.nodeid),
        )
        try:
            return (yield)
        finally:
            self._guard(
                "statistics after test",
                reporter.report_container_stats_after_test,
                AfterTest(item.nodeid),
            )

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        reporter = self.reporter
        try:
            if reporter is not None:
                self._guard("container logs", self.session.stop_containers)
                self._guard("report output", self.session.write_outputs)
        finally:
            self.session.close()

    def pytest_terminal_summary(self, terminalreporter: Any) -> None:
        if self.reporter is None:
            return
        terminalreporter.write_sep("-", "docker report")
        terminalreporter.write_line(f"report directory: {self.session.settings.reports_dir}")


def pytest_configure(config: pytest.Config) -> None:
    enabled = _option(config, "docker_report")
    if not enabled:
        return
    try:
        settings = settings_from_pytest(config)
    except CubeReporterError as exc:
        raise pytest.UsageError(f"Invalid docker report options: {exc}") from exc
    config.pluginmanager.register(DockerReportPlugin(settings), PLUGIN_NAME)


def pytest_unconfigure(config: pytest.Config) -> None:
    plugin = config.pluginmanager.get_plugin(PLUGIN_NAME)
    if plugin is not None:
        config.pluginmanager.unregister(plugin, PLUGIN_NAME)


@pytest.fixture
def docker_report(request: pytest.FixtureRequest) -> DockerEnvironmentReporter:
    """The active reporter; skips the test when the docker report is disabled."""
    plugin = request.config.pluginmanager.get_plugin(PLUGIN_NAME)
    if plugin is None or plugin.reporter is None:
        pytest.skip("docker report is not enabled (use --docker-report)")
    return plugin.reporter


__all__ = ["DockerReportPlugin", "settings_from_pytest"]
