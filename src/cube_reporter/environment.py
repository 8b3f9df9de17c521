"""Event handlers reporting the docker environment and per-test container stats."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cube_reporter.composition import DockerCompositions
from cube_reporter.config.settings import (
    COMPOSITION_IMAGE_NAME,
    NETWORK_TOPOLOGY_IMAGE_NAME,
    ReporterSettings,
)
from cube_reporter.docker.base import ContainerExecutor
from cube_reporter.errors import DockerError, ReportError
from cube_reporter.events import AfterAutoStart, AfterTest, BeforeStop, BeforeTest
from cube_reporter.graphs import (
    build_composition_graph,
    build_network_topology_graph,
    render_graph_png,
)
from cube_reporter.labels import (
    ADAPTER_LABEL,
    AFTER_TEST_LABEL,
    BEFORE_TEST_LABEL,
    DOCKER_API_VERSION,
    DOCKER_ARCH,
    DOCKER_COMPOSITION_SCHEMA,
    DOCKER_ENVIRONMENT,
    DOCKER_HOST_INFORMATION,
    DOCKER_KERNEL,
    DOCKER_OS,
    DOCKER_VERSION,
    IO_BYTES_READ_LABEL,
    IO_BYTES_WRITE_LABEL,
    IO_STATISTICS,
    LIMIT_LABEL,
    LOG_PATH,
    MAX_USAGE_LABEL,
    MEMORY_STATISTICS,
    NETWORK_STATISTICS,
    NETWORK_TOPOLOGY_SCHEMA,
    RX_BYTES_LABEL,
    TX_BYTES_LABEL,
    USAGE_LABEL,
    USE_LABEL,
    statistics_report_name,
)
from cube_reporter.registry import ContainerRegistry
from cube_reporter.report import (
    DataCollection,
    DataCollectionBuilder,
    DockerContainerSection,
    FileEntry,
    Label,
    ReportBuilder,
    ReportCollector,
    TestMethodSection,
    create_data_collection,
    create_report,
)
from cube_reporter.stats import ContainerStatistics

logger = logging.getLogger(__name__)

BEFORE = "before"
AFTER = "after"


def _ensure_directory(path: Path, label: str) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ReportError(f"Could not create {label} directory at {path}") from exc
    return path


def _byte_series(before: int, after: int, decimal: bool) -> DataCollectionBuilder:
    return (
        create_data_collection()
        .add_byte_data_item(before, decimal, BEFORE_TEST_LABEL)
        .add_byte_data_item(after, decimal, AFTER_TEST_LABEL)
        .add_byte_data_item(after - before, decimal, USE_LABEL)
    )


def memory_statistics(
    before: ContainerStatistics,
    after: ContainerStatistics,
    decimal: bool = False,
) -> DataCollection:
    usage = _byte_series(before.usage, after.usage, decimal).assign_parent_label(USAGE_LABEL)
    max_usage = _byte_series(before.max_usage, after.max_usage, decimal).assign_parent_label(
        MAX_USAGE_LABEL
    )
    return (
        create_data_collection(MEMORY_STATISTICS)
        .add_data_collection(usage, max_usage)
        .add_byte_data_item(before.limit, decimal, LIMIT_LABEL)
        .build()
    )


def io_statistics(
    before: ContainerStatistics,
    after: ContainerStatistics,
    decimal: bool = False,
) -> DataCollection:
    read = _byte_series(before.io_bytes_read, after.io_bytes_read, decimal).assign_parent_label(
        IO_BYTES_READ_LABEL
    )
    write = _byte_series(
        before.io_bytes_write, after.io_bytes_write, decimal
    ).assign_parent_label(IO_BYTES_WRITE_LABEL)
    return create_data_collection(IO_STATISTICS).add_data_collection(read, write).build()


def network_statistics(
    before: ContainerStatistics,
    after: ContainerStatistics,
    decimal: bool = False,
) -> DataCollection:
    """Per-adapter rx/tx series; adapters missing from either sample are skipped."""
    networks = create_data_collection(NETWORK_STATISTICS)
    for adapter in before.networks:
        if adapter not in after.networks:
            continue
        adapter_label = Label(adapter).with_parent(ADAPTER_LABEL)
        rx = _byte_series(
            before.network_counter(adapter, "rx_bytes"),
            after.network_counter(adapter, "rx_bytes"),
            decimal,
        ).assign_parent_label(RX_BYTES_LABEL)
        tx = _byte_series(
            before.network_counter(adapter, "tx_bytes"),
            after.network_counter(adapter, "tx_bytes"),
            decimal,
        ).assign_parent_label(TX_BYTES_LABEL)
        networks.add_data_collection(rx, tx, label=adapter_label)
    return networks.build()


class DockerEnvironmentReporter:
    """Reports generic docker information and container resource usage."""

    def __init__(
        self,
        collector: ReportCollector,
        executor: Optional[ContainerExecutor],
        settings: ReporterSettings,
        *,
        compositions: Optional[DockerCompositions] = None,
        containers: Optional[ContainerRegistry] = None,
    ) -> None:
        self.collector = collector
        self.executor = executor
        self.settings = settings
        self.compositions = compositions or DockerCompositions()
        self.containers = containers if containers is not None else ContainerRegistry()
        self._stats_before: dict[str, ContainerStatistics] = {}

    @property
    def root_dir(self) -> Path:
        return self.settings.root_dir

    # -- environment -----------------------------------------------------

    def report_docker_environment(self, event: AfterAutoStart) -> None:
        report = create_report(DOCKER_ENVIRONMENT).add_report(self._docker_info_group())
        report.add_key_value_entry(DOCKER_COMPOSITION_SCHEMA, self.create_composition_schema())
        report.add_key_value_entry(NETWORK_TOPOLOGY_SCHEMA, self.create_network_topology_schema())
        report.in_section(DockerContainerSection.standalone()).fire(self.collector)

    def _docker_info_group(self) -> ReportBuilder:
        if self.executor is None:
            raise DockerError("No docker executor configured; cannot read host version.")
        version = self.executor.docker_host_version()
        return (
            create_report(DOCKER_HOST_INFORMATION)
            .add_key_value_entry(DOCKER_VERSION, version.version)
            .add_key_value_entry(DOCKER_OS, version.os)
            .add_key_value_entry(DOCKER_KERNEL, version.kernel_version)
            .add_key_value_entry(DOCKER_API_VERSION, version.api_version)
            .add_key_value_entry(DOCKER_ARCH, version.arch)
        )

    def create_composition_schema(self) -> FileEntry:
        graph = build_composition_graph(self.compositions)
        directory = _ensure_directory(self.settings.schemas_dir, "schemas")
        image_file = directory / COMPOSITION_IMAGE_NAME
        try:
            render_graph_png(graph, image_file)
        except (OSError, ReportError) as exc:
            logger.warning(
                "Docker compositions schema could not be generated because of %s.", exc
            )
            return FileEntry.empty()
        return FileEntry.relative_to(self.root_dir, image_file)

    def create_network_topology_schema(self) -> FileEntry:
        directory = _ensure_directory(self.settings.networks_dir, "networks")
        image_file = directory / NETWORK_TOPOLOGY_IMAGE_NAME
        try:
            graph = build_network_topology_graph(self.compositions, self.executor)
            render_graph_png(graph, image_file)
        except (OSError, DockerError, ReportError) as exc:
            logger.warning(
                "Docker container network topology could not be generated because of %s.",
                exc,
            )
            return FileEntry.empty()
        return FileEntry.relative_to(self.root_dir, image_file)

    # -- statistics ------------------------------------------------------

    def capture_container_stats_before_test(self, event: BeforeTest) -> None:
        self.capture_stats(BEFORE, test_id=event.test_id)

    def report_container_stats_after_test(self, event: AfterTest) -> None:
        self.capture_stats(AFTER, test_id=event.test_id)

    def capture_stats(self, when: str, *, test_id: Optional[str] = None) -> None:
        if when not in (BEFORE, AFTER):
            raise ValueError(f"when must be {BEFORE!r} or {AFTER!r}, got {when!r}.")
        if self.executor is None:
            return
        for container_id in self.containers:
            try:
                statistics = ContainerStatistics.from_docker(
                    self.executor.stats_container(container_id)
                )
            except DockerError as exc:
                logger.warning(
                    "Skipping statistics of container %s: %s", container_id, exc
                )
                continue
            if when == BEFORE:
                self._stats_before[container_id] = statistics
                continue
            before = self._stats_before.pop(container_id, None)
            if before is None:
                logger.warning(
                    "No statistics captured for container %s before %s; skipping.",
                    container_id,
                    test_id or "the test",
                )
                continue
            self._fire_statistics(container_id, before, statistics, test_id)

    def _fire_statistics(
        self,
        container_id: str,
        before: ContainerStatistics,
        after: ContainerStatistics,
        test_id: Optional[str],
    ) -> None:
        decimal = self.settings.decimal
        (
            create_report(statistics_report_name(container_id))
            .add_entries(
                memory_statistics(before, after, decimal),
                io_statistics(before, after, decimal),
                network_statistics(before, after, decimal),
            )
            .in_section(TestMethodSection(test_id or "unknown"))
            .fire(self.collector)
        )

    # -- logs ------------------------------------------------------------

    def report_container_logs(self, event: BeforeStop) -> Optional[FileEntry]:
        cube_id = event.cube_id
        if not cube_id or self.executor is None:
            return None
        directory = _ensure_directory(self.settings.logs_dir, "logs")
        log_file = directory / f"{cube_id}.log"
        try:
            with log_file.open("wb") as handle:
                self.executor.copy_log(
                    cube_id,
                    handle,
                    follow=False,
                    stdout=True,
                    stderr=True,
                    timestamps=True,
                    tail=-1,
                )
        except DockerError as exc:
            log_file.unlink(missing_ok=True)
            logger.warning("Logs of container %s could not be copied: %s", cube_id, exc)
            return None
        entry = FileEntry.relative_to(self.root_dir, log_file)
        (
            create_report()
            .add_key_value_entry(LOG_PATH, entry)
            .in_section(DockerContainerSection(cube_id))
            .fire(self.collector)
        )
        return entry


__all__ = [
    "AFTER",
    "BEFORE",
    "DockerEnvironmentReporter",
    "io_statistics",
    "memory_statistics",
    "network_statistics",
]
