"""Validated reporter settings built from a resolved config mapping."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from cube_reporter.errors import ConfigError

REPORTS_DIR_NAME = "reports"
SCHEMAS_DIR_NAME = "schemas"
NETWORKS_DIR_NAME = "networks"
LOGS_DIR_NAME = "logs"
COMPOSITION_IMAGE_NAME = "docker_composition.png"
NETWORK_TOPOLOGY_IMAGE_NAME = "docker_network_topology.png"
REPORT_JSON_NAME = "report.json"
REPORT_HTML_NAME = "report.html"


def _section(cfg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} config must be a mapping.")
    return value


def _require_nonempty_str(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{label} must be a non-empty string.")
    return value.strip()


def _coerce_optional_str(value: Any, label: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{label} must be a string.")
    return value.strip() or None


def _coerce_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    raise ConfigError(f"{label} must be a boolean, got {value!r}.")


def _coerce_positive_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be a positive integer.")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be a positive integer, got {value!r}.") from exc
    if number <= 0:
        raise ConfigError(f"{label} must be a positive integer, got {value!r}.")
    return number


def _coerce_str_sequence(value: Any, label: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (_require_nonempty_str(value, label),)
    if not isinstance(value, Sequence):
        raise ConfigError(f"{label} must be a string or list of strings.")
    return tuple(_require_nonempty_str(item, f"{label} entries") for item in value)


@dataclass(frozen=True)
class ReporterSettings:
    root_dir: Path = Path("target")
    title: str = "Docker Report"
    decimal: bool = False
    write_json: bool = True
    write_html: bool = True
    log_file: Optional[str] = None
    executor: str = "docker"
    base_url: Optional[str] = None
    timeout: int = 60
    containers: tuple[str, ...] = ()
    composition_path: Optional[Path] = None
    dummy: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "ReporterSettings":
        if not isinstance(cfg, Mapping):
            raise ConfigError("Reporter config must be a mapping.")
        reporter = _section(cfg, "reporter")
        docker = _section(cfg, "docker")
        composition = _section(cfg, "composition")
        dummy = _section(cfg, "dummy")
        composition_path = _coerce_optional_str(composition.get("path"), "composition.path")
        return cls(
            root_dir=Path(
                _require_nonempty_str(reporter.get("root_dir", "target"), "reporter.root_dir")
            ),
            title=_require_nonempty_str(reporter.get("title", "Docker Report"), "reporter.title"),
            decimal=_coerce_bool(reporter.get("decimal", False), "reporter.decimal"),
            write_json=_coerce_bool(reporter.get("write_json", True), "reporter.write_json"),
            write_html=_coerce_bool(reporter.get("write_html", True), "reporter.write_html"),
            log_file=_coerce_optional_str(reporter.get("log_file"), "reporter.log_file"),
            executor=_require_nonempty_str(docker.get("executor", "docker"), "docker.executor"),
            base_url=_coerce_optional_str(docker.get("base_url"), "docker.base_url"),
            timeout=_coerce_positive_int(docker.get("timeout", 60), "docker.timeout"),
            containers=_coerce_str_sequence(docker.get("containers"), "docker.containers"),
            composition_path=None if composition_path is None else Path(composition_path),
            dummy=dict(dummy),
        )

    @property
    def reports_dir(self) -> Path:
        return self.root_dir / REPORTS_DIR_NAME

    @property
    def schemas_dir(self) -> Path:
        return self.reports_dir / SCHEMAS_DIR_NAME

    @property
    def networks_dir(self) -> Path:
        return self.reports_dir / NETWORKS_DIR_NAME

    @property
    def logs_dir(self) -> Path:
        return self.reports_dir / LOGS_DIR_NAME

    @property
    def report_json_path(self) -> Path:
        return self.reports_dir / REPORT_JSON_NAME

    @property
    def report_html_path(self) -> Path:
        return self.reports_dir / REPORT_HTML_NAME

    @property
    def log_file_path(self) -> Optional[Path]:
        if not self.log_file:
            return None
        path = Path(self.log_file)
        return path if path.is_absolute() else self.root_dir / path


__all__ = [
    "COMPOSITION_IMAGE_NAME",
    "NETWORK_TOPOLOGY_IMAGE_NAME",
    "ReporterSettings",
]
