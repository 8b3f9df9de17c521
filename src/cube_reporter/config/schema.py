"""Structured config schema for Hydra."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Optional


@dataclass
class ReporterConfig:
    root_dir: str = "target"
    title: str = "Docker Report"
    decimal: bool = False
    write_json: bool = True
    write_html: bool = True
    log_file: Optional[str] = "reports/cube_reporter.log"


@dataclass
class DockerConfig:
    executor: str = "docker"
    base_url: Optional[str] = None
    timeout: int = 60
    containers: list[str] = field(default_factory=list)


@dataclass
class CompositionConfig:
    path: Optional[str] = None


@dataclass
class AppConfig:
    reporter: ReporterConfig = field(default_factory=ReporterConfig)
    docker: DockerConfig = field(default_factory=DockerConfig)
    composition: CompositionConfig = field(default_factory=CompositionConfig)
    # Canned payloads for the dummy executor (stats/inspect/logs per container).
    dummy: dict[str, Any] = field(default_factory=dict)


def register_configs() -> None:
    try:
        from hydra.core.config_store import ConfigStore
    except ModuleNotFoundError:
        return
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store import failed: %s", exc
        )
        return
    cs = ConfigStore.instance()
    try:
        cs.store(group="schema", name="base", node=AppConfig, package="_global_")
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store registration failed: %s", exc
        )


__all__ = ["AppConfig", "CompositionConfig", "DockerConfig", "ReporterConfig", "register_configs"]
