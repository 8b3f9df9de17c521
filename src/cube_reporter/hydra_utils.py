"""Hydra config composition helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import OmegaConf

from cube_reporter.errors import ConfigError

DEFAULT_CONFIG_PATH = "configs"
DEFAULT_CONFIG_NAME = "default"


def _normalize_overrides(overrides: Optional[Sequence[str]]) -> list[str]:
    if not overrides:
        return []
    normalized: list[str] = []
    for item in overrides:
        if not item or item == "--":
            continue
        # Accept "--reporter.decimal=true" as well as hydra's bare form.
        if item.startswith("--") and "=" in item:
            item = item[2:]
        normalized.append(item)
    return normalized


def _normalize_config_name(config_name: str) -> str:
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name).stem
    return config_name


def compose_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> Any:
    from cube_reporter.config.schema import register_configs

    register_configs()
    config_dir = Path(config_path)
    if not config_dir.is_absolute():
        config_dir = (Path.cwd() / config_dir).resolve()
    if not config_dir.exists():
        raise ConfigError(f"Config directory not found: {config_dir}")
    if GlobalHydra.instance().is_initialized():
        GlobalHydra.instance().clear()
    try:
        with initialize_config_dir(config_dir=str(config_dir), version_base=None):
            return compose(
                config_name=_normalize_config_name(config_name),
                overrides=_normalize_overrides(overrides),
            )
    except ConfigError:
        raise
    except Exception as exc:
        raise ConfigError(
            f"Failed to compose config {config_name!r} from {config_dir}: {exc}"
        ) from exc


def resolve_config(cfg: Any) -> dict[str, Any]:
    if not OmegaConf.is_config(cfg):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise ConfigError("Config must be an OmegaConf object or a mapping.")
    resolved = OmegaConf.to_container(
        cfg,
        resolve=True,
        throw_on_missing=False,
    )
    if not isinstance(resolved, dict):
        raise ConfigError("Resolved config must be a mapping.")
    return resolved


def format_config(cfg: Any) -> str:
    if not OmegaConf.is_config(cfg):
        cfg = OmegaConf.create(dict(cfg))
    return OmegaConf.to_yaml(cfg, resolve=True)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_NAME",
    "compose_config",
    "resolve_config",
    "format_config",
]
