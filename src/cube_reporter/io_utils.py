"""Shared JSON/YAML/text I/O helpers."""

from __future__ import annotations

from collections.abc import Callable
import json
import os
from pathlib import Path
import tempfile
from typing import IO, Any, Optional, Type

import yaml


def read_yaml_payload(
    path: Path,
    *,
    error_message: Optional[str] = None,
    error_cls: Type[Exception] = ValueError,
) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        text = handle.read()
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        if error_message:
            raise error_cls(f"{error_message}: {exc}") from exc
        raise


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _write_atomic(path: Path, writer: Callable[[IO[str]], None]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_handle: Optional[int] = None
    tmp_path: Optional[str] = None
    try:
        tmp_handle, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(tmp_handle, "w", encoding="utf-8") as handle:
            tmp_handle = None
            writer(handle)
        os.replace(tmp_path, path)
    finally:
        if tmp_handle is not None:
            try:
                os.close(tmp_handle)
            except OSError:
                pass
        if tmp_path is not None and os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


def write_json_atomic(path: Path, payload: Any) -> None:
    def _dump(handle: IO[str]) -> None:
        json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=True)
        handle.write("\n")

    _write_atomic(path, _dump)


def write_text_atomic(path: Path, text: str) -> None:
    _write_atomic(path, lambda handle: handle.write(text))


__all__ = [
    "read_json",
    "read_yaml_payload",
    "write_json_atomic",
    "write_text_atomic",
]
