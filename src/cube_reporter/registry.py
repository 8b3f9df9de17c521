"""Registries for executor implementations and started containers."""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Iterator
from typing import Any

from cube_reporter.errors import DockerError

DEFAULT_KINDS = ("executor",)


def _validate_key(label: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TypeError(f"{label} must be a non-empty string.")
    return value


def _format_options(options: Iterable[str]) -> str:
    values = builtins.list(options)
    if not values:
        return "<none>"
    return ", ".join(sorted(values))


class Registry:
    """Registry of plugin objects organized by kind/name."""

    def __init__(self, kinds: Iterable[str] = DEFAULT_KINDS) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        for kind in kinds:
            self.add_kind(kind)

    def add_kind(self, kind: str, *, overwrite: bool = False) -> None:
        kind = _validate_key("kind", kind)
        if kind in self._entries and not overwrite:
            raise ValueError(f"Registry kind already exists: {kind!r}.")
        self._entries[kind] = {}

    def _bucket(self, kind: str) -> dict[str, Any]:
        kind = _validate_key("kind", kind)
        bucket = self._entries.get(kind)
        if bucket is None:
            available = _format_options(self._entries.keys())
            raise KeyError(
                f"Unknown registry kind: {kind!r}. Available kinds: {available}."
            )
        return bucket

    def register(self, kind: str, name: str, obj: Any, *, overwrite: bool = False) -> None:
        name = _validate_key("name", name)
        bucket = self._bucket(kind)
        if name in bucket and not overwrite:
            raise ValueError(
                f"{kind} {name!r} is already registered; use overwrite=True to replace."
            )
        bucket[name] = obj

    def get(self, kind: str, name: str) -> Any:
        name = _validate_key("name", name)
        bucket = self._bucket(kind)
        if name not in bucket:
            available = _format_options(bucket.keys())
            raise KeyError(
                f"{kind} {name!r} is not registered. Available: {available}."
            )
        return bucket[name]

    def list(self, kind: str) -> list[str]:
        return builtins.list(self._bucket(kind).keys())


_DEFAULT_REGISTRY = Registry()


def register(kind: str, name: str, obj: Any, *, overwrite: bool = False) -> None:
    _DEFAULT_REGISTRY.register(kind, name, obj, overwrite=overwrite)


def get(kind: str, name: str) -> Any:
    return _DEFAULT_REGISTRY.get(kind, name)


def list(kind: str) -> list[str]:
    return _DEFAULT_REGISTRY.list(kind)


def resolve_executor(name: str, *, registry: Registry | None = None) -> Any:
    # Importing the package registers the built-in executors.
    import cube_reporter.docker  # noqa: F401

    registry = registry or _DEFAULT_REGISTRY
    try:
        return registry.get("executor", name)
    except KeyError as exc:
        available = _format_options(registry.list("executor"))
        raise DockerError(
            f"Executor {name!r} is not registered. Available: {available}."
        ) from exc


class ContainerRegistry:
    """Containers started for the current session, keyed by container id.

    Insertion order is preserved so statistics are reported in the order the
    containers were started.
    """

    def __init__(self, container_ids: Iterable[str] = ()) -> None:
        self._containers: dict[str, dict[str, Any]] = {}
        for container_id in container_ids:
            self.add(container_id)

    def add(self, container_id: str, **metadata: Any) -> None:
        container_id = _validate_key("container id", container_id)
        self._containers.setdefault(container_id, {}).update(metadata)

    def remove(self, container_id: str) -> None:
        self._containers.pop(container_id, None)

    def get(self, container_id: str) -> dict[str, Any]:
        if container_id not in self._containers:
            available = _format_options(self._containers.keys())
            raise KeyError(
                f"Container {container_id!r} is not registered. Available: {available}."
            )
        return self._containers[container_id]

    def ids(self) -> builtins.list[str]:
        return builtins.list(self._containers)

    def __contains__(self, container_id: object) -> bool:
        return container_id in self._containers

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self._containers)


__all__ = [
    "DEFAULT_KINDS",
    "ContainerRegistry",
    "Registry",
    "register",
    "get",
    "list",
    "resolve_executor",
]
