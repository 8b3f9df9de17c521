"""Container composition model and parsers (cube and docker-compose formats)."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from cube_reporter.errors import CompositionError
from cube_reporter.io_utils import read_yaml_payload

_COMPOSE_MARKERS = ("services",)
_RESERVED_TOP_LEVEL = ("version", "networks", "volumes", "configs", "secrets", "name")


@dataclass(frozen=True)
class Link:
    name: str
    alias: str

    @classmethod
    def parse(cls, value: str) -> "Link":
        if not isinstance(value, str) or not value.strip():
            raise CompositionError(f"Link must be a non-empty string, got {value!r}.")
        name, sep, alias = value.strip().partition(":")
        name = name.strip()
        alias = alias.strip() if sep else name
        if not name or not alias:
            raise CompositionError(f"Invalid link definition: {value!r}.")
        return cls(name=name, alias=alias)

    def __str__(self) -> str:
        return f"{self.name}:{self.alias}"


@dataclass(frozen=True)
class CubeContainer:
    name: str
    image: Optional[str] = None
    links: tuple[Link, ...] = ()
    network_mode: Optional[str] = None
    networks: tuple[str, ...] = ()
    manual: bool = False


@dataclass
class DockerCompositions:
    containers: dict[str, CubeContainer] = field(default_factory=dict)

    def __iter__(self) -> Iterator[str]:
        return iter(self.containers)

    def __len__(self) -> int:
        return len(self.containers)

    def __contains__(self, container_id: object) -> bool:
        return container_id in self.containers

    def get(self, container_id: str) -> Optional[CubeContainer]:
        return self.containers.get(container_id)

    def items(self) -> list[tuple[str, CubeContainer]]:
        return list(self.containers.items())

    def automatic_ids(self) -> list[str]:
        return [name for name, container in self.containers.items() if not container.manual]


def _coerce_links(value: Any, label: str) -> tuple[Link, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if isinstance(value, Mapping):
        # Compose also allows {service: alias}.
        return tuple(Link(name=str(name), alias=str(alias or name)) for name, alias in value.items())
    if not isinstance(value, Sequence):
        raise CompositionError(f"{label}.links must be a list of strings.")
    return tuple(Link.parse(item) for item in value)


def _coerce_networks(value: Any, label: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Mapping):
        return tuple(str(name) for name in value.keys())
    if isinstance(value, Sequence):
        networks = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise CompositionError(f"{label}.networks entries must be non-empty strings.")
            networks.append(item.strip())
        return tuple(networks)
    raise CompositionError(f"{label}.networks must be a list or mapping.")


def _coerce_optional_str(value: Any, label: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CompositionError(f"{label} must be a string.")
    cleaned = value.strip()
    return cleaned or None


def _build_container(
    name: str,
    definition: Any,
    *,
    network_mode_key: str,
) -> CubeContainer:
    if definition is None:
        definition = {}
    if not isinstance(definition, Mapping):
        raise CompositionError(f"Container {name!r} definition must be a mapping.")
    image = definition.get("image")
    if image is None and isinstance(definition.get("buildImage"), Mapping):
        image = definition["buildImage"].get("dockerfileName")
    return CubeContainer(
        name=name,
        image=None if image is None else str(image),
        links=_coerce_links(definition.get("links"), name),
        network_mode=_coerce_optional_str(
            definition.get(network_mode_key), f"{name}.{network_mode_key}"
        ),
        networks=_coerce_networks(definition.get("networks"), name),
        manual=bool(definition.get("manual", False)),
    )


def is_compose_payload(payload: Mapping[str, Any]) -> bool:
    return any(isinstance(payload.get(marker), Mapping) for marker in _COMPOSE_MARKERS)


def parse_compositions(payload: Any) -> DockerCompositions:
    """Parse a cube-format or docker-compose-format composition mapping."""
    if payload is None:
        return DockerCompositions()
    if not isinstance(payload, Mapping):
        raise CompositionError("Composition must be a mapping of container definitions.")
    containers: dict[str, CubeContainer] = {}
    if is_compose_payload(payload):
        for name, definition in payload["services"].items():
            name = str(name)
            containers[name] = _build_container(
                name, definition, network_mode_key="network_mode"
            )
        return DockerCompositions(containers)
    for name, definition in payload.items():
        name = str(name)
        if name in _RESERVED_TOP_LEVEL and not isinstance(definition, Mapping):
            continue
        if name == "networks" and isinstance(definition, Mapping):
            # Cube files declare networks at top level next to containers.
            if all(
                isinstance(value, Mapping) and "image" not in value
                for value in definition.values()
            ):
                continue
        containers[name] = _build_container(name, definition, network_mode_key="networkMode")
    return DockerCompositions(containers)


def load_compositions(path: Union[str, Path]) -> DockerCompositions:
    path = Path(path)
    if not path.exists():
        raise CompositionError(f"Composition file not found: {path}")
    try:
        payload = read_yaml_payload(
            path,
            error_message=f"Invalid YAML in composition {path}",
            error_cls=CompositionError,
        )
    except OSError as exc:
        raise CompositionError(f"Failed to read composition {path}: {exc}") from exc
    return parse_compositions(payload)


__all__ = [
    "CubeContainer",
    "DockerCompositions",
    "Link",
    "is_compose_payload",
    "load_compositions",
    "parse_compositions",
]
