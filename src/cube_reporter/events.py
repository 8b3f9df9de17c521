"""Lifecycle events delivered to the reporter by the host test runtime."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AfterAutoStart:
    """All automatically started containers are up."""


@dataclass(frozen=True)
class BeforeTest:
    test_id: str


@dataclass(frozen=True)
class AfterTest:
    test_id: str


@dataclass(frozen=True)
class BeforeStop:
    cube_id: Optional[str]


__all__ = ["AfterAutoStart", "AfterTest", "BeforeStop", "BeforeTest"]
