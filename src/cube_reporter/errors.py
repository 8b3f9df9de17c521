"""Error hierarchy for cube_reporter."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class CubeReporterError(Exception):
    """Base exception for cube_reporter failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(CubeReporterError):
    """Configuration loading or validation error."""


class DockerError(CubeReporterError):
    """Docker engine is unreachable or rejected a request."""


class CompositionError(CubeReporterError):
    """Invalid container composition description."""


class ReportError(CubeReporterError):
    """Report building, rendering or writing error."""


__all__ = [
    "CubeReporterError",
    "ConfigError",
    "DockerError",
    "CompositionError",
    "ReportError",
]
