"""Reporter configuration."""

from cube_reporter.config.settings import ReporterSettings

__all__ = ["ReporterSettings"]
