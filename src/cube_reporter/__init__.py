"""Container statistics and environment reporting for pytest sessions."""

__version__ = "0.1.0"

__all__ = ["__version__"]
