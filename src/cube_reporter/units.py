"""Byte-count formatting for report data items."""

from __future__ import annotations

from typing import Optional

_DECIMAL_UNITS = ("kB", "MB", "GB", "TB", "PB", "EB")
_BINARY_UNITS = ("KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def format_bytes(value: Optional[float], decimal: bool = False) -> str:
    """Render a byte count using SI (decimal) or IEC (binary) prefixes.

    ``format_bytes(1536)`` gives ``"1.5 KiB"`` and
    ``format_bytes(1500, decimal=True)`` gives ``"1.5 kB"``.
    """
    if value is None:
        return "n/a"
    base = 1000 if decimal else 1024
    units = _DECIMAL_UNITS if decimal else _BINARY_UNITS
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if magnitude < base:
        return f"{sign}{int(magnitude)} B"
    scaled = float(magnitude)
    unit = units[0]
    for unit in units:
        scaled /= base
        if round(scaled, 1) < base:
            break
    return f"{sign}{scaled:.1f} {unit}"


__all__ = ["format_bytes"]
