import pytest

from cube_reporter.units import format_bytes


@pytest.mark.parametrize(
    ("value", "decimal", "expected"),
    [
        (0, False, "0 B"),
        (1023, False, "1023 B"),
        (1536, False, "1.5 KiB"),
        (1500, True, "1.5 kB"),
        (999, True, "999 B"),
        (5 * 1024**3, False, "5.0 GiB"),
        (-2048, False, "-2.0 KiB"),
    ],
)
def test_format_bytes(value, decimal, expected) -> None:
    assert format_bytes(value, decimal=decimal) == expected


def test_format_bytes_missing_value() -> None:
    assert format_bytes(None) == "n/a"


@pytest.mark.parametrize(
    "value, decimal, expected",
    [
        (1048575, False, "1.0 MiB"),
        (1024 * 1024 * 1024 - 1, False, "1.0 GiB"),
        (999_999, True, "1.0 MB"),
        (-1048575, False, "-1.0 MiB"),
    ],
)
def test_format_bytes_rounds_up_to_next_unit(value, decimal, expected) -> None:
    assert format_bytes(value, decimal=decimal) == expected
