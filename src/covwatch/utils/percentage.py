"""Percentage helpers shared by the coverage watcher and the reporters.

The metrics service publishes line coverage rounded to one decimal, so every
comparison against a previous value first brings the freshly computed value
to that precision. Both sides are then rounded half-up to an integer
percentage.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_HUNDRED = 100.0
_INTEGER = Decimal(1)
_ONE_DECIMAL = Decimal("0.1")


def calculate_coverage(lines_to_cover: int, uncovered_lines: int) -> float:
    """Return the line coverage percentage (0.0-100.0) for raw counts.

    Raises:
        ValueError: If there is nothing to cover or the counts are inconsistent.
    """
    if lines_to_cover <= 0:
        raise ValueError(f"lines_to_cover must be positive (got: {lines_to_cover})")
    if not 0 <= uncovered_lines <= lines_to_cover:
        raise ValueError(
            f"uncovered_lines must be between 0 and {lines_to_cover} (got: {uncovered_lines})"
        )
    return _HUNDRED * (lines_to_cover - uncovered_lines) / lines_to_cover


def _published(value: float) -> Decimal:
    return Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def round_percentage(value: float) -> int:
    """Round a percentage half-up to an integer, at the published precision.

    74.45 is published as 74.5 and therefore rounds to 75, not 74.
    """
    return int(_published(value).quantize(_INTEGER, rounding=ROUND_HALF_UP))


def rounded_percentage_greater_than(left: float, right: float) -> bool:
    """Return True if *left* is greater than *right* once both are rounded."""
    return round_percentage(left) > round_percentage(right)


def format_percentage(value: float) -> str:
    """Render a percentage with exactly one decimal digit (e.g. ``80.0``)."""
    return str(_published(value))
