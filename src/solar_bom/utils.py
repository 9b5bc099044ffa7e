"""
Utility functions for string formatting and numeric parsing.

This module handles the low-level text logic, including:
- Currency formatting ($1,234.50).
- Fixed-width label/value alignment for the order header.
- Lenient cell parsing for template values ("$12.00", "35mm", '6"').
"""

import math
import re


def format_money(amount: float) -> str:
    """
    Formats a dollar amount with thousands separators and two decimals.

    Args:
        amount: The value to format (e.g., 1234.5).

    Returns:
        A string like "$1,234.50".
    """
    return f"${amount:,.2f}"


def format_field(label: str, value: str, spacing: int) -> str:
    """
    Left-aligns a label in a fixed-width column, followed by its value.

    Labels longer than the column are cut to `spacing - 3` characters plus a
    period so the value column stays aligned.

    Args:
        label: The field label (e.g., "Project Name:").
        value: The field value.
        spacing: Column width reserved for the label.

    Returns:
        The padded "label   value" string.
    """
    if len(label) > spacing:
        label = label[: spacing - 3] + "."
    return f"{label:<{spacing}}{value}"


def parse_int_cell(raw: str) -> int:
    """
    Parses an integer cell, tolerating units and stray quoting.

    Handles "35mm", '6"', "1,200" and float-looking exports ("12.0").
    Fractional values such as "2.5" are rejected rather than rounded.

    Args:
        raw: The cell text.

    Returns:
        The integer value.

    Raises:
        ValueError: If no number can be recovered from the cell, or it is
            not a whole number.
    """
    value = parse_float_cell(raw)
    if not value.is_integer():
        raise ValueError(f"Not a whole number: {raw!r}")
    return int(value)


def parse_float_cell(raw: str) -> float:
    """
    Parses a numeric cell, tolerating currency symbols, units and separators.

    Args:
        raw: The cell text (e.g., "$1,250.00", "33mm").

    Returns:
        The float value.

    Raises:
        ValueError: If no number can be recovered from the cell.
    """
    cleaned = re.sub(r"[\$,\"\s]|mm$", "", raw.strip().lower())
    if not cleaned:
        raise ValueError(f"Empty numeric cell: {raw!r}")
    value = float(cleaned)
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Non-finite numeric cell: {raw!r}")
    return value


def ceil_div(value: int, divisor: int) -> int:
    """Integer ceiling division that stays exact for large counts."""
    return -(-value // divisor)
