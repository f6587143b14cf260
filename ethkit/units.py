"""Conversions of whole amounts into base units."""

from __future__ import annotations

import operator


def _scale(value: int, decimals: int) -> int:
    value = operator.index(value)
    if value < 0:
        raise ValueError("amount must not be negative")
    return value * 10**decimals


def ether(value: int) -> int:
    """Convert an amount of ether to wei (18 decimals)."""
    return _scale(value, 18)


def gwei(value: int) -> int:
    """Convert an amount of gwei to wei (9 decimals)."""
    return _scale(value, 9)