"""Deterministic pseudo-random helpers for the DCM fixtures.

Every generated figure (allocations, holding behaviour, secondary prints)
is a pure function of an identifier, so repeated calls agree and tests
can rely on exact values.
"""

from __future__ import annotations

import math
from typing import Callable


def char_seed(text: str) -> int:
    """Sum of the character codes of ``text``."""
    return sum(ord(c) for c in text)


def make_rng(seed: int, shift: float = 0.0) -> Callable[[int], float]:
    """``rng(n)`` in ``[0, 1)`` (minus ``shift``) from a linear congruence on ``seed``."""

    def rng(n: int) -> float:
        return ((seed * (n + 1) * 9301 + 49297) % 233280) / 233280 - shift

    return rng


def round_half_up(value: float, digits: int = 0):
    """Round halves away from negative infinity, as the dashboard figures expect."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5)
    return int(rounded) if digits == 0 else rounded / factor


__all__ = ["char_seed", "make_rng", "round_half_up"]
