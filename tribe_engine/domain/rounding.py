"""Rounding shared by every score computation."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 toward positive infinity.

    Unlike round(), which rounds halves to even (round(2.5) == 2).
    """
    return math.floor(value + 0.5)
