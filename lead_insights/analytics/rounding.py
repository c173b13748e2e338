"""Rounding helpers matching the dashboard's half-up display rounding."""
from __future__ import annotations

import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: Number, digits: int = 0) -> Number:
    """Round ``value`` half up (towards positive infinity) to ``digits`` places.

    Unlike :func:`round`, halves never round to even: ``round_half_up(2.5) == 3``.
    """

    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5)
    if digits == 0:
        return rounded
    return rounded / factor


def percent(part: Number, total: Number) -> float:
    """Return ``part / total * 100``, or 0 when ``total`` is 0."""

    if not total:
        return 0.0
    return part / total * 100
