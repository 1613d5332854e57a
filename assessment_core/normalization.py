"""Scale arithmetic shared by the scorer and the share payloads.

Three primitives: flipping a negatively worded answer onto the dimension's
polarity, rescaling a weighted raw score onto 0..100, and turning a 0..100
score into a percentile under a normal model of the population.
"""
from __future__ import annotations

import math

from . import config

__all__ = [
    "reverse_score",
    "normalize_score",
    "normal_cdf",
    "percentile",
    "round_half_up",
]

# Abramowitz & Stegun 26.2.17, |error| < 7.5e-8
_P = 0.2316419
_B = (0.319381530, -0.356563782, 1.781477937, -1.821255978, 1.330274429)
_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def reverse_score(value: float, min_value: float, max_value: float) -> float:
    """Mirror ``value`` inside ``[min_value, max_value]``.

    Example: on a 1..5 scale an answer of 2 becomes 4.
    """

    return (max_value + min_value) - value


def normalize_score(raw: float, min_possible: float, max_possible: float) -> float:
    """Rescale ``raw`` from ``[min_possible, max_possible]`` onto 0..100.

    A degenerate range returns the midpoint 50. The result is not clamped, so
    out-of-range raw scores map outside 0..100.
    """

    if max_possible == min_possible:
        return 50.0
    return ((raw - min_possible) / (max_possible - min_possible)) * 100.0


def normal_cdf(z: float) -> float:
    """Standard normal CDF via a rational-polynomial approximation.

    The tail is evaluated on ``|z|`` and mirrored, which keeps
    ``normal_cdf(-z) == 1 - normal_cdf(z)``.
    """

    if z == 0:
        return 0.5
    x = abs(z)
    t = 1.0 / (1.0 + _P * x)
    poly = t * (_B[0] + t * (_B[1] + t * (_B[2] + t * (_B[3] + t * _B[4]))))
    tail = _INV_SQRT_2PI * math.exp(-x * x / 2.0) * poly
    return 1.0 - tail if z > 0 else tail


def percentile(
    normalized: float,
    mean: float = config.PERCENTILE_MEAN,
    sd: float = config.PERCENTILE_SD,
) -> float:
    """Percentile (0..100) of a normalized score, assuming ``N(mean, sd)``."""

    z = (normalized - mean) / sd
    return normal_cdf(z) * 100.0


def round_half_up(x: float, digits: int = 0) -> float:
    """Round halves towards +inf, unlike the builtin banker's ``round``."""

    factor = 10 ** digits
    return math.floor(x * factor + 0.5) / factor
