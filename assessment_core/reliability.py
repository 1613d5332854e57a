"""Data-quality screening of a submitted answer set.

Five heuristics, each producing a :class:`ReliabilityCheck` with a 0..100
score: straightlining, variability, extreme responding, completion rate and,
when the client reported a duration, response time. The share of passed
checks maps to an overall rating; anything rated ``poor`` is not usable for
sharing or comparison.
"""
from __future__ import annotations

import logging
import statistics
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from . import config
from .normalization import round_half_up
from .types import (
    Answer,
    AssessmentDefinition,
    CheckName,
    Item,
    Rating,
    ReliabilityCheck,
    ReliabilityResult,
    SubmissionMetadata,
)

__all__ = [
    "check_reliability",
    "check_straightlining",
    "check_variability",
    "check_extreme_responding",
    "check_completion_rate",
    "check_response_time",
    "overall_rating",
    "failed_flags",
]

log = logging.getLogger(__name__)


def _check(name: CheckName, passed: bool, score: float, message: str) -> ReliabilityCheck:
    return ReliabilityCheck(
        check_name=name,
        passed=bool(passed),
        score=round_half_up(float(score), 2),
        message=message,
    )


def _answered(answers: Iterable[Answer]) -> List[Answer]:
    return [a for a in answers if a.value is not None]


def check_straightlining(answers: Sequence[Answer]) -> ReliabilityCheck:
    """Flag answer sets dominated by a single value, e.g. ``[3, 3, 3, 3, 3]``."""

    values = [a.value for a in _answered(answers)]
    if not values:
        return _check("straightlining", False, 0, "No answers provided")

    top = Counter(values).most_common(1)[0][1]
    # share of all answers, unanswered ones included
    share = top / len(answers) * 100.0
    passed = share <= config.STRAIGHTLINE_MAX_PERCENT
    score = 100.0 if passed else max(0.0, 100.0 - share)
    message = (
        "Good response variation"
        if passed
        else f"{round_half_up(share):.0f}% answers are identical - possible straightlining"
    )
    return _check("straightlining", passed, score, message)


def _scale_range(items: Sequence[Item]) -> float:
    lo, hi = config.DEFAULT_SCALE
    if items:
        lo, hi = items[0].min_value, items[0].max_value
    span = float(hi) - float(lo)
    if span <= 0:
        lo, hi = config.DEFAULT_SCALE
        span = hi - lo
    return span


def check_variability(answers: Sequence[Answer], items: Sequence[Item]) -> ReliabilityCheck:
    """Spread of the answered values relative to the scale width.

    The score is continuous (``normalized_sd * 400`` capped at 100) whether or
    not the check passes.
    """

    values = [float(a.value) for a in _answered(answers)]
    if len(values) < config.MIN_VALUES_FOR_VARIABILITY:
        return _check("variability", False, 0, "Not enough answers")

    normalized_sd = statistics.pstdev(values) / _scale_range(items)
    passed = normalized_sd >= config.VARIABILITY_MIN_NORMALIZED_SD
    score = min(100.0, normalized_sd * config.VARIABILITY_SCORE_FACTOR)
    message = (
        "Adequate response variability"
        if passed
        else "Low response variability - answers too similar"
    )
    return _check("variability", passed, score, message)


def check_extreme_responding(answers: Sequence[Answer], items: Sequence[Item]) -> ReliabilityCheck:
    """Overuse of the scale end points, judged against each item's own bounds."""

    answered = _answered(answers)
    if not answered:
        return _check("extreme_responding", False, 0, "No answers")

    bounds = {it.id: (it.min_value, it.max_value) for it in items}
    extreme = 0
    total = 0
    for ans in answered:
        b = bounds.get(ans.item_id)
        if b is None:
            continue
        total += 1
        if ans.value == b[0] or ans.value == b[1]:
            extreme += 1

    extreme_pct = extreme / total * 100.0 if total else 0.0
    passed = extreme_pct <= config.EXTREME_MAX_PERCENT
    score = 100.0 if passed else max(0.0, 100.0 - extreme_pct)
    message = (
        "Appropriate use of scale"
        if passed
        else f"{round_half_up(extreme_pct):.0f}% extreme values - possible bias"
    )
    return _check("extreme_responding", passed, score, message)


def check_completion_rate(answers: Sequence[Answer], items: Sequence[Item]) -> ReliabilityCheck:
    if not items:
        return _check("completion_rate", False, 0, "Assessment has no items")

    known = {it.id for it in items}
    answered_ids = {a.item_id for a in _answered(answers) if a.item_id in known}
    pct = len(answered_ids) / len(items) * 100.0
    passed = pct >= config.COMPLETION_MIN_PERCENT
    message = (
        f"{round_half_up(pct):.0f}% completion rate"
        if passed
        else f"Only {round_half_up(pct):.0f}% completed - too many skipped"
    )
    return _check("completion_rate", passed, pct, message)


def check_response_time(time_spent: float, item_count: int) -> ReliabilityCheck:
    """Average seconds per item; below the minimum suggests rushing."""

    if item_count <= 0:
        return _check("response_time", False, 0, "Assessment has no items")

    avg = float(time_spent) / item_count
    minimum = config.MIN_SECONDS_PER_ITEM
    passed = avg >= minimum
    score = min(100.0, avg / minimum * 100.0)
    message = (
        f"Average {round_half_up(avg):.0f}s per item - adequate time"
        if passed
        else f"Only {round_half_up(avg):.0f}s per item - possible rushing"
    )
    return _check("response_time", passed, score, message)


def overall_rating(checks: Sequence[ReliabilityCheck]) -> Rating:
    if not checks:
        return "poor"
    pass_rate = sum(1 for c in checks if c.passed) / len(checks)
    for floor, rating in config.RATING_BANDS:
        if pass_rate >= floor:
            return rating  # type: ignore[return-value]
    return "poor"


def failed_flags(checks: Sequence[ReliabilityCheck]) -> tuple[str, ...]:
    return tuple(c.check_name for c in checks if not c.passed)


def check_reliability(
    definition: AssessmentDefinition,
    answers: Iterable[Answer],
    metadata: Optional[SubmissionMetadata] = None,
    now: Optional[datetime] = None,
) -> ReliabilityResult:
    answers = list(answers)
    items = list(definition.items)

    checks = [
        check_straightlining(answers),
        check_variability(answers, items),
        check_extreme_responding(answers, items),
        check_completion_rate(answers, items),
    ]
    time_spent = metadata.time_spent if metadata is not None else None
    if time_spent is not None and time_spent > 0:
        checks.append(check_response_time(time_spent, len(items)))

    rating = overall_rating(checks)
    result = ReliabilityResult(
        checks=tuple(checks),
        overall_rating=rating,
        flags=failed_flags(checks),
        checked_at=now or datetime.now(timezone.utc),
    )
    if not result.is_usable:
        log.warning(
            "assessment %s answers rated %s, flags=%s",
            definition.id, rating, ",".join(result.flags),
        )
    return result
