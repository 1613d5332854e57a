from __future__ import annotations
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from dataclasses import replace

from .types import Answer, AssessmentDefinition


class AnswerValidationError(ValueError):
    """Submitted answers do not fit the assessment they claim to answer."""


def validate_answers(
    answers: Iterable[Answer],
    definition: AssessmentDefinition,
    now: Optional[datetime] = None,
) -> tuple[Answer, ...]:
    """Reject unknown items and out-of-range values; stamp ``answered_at``.

    ``None`` values are kept as unanswered items.
    """

    items = definition.item_map()
    stamp = now or datetime.now(timezone.utc)
    out: List[Answer] = []
    for ans in answers:
        it = items.get(ans.item_id)
        if it is None:
            raise AnswerValidationError(f"Invalid itemId: {ans.item_id}")
        if ans.value is not None and not (it.min_value <= ans.value <= it.max_value):
            raise AnswerValidationError(
                f"Value {ans.value:g} out of range for item {ans.item_id} "
                f"(valid: {it.min_value:g}-{it.max_value:g})"
            )
        out.append(ans if ans.answered_at is not None else replace(ans, answered_at=stamp))
    return tuple(out)


def validate_definition(definition: AssessmentDefinition) -> list[str]:
    """Return a list of structural problems; empty means the definition is usable."""

    problems: list[str] = []
    dim_ids = [d.id for d in definition.dimensions]
    item_ids = [it.id for it in definition.items]

    for key, n in Counter(dim_ids).items():
        if n > 1:
            problems.append(f"duplicate dimension id {key}")
    for key, n in Counter(item_ids).items():
        if n > 1:
            problems.append(f"duplicate item id {key}")

    if not definition.id or "/" in definition.id or "\\" in definition.id or definition.id.startswith("."):
        problems.append(f"invalid assessment id {definition.id!r}")

    known_dims = set(dim_ids)
    known_items = set(item_ids)
    for it in definition.items:
        if it.min_value >= it.max_value:
            problems.append(f"item {it.id}: minValue {it.min_value:g} >= maxValue {it.max_value:g}")
        if it.dimension_id not in known_dims:
            problems.append(f"item {it.id}: unknown dimension {it.dimension_id}")
        if it.weight < 0:
            problems.append(f"item {it.id}: negative weight {it.weight:g}")
    for d in definition.dimensions:
        for iid in d.item_ids:
            if iid not in known_items:
                problems.append(f"dimension {d.id}: lists unknown item {iid}")
    return problems
