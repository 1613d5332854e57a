from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from .types import Answer, AssessmentDefinition, Dimension, DimensionScore, Item, ScoreSet
from .normalization import normalize_score, percentile, reverse_score, round_half_up

log = logging.getLogger(__name__)


def _zero_score(dimension: Dimension) -> DimensionScore:
    return DimensionScore(
        dimension_id=dimension.id,
        name=dimension.name,
        raw_score=0.0,
        normalized_score=0.0,
        percentile=0,
    )


def _index_answers(answers: Iterable[Answer]) -> Dict[str, Answer]:
    # first answer for an item wins
    out: Dict[str, Answer] = {}
    for ans in answers:
        out.setdefault(ans.item_id, ans)
    return out


def group_by_dimension(
    definition: AssessmentDefinition, answers: Iterable[Answer]
) -> Dict[str, List[Answer]]:
    """Bucket answers by the dimension of their item; unknown items are dropped."""

    items = definition.item_map()
    grouped: Dict[str, List[Answer]] = {}
    for ans in answers:
        it = items.get(ans.item_id)
        if it is None or not it.dimension_id:
            continue
        grouped.setdefault(it.dimension_id, []).append(ans)
    return grouped


def score_dimension(
    dimension: Dimension,
    items: Sequence[Item],
    answers_by_item: Dict[str, Answer],
) -> DimensionScore:
    """Weighted, reverse-aware score of one dimension.

    The possible range is summed over every item of the dimension, answered or
    not, so skipped items pull the normalized score down instead of being
    rescaled away.
    """

    if not items:
        return _zero_score(dimension)

    raw = 0.0
    answered = 0
    for it in items:
        ans = answers_by_item.get(it.id)
        if ans is None or ans.value is None:
            continue
        value = float(ans.value)
        if it.is_reversed:
            value = reverse_score(value, it.min_value, it.max_value)
        raw += value * it.weight
        answered += 1

    if answered == 0:
        return _zero_score(dimension)

    min_possible = sum(it.min_value * it.weight for it in items)
    max_possible = sum(it.max_value * it.weight for it in items)
    normalized = normalize_score(raw, min_possible, max_possible)
    pct = percentile(normalized)

    log.debug(
        "dimension %s raw=%.3f range=[%.3f, %.3f] answered=%d/%d",
        dimension.id, raw, min_possible, max_possible, answered, len(items),
    )
    return DimensionScore(
        dimension_id=dimension.id,
        name=dimension.name,
        raw_score=round_half_up(raw, 2),
        normalized_score=round_half_up(normalized, 2),
        percentile=int(round_half_up(pct)),
    )


def overall_score(dimension_scores: Sequence[DimensionScore]) -> float:
    if not dimension_scores:
        return 0.0
    total = sum(ds.normalized_score for ds in dimension_scores)
    return round_half_up(total / len(dimension_scores), 2)


def score_assessment(
    definition: AssessmentDefinition,
    answers: Iterable[Answer],
    now: Optional[datetime] = None,
) -> ScoreSet:
    """Score every dimension of ``definition`` against ``answers``.

    Answer values are assumed to be validated against their item bounds
    already; see :func:`assessment_core.validators.validate_answers`.
    """

    grouped = group_by_dimension(definition, answers)
    scores = tuple(
        score_dimension(
            dim,
            definition.items_for(dim.id),
            _index_answers(grouped.get(dim.id, ())),
        )
        for dim in definition.dimensions
    )
    overall = overall_score(scores)
    log.info(
        "scored assessment %s: %d dimensions, overall=%.2f",
        definition.id, len(scores), overall,
    )
    return ScoreSet(
        dimensions=scores,
        overall_score=overall,
        computed_at=now or datetime.now(timezone.utc),
    )
