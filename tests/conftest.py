from __future__ import annotations

from datetime import datetime, timezone

import pytest

from assessment_core.samples import load_definition
from assessment_core.types import (
    Answer,
    AssessmentDefinition,
    AssessmentResponse,
    DimensionScore,
    ReliabilityResult,
    ScoreSet,
)

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
SAMPLE_VALUES = [5, 2, 4, 5, 1, 4, 5, 2, 4]


def build_answers(values, item_ids=None) -> list[Answer]:
    """Pair values with ``q1..qN`` (or the given ids); ``None`` means skipped."""

    ids = item_ids or [f"q{i}" for i in range(1, len(values) + 1)]
    return [Answer(item_id=iid, value=v) for iid, v in zip(ids, values)]


def build_response(
    response_id: str,
    scores: dict[str, float],
    *,
    rating: str = "excellent",
    names: dict[str, str] | None = None,
) -> AssessmentResponse:
    """Hand-built scored response; ``scores`` maps dimension id -> normalized score."""

    names = names or {}
    dims = tuple(
        DimensionScore(
            dimension_id=dim_id,
            name=names.get(dim_id, dim_id.title()),
            raw_score=0.0,
            normalized_score=score,
            percentile=50,
        )
        for dim_id, score in scores.items()
    )
    overall = round(sum(scores.values()) / len(scores), 2) if scores else 0.0
    return AssessmentResponse(
        id=response_id,
        user_id=f"user-{response_id}",
        assessment_id="personality-v1",
        answers=(),
        scores=ScoreSet(dimensions=dims, overall_score=overall, computed_at=FIXED_NOW),
        reliability=ReliabilityResult(
            checks=(),
            overall_rating=rating,  # type: ignore[arg-type]
            flags=(),
            checked_at=FIXED_NOW,
        ),
    )


@pytest.fixture
def personality() -> AssessmentDefinition:
    return load_definition("personality-v1")


@pytest.fixture
def sample_answers() -> list[Answer]:
    return build_answers(SAMPLE_VALUES)
