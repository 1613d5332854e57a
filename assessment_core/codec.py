# assessment_core/codec.py
from __future__ import annotations
import dataclasses
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from .types import (
    Answer,
    AssessmentDefinition,
    AssessmentResponse,
    Dimension,
    DimensionScore,
    Item,
    ReliabilityCheck,
    ReliabilityResult,
    ScoreSet,
    SubmissionMetadata,
)


# -------- utils: make any value type JSON-safe ----------
def to_basic(x: Any) -> Any:
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if isinstance(x, datetime):
        return x.isoformat()
    if dataclasses.is_dataclass(x) and not isinstance(x, type):
        out = {f.name: to_basic(getattr(x, f.name)) for f in dataclasses.fields(x)}
        if isinstance(x, ReliabilityResult):
            out["is_usable"] = x.is_usable
        return out
    if isinstance(x, Mapping):
        return {str(k): to_basic(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set)):
        return [to_basic(v) for v in x]
    raise TypeError(f"cannot serialize {type(x).__name__}")


def parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _pick(d: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    # stored records are snake_case; hand-written definitions may be camelCase
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


def _opt_float(raw: Any) -> Optional[float]:
    return None if raw is None else float(raw)


def dimension_from_dict(d: Mapping[str, Any]) -> Dimension:
    return Dimension(
        id=str(_pick(d, "id", "dimensionId")),
        name=str(_pick(d, "name", default="")),
        description=str(_pick(d, "description", default="")),
        item_ids=tuple(str(i) for i in _pick(d, "item_ids", "itemIds", default=())),
    )


def item_from_dict(d: Mapping[str, Any]) -> Item:
    return Item(
        id=str(_pick(d, "id", "itemId")),
        dimension_id=str(_pick(d, "dimension_id", "dimensionId", default="")),
        text=str(_pick(d, "text", default="")),
        is_reversed=bool(_pick(d, "is_reversed", "isReversed", default=False)),
        weight=float(_pick(d, "weight", default=1.0)),
        min_value=float(_pick(d, "min_value", "minValue", default=1)),
        max_value=float(_pick(d, "max_value", "maxValue", default=5)),
    )


def definition_from_dict(d: Mapping[str, Any]) -> AssessmentDefinition:
    return AssessmentDefinition(
        id=str(_pick(d, "id", "assessmentId")),
        title=str(_pick(d, "title", default="")),
        description=str(_pick(d, "description", default="")),
        dimensions=tuple(dimension_from_dict(x) for x in _pick(d, "dimensions", default=())),
        items=tuple(item_from_dict(x) for x in _pick(d, "items", default=())),
    )


def answer_from_dict(d: Mapping[str, Any]) -> Answer:
    return Answer(
        item_id=str(_pick(d, "item_id", "itemId")),
        value=_opt_float(d.get("value")),
        answered_at=parse_datetime(_pick(d, "answered_at", "answeredAt")),
    )


def answers_from_list(rows: Iterable[Mapping[str, Any]]) -> tuple[Answer, ...]:
    return tuple(answer_from_dict(r) for r in rows)


def metadata_from_dict(d: Optional[Mapping[str, Any]]) -> SubmissionMetadata:
    d = d or {}
    return SubmissionMetadata(
        started_at=parse_datetime(_pick(d, "started_at", "startedAt")),
        completed_at=parse_datetime(_pick(d, "completed_at", "completedAt")),
        time_spent=_opt_float(_pick(d, "time_spent", "timeSpent")),
        ip_address=_pick(d, "ip_address", "ipAddress"),
        user_agent=_pick(d, "user_agent", "userAgent"),
    )


def _scores_from_dict(d: Mapping[str, Any]) -> ScoreSet:
    return ScoreSet(
        dimensions=tuple(
            DimensionScore(
                dimension_id=str(x["dimension_id"]),
                name=str(x["name"]),
                raw_score=float(x["raw_score"]),
                normalized_score=float(x["normalized_score"]),
                percentile=int(x["percentile"]),
            )
            for x in d.get("dimensions", ())
        ),
        overall_score=float(d.get("overall_score", 0.0)),
        computed_at=parse_datetime(d.get("computed_at")),
    )


def _reliability_from_dict(d: Mapping[str, Any]) -> ReliabilityResult:
    return ReliabilityResult(
        checks=tuple(
            ReliabilityCheck(
                check_name=x["check_name"],
                passed=bool(x["passed"]),
                score=float(x["score"]),
                message=str(x.get("message", "")),
            )
            for x in d.get("checks", ())
        ),
        overall_rating=d["overall_rating"],
        flags=tuple(d.get("flags", ())),
        checked_at=parse_datetime(d.get("checked_at")),
    )


def response_from_dict(d: Mapping[str, Any]) -> AssessmentResponse:
    """Rebuild a stored response written with :func:`to_basic`."""

    return AssessmentResponse(
        id=str(d["id"]),
        user_id=str(d["user_id"]),
        assessment_id=str(d["assessment_id"]),
        answers=answers_from_list(d.get("answers", ())),
        scores=_scores_from_dict(d["scores"]),
        reliability=_reliability_from_dict(d["reliability"]),
        metadata=metadata_from_dict(d.get("metadata")),
        created_at=parse_datetime(d.get("created_at")),
    )


def response_summary(response: AssessmentResponse) -> Dict[str, Any]:
    """Results view: scores and reliability without the raw answers."""

    return {
        "responseId": response.id,
        "userId": response.user_id,
        "assessmentId": response.assessment_id,
        "scores": to_basic(response.scores),
        "reliability": to_basic(response.reliability),
        "completedAt": to_basic(response.metadata.completed_at),
    }
