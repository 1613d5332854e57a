"""Privacy-safe views of scored responses.

Share and compare payloads expose dimension names, 0..100 scores,
percentiles and text labels only. Raw answers, reliability check details and
the real user and response identifiers stay out. Responses rated ``poor`` are
never turned into a profile.
"""
from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .normalization import round_half_up
from .types import AssessmentResponse, DimensionScore

__all__ = [
    "generate_share_payload",
    "generate_compare_payload",
    "compare_dimensions",
    "score_level",
    "score_description",
    "profile_strength",
    "similarity_category",
    "compatibility_level",
    "comparison_interpretation",
    "profile_id",
    "comparison_id",
]


def _now_iso(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _digest(text: str) -> str:
    data = text.encode("utf-8")
    if config.PROFILE_ID_SECRET:
        return hmac.new(config.PROFILE_ID_SECRET.encode("utf-8"), data, hashlib.sha256).hexdigest()
    return hashlib.sha256(data).hexdigest()


def profile_id(response_id: str) -> str:
    """Stable one-way display id for a response."""

    return f"profile_{_digest(response_id)[: config.PROFILE_ID_LENGTH]}"


def comparison_id(response_id_a: str, response_id_b: str) -> str:
    """Order-independent id for a pair of responses."""

    combined = "_".join(sorted((response_id_a, response_id_b)))
    return f"compare_{_digest(combined)[: config.COMPARISON_ID_LENGTH]}"


def score_level(score: float) -> str:
    s = float(score)
    if s >= 80: return "very_high"
    if s >= 60: return "high"
    if s >= 40: return "moderate"
    if s >= 20: return "low"
    return "very_low"


_DESCRIPTIONS: Dict[str, str] = {
    "very_high": "Very strong in {name}",
    "high": "Above average in {name}",
    "moderate": "Moderate {name}",
    "low": "Below average in {name}",
    "very_low": "Low {name}",
}


def score_description(dimension_name: str, score: float) -> str:
    return _DESCRIPTIONS[score_level(score)].format(name=dimension_name)


def profile_strength(dimensions: Sequence[DimensionScore]) -> str:
    """How far, on average, the profile sits from the population midpoint."""

    if not dimensions:
        return "balanced"
    dev = sum(abs(d.normalized_score - 50.0) for d in dimensions) / len(dimensions)
    if dev >= 25: return "very_defined"
    if dev >= 15: return "defined"
    if dev >= 10: return "moderate"
    return "balanced"


def similarity_category(similarity: float) -> str:
    if similarity >= 90: return "very_similar"
    if similarity >= 75: return "similar"
    if similarity >= 50: return "somewhat_different"
    return "very_different"


def compatibility_level(overall_similarity: float) -> str:
    if overall_similarity >= 85: return "very_high"
    if overall_similarity >= 70: return "high"
    if overall_similarity >= 50: return "moderate"
    if overall_similarity >= 30: return "low"
    return "very_low"


def comparison_interpretation(dimension_name: str, score_a: float, score_b: float) -> str:
    diff = abs(score_a - score_b)
    if diff < 10:
        return f"Very similar {dimension_name}"
    if diff < 25:
        return f"Slight difference in {dimension_name}"
    if diff < 40:
        return f"Moderate difference in {dimension_name}"
    return f"Significant difference in {dimension_name}"


def generate_share_payload(
    response: AssessmentResponse,
    include_percentiles: bool = True,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    reliability = response.reliability
    if not reliability.is_usable:
        return {
            "error": "Response quality too low to share",
            "rating": reliability.overall_rating,
        }

    dims: List[Dict[str, Any]] = []
    for d in response.scores.dimensions:
        entry: Dict[str, Any] = {"name": d.name, "score": d.normalized_score}
        if include_percentiles:
            entry["percentile"] = d.percentile
        entry["level"] = score_level(d.normalized_score)
        entry["description"] = score_description(d.name, d.normalized_score)
        dims.append(entry)

    return {
        "profileId": profile_id(response.id),
        "assessmentVersion": response.assessment_id,
        "overallScore": response.scores.overall_score,
        "dimensions": dims,
        "profileStrength": profile_strength(response.scores.dimensions),
        "generatedAt": _now_iso(now),
        "disclaimer": config.DISCLAIMER_SHARE,
    }


def compare_dimensions(
    dimensions_a: Sequence[DimensionScore],
    dimensions_b: Sequence[DimensionScore],
) -> List[Dict[str, Any]]:
    """Pair dimensions by id; those present on one side only are skipped."""

    by_id = {}
    for d in dimensions_b:
        by_id.setdefault(d.dimension_id, d)

    out: List[Dict[str, Any]] = []
    for a in dimensions_a:
        b = by_id.get(a.dimension_id)
        if b is None:
            continue
        diff = abs(a.normalized_score - b.normalized_score)
        similarity = 100.0 - diff
        out.append({
            "dimensionId": a.dimension_id,
            "dimensionName": a.name,
            "profile1Score": a.normalized_score,
            "profile2Score": b.normalized_score,
            "difference": int(round_half_up(diff)),
            "similarity": int(round_half_up(similarity)),
            "category": similarity_category(similarity),
            "interpretation": comparison_interpretation(a.name, a.normalized_score, b.normalized_score),
        })
    return out


def _first_max(comparisons: Sequence[Dict[str, Any]], key: str) -> Optional[Dict[str, Any]]:
    if not comparisons:
        return None
    best = comparisons[0]
    for comp in comparisons[1:]:
        if comp[key] > best[key]:
            best = comp
    return {"dimension": best["dimensionName"], "score": best[key]}


def generate_compare_payload(
    response_a: AssessmentResponse,
    response_b: AssessmentResponse,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    if not (response_a.reliability.is_usable and response_b.reliability.is_usable):
        return {"error": "One or both profiles have insufficient quality"}

    comparisons = compare_dimensions(response_a.scores.dimensions, response_b.scores.dimensions)
    if comparisons:
        overall = sum(c["similarity"] for c in comparisons) / len(comparisons)
    else:
        overall = 0.0

    # split on the rounded similarity; category keeps the unrounded value
    similar = [c["dimensionName"] for c in comparisons if c["similarity"] >= config.SIMILAR_AREA_MIN]
    different = [c["dimensionName"] for c in comparisons if c["similarity"] < config.SIMILAR_AREA_MIN]

    return {
        "comparisonId": comparison_id(response_a.id, response_b.id),
        "profile1": {"profileId": profile_id(response_a.id)},
        "profile2": {"profileId": profile_id(response_b.id)},
        "overallSimilarity": int(round_half_up(overall)),
        "compatibilityLevel": compatibility_level(overall),
        "dimensions": comparisons,
        "summary": {
            "similarAreas": similar,
            "differentAreas": different,
            "strongestSimilarity": _first_max(comparisons, "similarity"),
            "largestDifference": _first_max(comparisons, "difference"),
        },
        "generatedAt": _now_iso(now),
        "disclaimer": config.DISCLAIMER_COMPARE,
    }
