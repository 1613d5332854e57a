from __future__ import annotations

from assessment_core.scoring import group_by_dimension, overall_score, score_assessment, score_dimension
from assessment_core.types import Answer, AssessmentDefinition, Dimension, Item

from tests.conftest import FIXED_NOW, SAMPLE_VALUES, build_answers


def _by_id(score_set):
    return {d.dimension_id: d for d in score_set.dimensions}


def test_sample_answers_score_per_dimension(personality, sample_answers):
    scores = score_assessment(personality, sample_answers, now=FIXED_NOW)
    dims = _by_id(scores)

    assert [d.dimension_id for d in scores.dimensions] == [
        "extraversion",
        "agreeableness",
        "conscientiousness",
    ]
    # 5 + reverse(2) + 4
    assert dims["extraversion"].raw_score == 13
    assert dims["extraversion"].normalized_score == 83.33
    assert dims["extraversion"].percentile == 99
    # 5 + reverse(1) + 4
    assert dims["agreeableness"].raw_score == 14
    assert dims["agreeableness"].normalized_score == 91.67
    assert dims["agreeableness"].percentile == 100
    assert dims["conscientiousness"].normalized_score == 83.33
    assert scores.overall_score == 86.11
    assert scores.computed_at == FIXED_NOW


def test_scoring_is_deterministic_apart_from_timestamp(personality, sample_answers):
    first = score_assessment(personality, sample_answers)
    second = score_assessment(personality, sample_answers)
    assert first.dimensions == second.dimensions
    assert first.overall_score == second.overall_score


def test_partial_completion_lowers_score_against_full_range(personality):
    # only q1 answered (5): raw 5 against range 3..15
    answers = build_answers([5], ["q1"])
    dims = _by_id(score_assessment(personality, answers))
    assert dims["extraversion"].raw_score == 5
    assert dims["extraversion"].normalized_score == 16.67
    assert dims["agreeableness"].normalized_score == 0
    assert dims["agreeableness"].percentile == 0


def test_null_answers_count_as_unanswered(personality):
    answers = build_answers([None] * 9)
    scores = score_assessment(personality, answers)
    assert all(d.raw_score == 0 and d.percentile == 0 for d in scores.dimensions)
    assert scores.overall_score == 0


def test_dimension_without_items_scores_zero():
    dim = Dimension(id="empty", name="Empty")
    result = score_dimension(dim, (), {})
    assert (result.raw_score, result.normalized_score, result.percentile) == (0, 0, 0)


def test_definition_without_dimensions_gives_zero_overall():
    scores = score_assessment(AssessmentDefinition(id="blank"), [Answer("q1", 3)])
    assert scores.dimensions == ()
    assert scores.overall_score == 0


def test_weights_and_degenerate_range():
    definition = AssessmentDefinition(
        id="weighted",
        dimensions=(Dimension(id="d", name="D"), Dimension(id="flat", name="Flat")),
        items=(
            Item(id="a", dimension_id="d", weight=2.0),
            Item(id="b", dimension_id="d", weight=1.0, is_reversed=True),
            Item(id="c", dimension_id="flat", min_value=3, max_value=3),
        ),
    )
    scores = _by_id(score_assessment(definition, [Answer("a", 4), Answer("b", 2), Answer("c", 3)]))
    # 4*2 + reverse(2)*1 = 12 against 3..15
    assert scores["d"].raw_score == 12
    assert scores["d"].normalized_score == 75
    assert scores["flat"].normalized_score == 50
    assert scores["flat"].percentile == 50


def test_group_by_dimension_drops_unknown_items(personality):
    answers = build_answers(SAMPLE_VALUES) + [Answer("zz", 3)]
    grouped = group_by_dimension(personality, answers)
    assert sorted(grouped) == ["agreeableness", "conscientiousness", "extraversion"]
    assert [a.item_id for a in grouped["extraversion"]] == ["q1", "q2", "q3"]


def test_overall_score_empty():
    assert overall_score([]) == 0
