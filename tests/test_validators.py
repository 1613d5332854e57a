from __future__ import annotations

import pytest

from assessment_core.codec import definition_from_dict, response_from_dict, to_basic
from assessment_core.reliability import check_reliability
from assessment_core.samples import available_definitions, load_definition
from assessment_core.scoring import score_assessment
from assessment_core.types import Answer, AssessmentDefinition, AssessmentResponse, Dimension, Item, SubmissionMetadata
from assessment_core.validators import AnswerValidationError, validate_answers, validate_definition

from tests.conftest import FIXED_NOW, build_answers


def test_sample_definition_is_bundled(personality):
    assert "personality-v1" in available_definitions()
    assert len(personality.dimensions) == 3
    assert len(personality.items) == 9
    assert [it.id for it in personality.items if it.is_reversed] == ["q2", "q5", "q8"]
    assert validate_definition(personality) == []


def test_unknown_sample_raises_key_error():
    with pytest.raises(KeyError):
        load_definition("does-not-exist")


def test_validate_answers_rejects_unknown_item(personality):
    with pytest.raises(AnswerValidationError, match="Invalid itemId: q42"):
        validate_answers([Answer("q42", 3)], personality)


def test_validate_answers_rejects_out_of_range(personality):
    with pytest.raises(AnswerValidationError, match="out of range for item q1"):
        validate_answers([Answer("q1", 6)], personality)


def test_validate_answers_keeps_nulls_and_stamps_time(personality):
    out = validate_answers([Answer("q1", None), Answer("q2", 1)], personality, now=FIXED_NOW)
    assert out[0].value is None
    assert all(a.answered_at == FIXED_NOW for a in out)


def test_validate_definition_reports_problems():
    definition = AssessmentDefinition(
        id="broken",
        dimensions=(Dimension(id="d", name="D", item_ids=("a", "ghost")),),
        items=(
            Item(id="a", dimension_id="d", min_value=5, max_value=5),
            Item(id="a", dimension_id="nowhere"),
        ),
    )
    problems = validate_definition(definition)
    assert "duplicate item id a" in problems
    assert any("minValue 5 >= maxValue 5" in p for p in problems)
    assert any("unknown dimension nowhere" in p for p in problems)
    assert any("unknown item ghost" in p for p in problems)


@pytest.mark.parametrize("bad_id", ["a/b", "a\\b", ".hidden", ""])
def test_validate_definition_rejects_unsafe_ids(bad_id):
    definition = AssessmentDefinition(id=bad_id, dimensions=(), items=())
    assert validate_definition(definition) == [f"invalid assessment id {bad_id!r}"]


def test_definition_accepts_camel_case_and_defaults():
    definition = definition_from_dict({
        "assessmentId": "mini",
        "dimensions": [{"dimensionId": "d", "name": "D"}],
        "items": [{"itemId": "i1", "dimensionId": "d"}],
    })
    item = definition.items[0]
    assert (item.weight, item.min_value, item.max_value, item.is_reversed) == (1.0, 1, 5, False)


def test_stored_response_round_trips(personality, sample_answers):
    answers = validate_answers(sample_answers, personality, now=FIXED_NOW)
    meta = SubmissionMetadata(started_at=FIXED_NOW, completed_at=FIXED_NOW, time_spent=60)
    response = AssessmentResponse(
        id="r1",
        user_id="u1",
        assessment_id=personality.id,
        answers=answers,
        scores=score_assessment(personality, answers, now=FIXED_NOW),
        reliability=check_reliability(personality, answers, meta, now=FIXED_NOW),
        metadata=meta,
        created_at=FIXED_NOW,
    )
    stored = to_basic(response)
    assert stored["reliability"]["is_usable"] is True
    assert stored["created_at"] == "2024-01-01T00:00:00+00:00"
    assert response_from_dict(stored) == response


def test_null_value_survives_serialization():
    basic = to_basic(build_answers([None]))
    assert basic == [{"item_id": "q1", "value": None, "answered_at": None}]
