# tools/score_answers.py
from __future__ import annotations
import argparse, json, logging, sys, uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional

from assessment_core.codec import answers_from_list, definition_from_dict, metadata_from_dict, to_basic
from assessment_core.reliability import check_reliability
from assessment_core.samples import SAMPLE_ASSESSMENT_ID, load_definition
from assessment_core.scoring import score_assessment
from assessment_core.share import generate_share_payload
from assessment_core.types import AssessmentResponse
from assessment_core.validators import AnswerValidationError, validate_answers

log = logging.getLogger("tools.score_answers")


def _load_doc(path: str) -> dict[str, Any]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    # a bare list is just the answers
    if isinstance(raw, list):
        return {"answers": raw}
    return raw


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Score an answers file offline.")
    ap.add_argument("answers", help="JSON file: list of {itemId, value} or {answers, metadata}")
    ap.add_argument("--assessment", default=SAMPLE_ASSESSMENT_ID, help="bundled assessment id")
    ap.add_argument("--definition", help="JSON assessment definition file (overrides --assessment)")
    ap.add_argument("--time-spent", type=float, default=None, help="seconds spent on the whole assessment")
    ap.add_argument("--share", action="store_true", help="include the share payload")
    ap.add_argument("--no-percentiles", action="store_true", help="omit percentiles from the share payload")
    ap.add_argument("--verbose", "-v", action="store_true")
    a = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if a.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    if a.definition:
        definition = definition_from_dict(json.loads(Path(a.definition).read_text(encoding="utf-8")))
    else:
        definition = load_definition(a.assessment)

    doc = _load_doc(a.answers)
    metadata = metadata_from_dict(doc.get("metadata"))
    if a.time_spent is not None:
        metadata = replace(metadata, time_spent=a.time_spent)

    try:
        answers = validate_answers(answers_from_list(doc.get("answers", [])), definition)
    except AnswerValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    scores = score_assessment(definition, answers)
    reliability = check_reliability(definition, answers, metadata)
    out: dict[str, Any] = {
        "assessmentId": definition.id,
        "scores": to_basic(scores),
        "reliability": to_basic(reliability),
    }
    if a.share:
        response = AssessmentResponse(
            id=str(doc.get("responseId") or uuid.uuid4()),
            user_id=str(doc.get("userId") or "local"),
            assessment_id=definition.id,
            answers=answers,
            scores=scores,
            reliability=reliability,
            metadata=metadata,
        )
        out["share"] = generate_share_payload(response, include_percentiles=not a.no_percentiles)

    print(json.dumps(out, indent=2))
    log.debug("rating=%s flags=%s", reliability.overall_rating, reliability.flags)
    return 0 if reliability.is_usable else 2


if __name__ == "__main__":
    sys.exit(main())
