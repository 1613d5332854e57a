from __future__ import annotations
import json
from pathlib import Path
from typing import List

from .codec import definition_from_dict
from .types import AssessmentDefinition

SAMPLE_ASSESSMENT_ID = "personality-v1"
_DATA_DIR = Path(__file__).with_name("data")


def available_definitions() -> List[str]:
    return sorted(p.stem for p in _DATA_DIR.glob("*.json"))


def load_definition(assessment_id: str = SAMPLE_ASSESSMENT_ID) -> AssessmentDefinition:
    path = _DATA_DIR / f"{assessment_id}.json"
    if not path.exists():
        raise KeyError(assessment_id)
    raw = json.loads(path.read_text(encoding="utf-8"))
    return definition_from_dict(raw)
