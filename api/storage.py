"""Persistence for assessment definitions and scored responses.

JSON files on disk, one file per record plus an index of responses per user.
Responses are written once at submission and never updated; resubmitting
creates a new response.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from assessment_core.codec import definition_from_dict, response_from_dict, to_basic
from assessment_core.types import AssessmentDefinition, AssessmentResponse


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
DEFINITIONS_DIR = DATA_ROOT / "definitions"
RESPONSES_DIR = DATA_ROOT / "responses"
RESPONSE_INDEX_PATH = DATA_ROOT / "responses_index.json"

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _ensure_dirs() -> None:
    DEFINITIONS_DIR.mkdir(parents=True, exist_ok=True)
    RESPONSES_DIR.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        log.error("corrupt JSON record at %s", path)
        raise


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _safe_name(record_id: str) -> str:
    if not record_id or "/" in record_id or "\\" in record_id or record_id.startswith("."):
        raise ValueError(f"invalid record id {record_id!r}")
    return record_id


def save_definition(definition: AssessmentDefinition) -> None:
    _ensure_dirs()
    _write_json(DEFINITIONS_DIR / f"{_safe_name(definition.id)}.json", to_basic(definition))


def load_definition(assessment_id: str) -> Optional[AssessmentDefinition]:
    try:
        path = DEFINITIONS_DIR / f"{_safe_name(assessment_id)}.json"
    except ValueError:
        return None
    raw = _read_json(path, None)
    return definition_from_dict(raw) if raw is not None else None


def save_response(response: AssessmentResponse) -> None:
    """Persist the response and register it in the per-user index."""

    _ensure_dirs()
    path = RESPONSES_DIR / f"{_safe_name(response.id)}.json"
    if path.exists():
        raise FileExistsError(f"response {response.id} already stored")

    _write_json(path, to_basic(response))
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESPONSE_INDEX_PATH, {})
        index[response.id] = {
            "userId": response.user_id,
            "assessmentId": response.assessment_id,
            "isUsable": response.reliability.is_usable,
            "createdAt": to_basic(response.created_at),
        }
        _write_json(RESPONSE_INDEX_PATH, index)


def load_response(response_id: str) -> Optional[AssessmentResponse]:
    try:
        path = RESPONSES_DIR / f"{_safe_name(response_id)}.json"
    except ValueError:
        return None
    raw = _read_json(path, None)
    return response_from_dict(raw) if raw is not None else None


def list_responses_for_user(user_id: str) -> List[Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = _read_json(RESPONSE_INDEX_PATH, {})
    out: List[Dict[str, Any]] = []
    for rid, meta in index.items():
        if meta.get("userId") == user_id:
            item = {"responseId": rid}
            item.update(meta)
            out.append(item)
    out.sort(key=lambda r: r.get("createdAt") or "", reverse=True)
    return out
