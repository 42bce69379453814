"""JSON-file stores for assessments, responses, assignments and the candidate timeline.

Assessments are upserted keyed by job id. Responses are written once each,
one file per response plus an index. Timeline events are append-only.
Assignments link candidates to assessments, one per pair.
"""

from __future__ import annotations

import json
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from assessment_core.config import load_config
from assessment_core.codec import (
    assessment_from_dict,
    assessment_to_dict,
    assignment_from_dict,
    assignment_to_dict,
    response_from_dict,
    response_to_dict,
    timeline_to_dict,
)
from assessment_core.types import Assessment, Assignment, Response, TimelineEvent


DATA_ROOT = Path(load_config().get("DATA_DIR", "data")).resolve()
ASSESSMENTS_PATH = DATA_ROOT / "assessments.json"
RESPONSES_DIR = DATA_ROOT / "responses"
RESPONSE_INDEX_PATH = DATA_ROOT / "responses_index.json"
TIMELINE_PATH = DATA_ROOT / "timeline.json"
ASSIGNMENTS_PATH = DATA_ROOT / "assignments.json"

_LOCK = threading.Lock()


def _ensure_dirs() -> None:
    RESPONSES_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---- assessments ----
def _load_assessments() -> Dict[str, Dict[str, Any]]:
    return _read_json(ASSESSMENTS_PATH, {})


def load_assessment(job_id: str) -> Optional[Assessment]:
    raw = _load_assessments().get(job_id)
    if raw is None:
        return None
    return assessment_from_dict(raw)


def find_assessment(ref: str) -> Optional[Assessment]:
    """Look up by job id, falling back to the assessment id."""
    found = load_assessment(ref)
    if found is not None:
        return found
    raw = next((r for r in _load_assessments().values() if r.get("id") == ref), None)
    return assessment_from_dict(raw) if raw is not None else None


def list_assessments() -> List[Assessment]:
    return [assessment_from_dict(raw) for raw in _load_assessments().values()]


def save_assessment(assessment: Assessment) -> Assessment:
    """Upsert keyed by ``job_id``; an existing row keeps its id and createdAt."""

    now = utcnow_iso()
    with _LOCK:
        rows = _load_assessments()
        existing = rows.get(assessment.job_id)
        if existing:
            stored = replace(
                assessment,
                id=existing.get("id") or assessment.id or str(uuid.uuid4()),
                created_at=existing.get("createdAt") or now,
                updated_at=now,
            )
        else:
            stored = replace(
                assessment,
                id=assessment.id or str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
            )
        rows[assessment.job_id] = assessment_to_dict(stored)
        _write_json(ASSESSMENTS_PATH, rows)
    return stored


# ---- responses ----
def save_response(response: Response) -> Response:
    _ensure_dirs()
    payload = response_to_dict(response)
    _write_json(RESPONSES_DIR / f"{response.id}.json", payload)
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESPONSE_INDEX_PATH, {})
        index[response.id] = {
            "assessmentId": response.assessment_id,
            "candidateId": response.candidate_id,
            "submittedAt": payload["submittedAt"],
        }
        _write_json(RESPONSE_INDEX_PATH, index)
    return response


def load_response(response_id: str) -> Optional[Response]:
    path = RESPONSES_DIR / f"{response_id}.json"
    if not path.exists():
        return None
    try:
        return response_from_dict(json.loads(path.read_text(encoding="utf-8")))
    except Exception:
        return None


def list_responses(assessment_id: str) -> List[Response]:
    index: Dict[str, Dict[str, Any]] = _read_json(RESPONSE_INDEX_PATH, {})
    out: List[Response] = []
    for rid, meta in index.items():
        if meta.get("assessmentId") == assessment_id:
            resp = load_response(rid)
            if resp:
                out.append(resp)
    out.sort(key=lambda r: r.submitted_at.isoformat() if r.submitted_at else "")
    return out


def count_responses(assessment_id: str) -> int:
    index: Dict[str, Dict[str, Any]] = _read_json(RESPONSE_INDEX_PATH, {})
    return sum(1 for meta in index.values() if meta.get("assessmentId") == assessment_id)


# ---- timeline ----
def append_timeline_event(event: TimelineEvent) -> None:
    with _LOCK:
        events: List[Dict[str, Any]] = _read_json(TIMELINE_PATH, [])
        events.append(timeline_to_dict(event))
        _write_json(TIMELINE_PATH, events)


def timeline_for_candidate(candidate_id: str) -> List[Dict[str, Any]]:
    events: List[Dict[str, Any]] = _read_json(TIMELINE_PATH, [])
    out = [e for e in events if e.get("candidateId") == candidate_id]
    out.sort(key=lambda e: e.get("timestamp", ""), reverse=True)
    return out


# ---- assignments ----
def _load_assignments() -> List[Dict[str, Any]]:
    return _read_json(ASSIGNMENTS_PATH, [])


def list_assignments(assessment_id: Optional[str] = None, candidate_id: Optional[str] = None) -> List[Assignment]:
    out: List[Assignment] = []
    for raw in _load_assignments():
        if assessment_id is not None and raw.get("assessmentId") != assessment_id:
            continue
        if candidate_id is not None and raw.get("candidateId") != candidate_id:
            continue
        out.append(assignment_from_dict(raw))
    return out


def count_assignments(assessment_id: str) -> int:
    return sum(1 for raw in _load_assignments() if raw.get("assessmentId") == assessment_id)


def save_assignment(assignment: Assignment) -> Assignment:
    """Insert or replace by ``(assessment_id, candidate_id)``; the first row's id and createdAt survive."""

    now = utcnow_iso()
    with _LOCK:
        rows = _load_assignments()
        for idx, raw in enumerate(rows):
            if raw.get("assessmentId") == assignment.assessment_id and raw.get("candidateId") == assignment.candidate_id:
                payload = assignment_to_dict(assignment)
                payload["id"] = raw.get("id") or payload["id"]
                payload["createdAt"] = raw.get("createdAt") or now
                payload["updatedAt"] = now
                rows[idx] = payload
                break
        else:
            payload = assignment_to_dict(assignment)
            payload["id"] = payload["id"] or str(uuid.uuid4())
            payload["createdAt"] = payload["createdAt"] or now
            payload["updatedAt"] = payload["updatedAt"] or now
            rows.append(payload)
        _write_json(ASSIGNMENTS_PATH, rows)
    return assignment_from_dict(payload)


def mark_assignment(assessment_id: str, candidate_id: str, status: str) -> Optional[Assignment]:
    """Move an existing assignment to ``status``; None when the candidate was never assigned."""

    current = list_assignments(assessment_id=assessment_id, candidate_id=candidate_id)
    if not current:
        return None
    return save_assignment(replace(current[0], status=status))
