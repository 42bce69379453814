"""Conversion between engine types and the camelCase JSON used by the API and storage."""
from __future__ import annotations

from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from .errors import SchemaError
from .types import (
    Assessment,
    Assignment,
    ConditionalLogic,
    Question,
    Response,
    Section,
    TimelineEvent,
    make_question,
)

_QUESTION_KEYS: Dict[str, str] = {
    "maxLength": "max_length",
    "conditionalLogic": "conditional_logic",
}
_QUESTION_KEYS_OUT = {v: k for k, v in _QUESTION_KEYS.items()}


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise SchemaError(f"{what} must be an object, got {type(raw).__name__}")
    return raw


def logic_from_dict(raw: Any) -> ConditionalLogic | None:
    if raw is None:
        return None
    if isinstance(raw, ConditionalLogic):
        return raw
    d = _require_mapping(raw, "conditionalLogic")
    qid = d.get("questionId", d.get("question_id"))
    return ConditionalLogic(question_id=qid, operator=d.get("operator"), value=d.get("value"))


def question_from_dict(raw: Any) -> Question:
    d = _require_mapping(raw, "question")
    values: Dict[str, Any] = {}
    for key, val in d.items():
        if val is None:
            continue
        values[_QUESTION_KEYS.get(key, key)] = val
    if "conditional_logic" in values:
        values["conditional_logic"] = logic_from_dict(values["conditional_logic"])
    if "options" in values and isinstance(values["options"], list):
        values["options"] = tuple(values["options"])
    values.setdefault("required", False)
    return make_question(**values)


def question_updates_from_dict(raw: Any) -> Dict[str, Any]:
    """Partial question update (camelCase keys) to keyword arguments for ``update_question``."""
    d = _require_mapping(raw, "question update")
    out: Dict[str, Any] = {}
    for key, val in d.items():
        name = _QUESTION_KEYS.get(key, key)
        if name == "conditional_logic":
            val = logic_from_dict(val)
        elif name == "options" and isinstance(val, list):
            val = tuple(val)
        out[name] = val
    return out


def section_from_dict(raw: Any) -> Section:
    d = _require_mapping(raw, "section")
    qs = d.get("questions") or []
    if not isinstance(qs, list):
        raise SchemaError(f"section {d.get('id')!r}: questions must be a list")
    return Section(id=d.get("id"), title=d.get("title") or "", questions=tuple(question_from_dict(q) for q in qs))


def assessment_from_dict(raw: Any) -> Assessment:
    """Parse a stored/posted assessment. Unknown top-level keys (API counters) are ignored."""
    d = _require_mapping(raw, "assessment")
    secs = d.get("sections") or []
    if not isinstance(secs, list):
        raise SchemaError("sections must be a list")
    return Assessment(
        id=str(d.get("id") or ""),
        job_id=d.get("jobId", d.get("job_id")),
        title=d.get("title") or "",
        description=d.get("description"),
        sections=tuple(section_from_dict(s) for s in secs),
        created_at=d.get("createdAt"),
        updated_at=d.get("updatedAt"),
    )


def logic_to_dict(logic: ConditionalLogic) -> Dict[str, Any]:
    return {"questionId": logic.question_id, "operator": logic.operator, "value": logic.value}


def question_to_dict(q: Question) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(q):
        val = getattr(q, f.name)
        if val is None:
            continue
        if f.name == "conditional_logic":
            val = logic_to_dict(val)
        elif f.name == "options":
            val = list(val)
        out[_QUESTION_KEYS_OUT.get(f.name, f.name)] = val
    return out


def assessment_to_dict(a: Assessment) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": a.id,
        "jobId": a.job_id,
        "title": a.title,
        "sections": [
            {"id": s.id, "title": s.title, "questions": [question_to_dict(q) for q in s.questions]}
            for s in a.sections
        ],
    }
    if a.description is not None:
        out["description"] = a.description
    if a.created_at:
        out["createdAt"] = a.created_at
    if a.updated_at:
        out["updatedAt"] = a.updated_at
    return out


def _iso(ts: datetime | None) -> str | None:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat()


def _parse_ts(raw: Any) -> datetime | None:
    if raw is None or isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


def response_to_dict(r: Response) -> Dict[str, Any]:
    return {
        "id": r.id,
        "assessmentId": r.assessment_id,
        "candidateId": r.candidate_id,
        "responses": dict(r.responses),
        "submittedAt": _iso(r.submitted_at),
    }


def response_from_dict(raw: Any) -> Response:
    d = _require_mapping(raw, "response")
    return Response(
        id=d.get("id", ""),
        assessment_id=d.get("assessmentId", ""),
        candidate_id=d.get("candidateId", ""),
        responses=dict(d.get("responses") or {}),
        submitted_at=_parse_ts(d.get("submittedAt")),
    )


def timeline_to_dict(evt: TimelineEvent) -> Dict[str, Any]:
    return {
        "id": evt.id,
        "candidateId": evt.candidate_id,
        "change": evt.change,
        "timestamp": _iso(evt.timestamp),
        "type": evt.kind,
    }


def assignment_to_dict(a: Assignment) -> Dict[str, Any]:
    return {
        "id": a.id,
        "assessmentId": a.assessment_id,
        "candidateId": a.candidate_id,
        "status": a.status,
        "createdAt": _iso(a.created_at),
        "updatedAt": _iso(a.updated_at),
    }


def assignment_from_dict(raw: Any) -> Assignment:
    d = _require_mapping(raw, "assignment")
    return Assignment(
        id=d.get("id", ""),
        assessment_id=d.get("assessmentId", ""),
        candidate_id=d.get("candidateId", ""),
        status=d.get("status") or "invited",
        created_at=_parse_ts(d.get("createdAt")),
        updated_at=_parse_ts(d.get("updatedAt")),
    )


__all__ = [
    "assessment_from_dict",
    "assessment_to_dict",
    "assignment_from_dict",
    "assignment_to_dict",
    "question_from_dict",
    "question_to_dict",
    "question_updates_from_dict",
    "logic_from_dict",
    "logic_to_dict",
    "response_from_dict",
    "response_to_dict",
    "section_from_dict",
    "timeline_to_dict",
]
