"""Helpers to export submitted responses in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

from .codec import response_to_dict
from .types import Assessment, Response

_FIELDS: tuple[str, ...] = (
    "id",
    "assessment_id",
    "candidate_id",
    "submitted_at",
)


def _column(question_id: str) -> str:
    # question ids may equal a metadata column name
    return f"q:{question_id}"


def _cell(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, (list, tuple)):
        return "; ".join(_cell(v) for v in val)
    if isinstance(val, bool):
        return "true" if val else "false"
    return str(val)


def _row(resp: Response, question_ids: List[str]) -> Dict[str, str]:
    out = {
        "id": resp.id,
        "assessment_id": resp.assessment_id,
        "candidate_id": resp.candidate_id,
        "submitted_at": resp.submitted_at.isoformat() if resp.submitted_at else "",
    }
    for qid in question_ids:
        out[_column(qid)] = _cell(resp.responses.get(qid))
    return out


def to_json(responses: Iterable[Response]) -> Dict[str, Any]:
    """Return a JSON-safe payload for export."""

    return {"attempts": [response_to_dict(r) for r in responses]}


def to_csv(assessment: Assessment, responses: Iterable[Response]) -> str:
    """One row per response, one ``q:<id>`` column per question in canonical order."""

    question_ids = [q.id for q in assessment.questions()]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(_FIELDS) + [_column(q) for q in question_ids])
    writer.writeheader()
    for resp in responses:
        writer.writerow(_row(resp, question_ids))
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
