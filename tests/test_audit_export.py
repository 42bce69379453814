from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

from assessment_core.audit_export import to_csv, to_json
from assessment_core.smoke import run_smoke_session
from assessment_core.types import Assessment, Response, Section, make_question

from tests.conftest import build_sample_assessment


def _response(rid: str, candidate: str, answers: dict) -> Response:
    return Response(
        id=rid,
        assessment_id="asmt-job-1",
        candidate_id=candidate,
        responses=answers,
        submitted_at=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
    )


def test_json_export_uses_wire_keys():
    body = to_json([_response("r1", "c1", {"relocate": "no"})])
    assert body["attempts"][0]["candidateId"] == "c1"
    assert body["attempts"][0]["responses"] == {"relocate": "no"}
    assert to_json([]) == {"attempts": []}


def test_csv_has_one_column_per_question():
    a = build_sample_assessment()
    rows = [
        _response("r1", "c1", {"relocate": "yes", "city": "Oslo", "skills": ["python", "sql"], "resume": "cv.pdf"}),
        _response("r2", "c2", {"relocate": "no", "experience": 0, "skills": ["docker"], "resume": "x.pdf"}),
    ]
    parsed = list(csv.DictReader(io.StringIO(to_csv(a, rows))))
    assert len(parsed) == 2
    assert parsed[0]["q:skills"] == "python; sql"
    assert parsed[0]["q:experience"] == ""
    assert parsed[1]["q:city"] == ""
    assert parsed[1]["q:experience"] == "0"
    assert parsed[0]["submitted_at"] == "2024-03-01T09:30:00+00:00"


def test_csv_header_only_when_empty():
    text = to_csv(build_sample_assessment(), [])
    lines = [line for line in text.splitlines() if line]
    assert lines == [
        "id,assessment_id,candidate_id,submitted_at,"
        "q:relocate,q:city,q:experience,q:skills,q:motivation,q:resume"
    ]


def test_smoke_session_submits_every_seeded_assessment():
    stored = run_smoke_session(seed=1)
    assert stored
    assert all(r.candidate_id.startswith("smoke-") for r in stored)
    assert len({r.assessment_id for r in stored}) == len(stored)


def test_question_id_matching_metadata_column_keeps_both_cells():
    q = make_question(id="candidate_id", type="short-text", title="Your badge")
    a = Assessment(id="a", job_id="j", title="T", sections=(Section(id="s", title="S", questions=(q,)),))
    resp = Response(id="r1", assessment_id="a", candidate_id="cand-7", responses={"candidate_id": "hello"})
    parsed = list(csv.DictReader(io.StringIO(to_csv(a, [resp]))))
    assert parsed[0]["candidate_id"] == "cand-7"
    assert parsed[0]["q:candidate_id"] == "hello"
