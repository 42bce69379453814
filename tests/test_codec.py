from __future__ import annotations

from datetime import datetime, timezone

import pytest

from assessment_core.codec import (
    assessment_from_dict,
    assessment_to_dict,
    question_from_dict,
    response_from_dict,
    response_to_dict,
)
from assessment_core.errors import SchemaError
from assessment_core.types import ChoiceQuestion, NumericQuestion, Question, Response, TextQuestion

from tests.conftest import build_sample_assessment


def test_camel_case_wire_shape():
    data = assessment_to_dict(build_sample_assessment())
    assert data["jobId"] == "job-1"
    city = data["sections"][0]["questions"][1]
    assert city["maxLength"] == 20
    assert city["conditionalLogic"] == {"questionId": "relocate", "operator": "equals", "value": "yes"}
    assert "min" not in city


def test_parses_builder_payload():
    raw = {
        "id": "a1",
        "jobId": "j1",
        "title": "T",
        "description": "d",
        "registeredCount": 4,
        "sections": [
            {
                "id": "s1",
                "title": "S",
                "questions": [
                    {"id": "q1", "type": "numeric", "title": "N", "required": True, "min": 1, "max": 3},
                    {"id": "q2", "type": "single-choice", "title": "C", "required": False, "options": ["a", "b"]},
                    {"id": "q3", "type": "long-text", "title": "L", "required": False, "maxLength": 100,
                     "conditionalLogic": {"questionId": "q2", "operator": "equals", "value": "a"}},
                    {"id": "q4", "type": "signature", "title": "Sign", "required": False},
                ],
            }
        ],
    }
    a = assessment_from_dict(raw)
    q1, q2, q3, q4 = a.questions()
    assert isinstance(q1, NumericQuestion) and (q1.min, q1.max) == (1, 3)
    assert isinstance(q2, ChoiceQuestion) and q2.options == ("a", "b")
    assert isinstance(q3, TextQuestion) and q3.conditional_logic.question_id == "q2"
    assert type(q4) is Question and q4.type == "signature"


def test_null_constraints_are_ignored():
    q = question_from_dict({"id": "q", "type": "short-text", "title": "T", "maxLength": None, "min": None})
    assert isinstance(q, TextQuestion) and q.max_length is None


def test_irrelevant_constraint_is_rejected():
    with pytest.raises(SchemaError):
        question_from_dict({"id": "q", "type": "short-text", "title": "T", "options": ["a"]})
    with pytest.raises(SchemaError):
        assessment_from_dict({"id": "a", "title": "no job"})
    with pytest.raises(SchemaError):
        assessment_from_dict({"id": "a", "jobId": "j", "sections": [{"id": "s", "questions": "nope"}]})


def test_response_round_trip_keeps_timestamp():
    resp = Response(
        id="r1",
        assessment_id="a1",
        candidate_id="c1",
        responses={"q1": 2, "q2": ["x"]},
        submitted_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )
    data = response_to_dict(resp)
    assert data["submittedAt"] == "2024-01-02T03:04:05+00:00"
    assert response_from_dict(data) == resp
