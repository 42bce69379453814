from __future__ import annotations

import csv
import importlib
import io
import json
import os
import sys

from fastapi.testclient import TestClient

from assessment_core.codec import assessment_to_dict

from tests.conftest import build_gated_assessment, build_sample_assessment, valid_answers


_DEF_MODULES = [
    "assessment_core.config",
    "api.storage",
    "api.app",
]


def _reload_app(tmp_path) -> tuple[object, object]:
    os.environ["DATA_DIR"] = str(tmp_path)
    for name in _DEF_MODULES:
        if name in sys.modules:
            importlib.reload(sys.modules[name])
        else:
            __import__(name)
    storage = sys.modules["api.storage"]
    app_module = sys.modules["api.app"]
    return storage, app_module


def _client(tmp_path):
    _storage, app_module = _reload_app(tmp_path)
    return TestClient(app_module.app)


def _put(client, assessment):
    body = assessment_to_dict(assessment)
    return client.put(f"/api/assessments/{assessment.job_id}", json=body)


def test_get_missing_assessment_404(tmp_path):
    client = _client(tmp_path)
    assert client.get("/api/assessments/none").status_code == 404
    assert client.post("/api/assessments/none/submit", json={"candidateId": "c", "responses": {}}).status_code == 404


def test_put_is_upsert_by_job(tmp_path):
    client = _client(tmp_path)
    first = _put(client, build_sample_assessment("job-7"))
    assert first.status_code == 200
    created = first.json()
    assert created["jobId"] == "job-7" and created["attemptedCount"] == 0
    assert created["createdAt"] and created["updatedAt"]

    body = assessment_to_dict(build_sample_assessment("job-7"))
    body["id"] = "something-else"
    body["title"] = "Renamed"
    second = client.put("/api/assessments/job-7", json=body).json()
    assert second["id"] == created["id"], "existing row keeps its id"
    assert second["createdAt"] == created["createdAt"]
    assert second["title"] == "Renamed"

    listed = client.get("/api/assessments").json()["assessments"]
    assert len(listed) == 1


def test_put_rejects_bad_schema_and_cycles(tmp_path):
    client = _client(tmp_path)
    body = assessment_to_dict(build_sample_assessment("job-x"))
    body["sections"][0]["questions"][0]["maxLength"] = 4
    assert client.put("/api/assessments/job-x", json=body).status_code == 422

    body = assessment_to_dict(build_sample_assessment("job-x"))
    body["sections"][0]["questions"][0]["conditionalLogic"] = {
        "questionId": "city", "operator": "equals", "value": "Berlin",
    }
    resp = client.put("/api/assessments/job-x", json=body)
    assert resp.status_code == 422
    assert "cycle" in resp.json()["detail"]


def test_cycles_allowed_when_disabled(tmp_path, monkeypatch):
    monkeypatch.setenv("REJECT_DEPENDENCY_CYCLES", "0")
    client = _client(tmp_path)
    body = assessment_to_dict(build_sample_assessment("job-x"))
    body["sections"][0]["questions"][0]["conditionalLogic"] = {
        "questionId": "city", "operator": "equals", "value": "Berlin",
    }
    assert client.put("/api/assessments/job-x", json=body).status_code == 200


def test_builder_edit_routes(tmp_path):
    client = _client(tmp_path)
    _put(client, build_sample_assessment("job-b"))

    resp = client.post("/api/assessments/job-b/sections", json={"title": "Extra"})
    assert resp.status_code == 200
    sec = resp.json()["sections"][-1]
    assert sec["title"] == "Extra" and sec["questions"] == []

    resp = client.post(
        f"/api/assessments/job-b/sections/{sec['id']}/questions",
        json={"id": "salary", "type": "numeric", "title": "Salary", "required": True, "min": 0},
    )
    assert resp.status_code == 200
    assert resp.json()["sections"][-1]["questions"][0]["id"] == "salary"

    resp = client.patch("/api/assessments/job-b/questions/salary", json={"max": 10, "min": 20})
    assert resp.status_code == 422

    resp = client.patch("/api/assessments/job-b/questions/salary", json={"type": "short-text", "maxLength": 10})
    q = resp.json()["sections"][-1]["questions"][0]
    assert q["type"] == "short-text" and q["maxLength"] == 10 and "min" not in q

    resp = client.patch(f"/api/assessments/job-b/sections/{sec['id']}", json={"title": "Pay"})
    assert resp.json()["sections"][-1]["title"] == "Pay"

    assert client.delete("/api/assessments/job-b/questions/salary").status_code == 200
    assert client.delete("/api/assessments/job-b/questions/salary").status_code == 422
    resp = client.delete(f"/api/assessments/job-b/sections/{sec['id']}")
    assert [s["id"] for s in resp.json()["sections"]] == ["sec-general", "sec-details"]


def test_preview_reports_visibility_and_errors(tmp_path):
    client = _client(tmp_path)
    _put(client, build_gated_assessment())

    low = client.post("/api/assessments/job-gated/preview", json={"responses": {"years": 1}}).json()
    assert low == {"visible": ["years"], "errors": []}

    high = client.post("/api/assessments/job-gated/preview", json={"responses": {"years": 3}}).json()
    assert high["visible"] == ["years", "stack"]
    assert high["errors"] == [{"questionId": "stack", "message": "Please select at least one option"}]


def test_submit_flow_records_response_and_timeline(tmp_path):
    client = _client(tmp_path)
    _put(client, build_sample_assessment("job-s"))

    bad = client.post("/api/assessments/job-s/submit", json={"candidateId": "cand-1", "responses": {}})
    assert bad.status_code == 422
    assert {e["questionId"] for e in bad.json()["errors"]} == {"relocate", "skills", "resume"}

    unknown = client.post(
        "/api/assessments/job-s/submit", json={"candidateId": "cand-1", "responses": {"ghost": 1}}
    )
    assert unknown.status_code == 422

    ok = client.post("/api/assessments/job-s/submit", json={"candidateId": "cand-1", "responses": valid_answers()})
    assert ok.status_code == 200
    body = ok.json()
    assert body["candidateId"] == "cand-1" and body["assessmentId"] == "asmt-job-s"
    assert body["submittedAt"]

    assert client.get("/api/assessments/job-s").json()["attemptedCount"] == 1
    attempts = client.get("/api/assessments/job-s/attempts").json()
    assert [r["id"] for r in attempts["attempts"]] == [body["id"]]

    timeline = client.get("/api/candidates/cand-1/timeline").json()["timeline"]
    assert len(timeline) == 1 and timeline[0]["type"] == "assessment-submitted"


def test_attempts_csv_export(tmp_path):
    client = _client(tmp_path)
    _put(client, build_sample_assessment("job-c"))
    client.post("/api/assessments/job-c/submit", json={"candidateId": "c1", "responses": valid_answers()})

    resp = client.get("/api/assessments/job-c/attempts.csv")
    assert resp.status_code == 200
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0][:4] == ["id", "assessment_id", "candidate_id", "submitted_at"]
    assert rows[0][4:] == ["q:relocate", "q:city", "q:experience", "q:skills", "q:motivation", "q:resume"]
    assert len(rows) == 2
    assert rows[1][2] == "c1"


def test_export_and_timeline_switches(tmp_path, monkeypatch):
    monkeypatch.setenv("EXPORT_ENABLED", "0")
    monkeypatch.setenv("TIMELINE_ENABLED", "0")
    client = _client(tmp_path)
    _put(client, build_sample_assessment("job-d"))
    ok = client.post("/api/assessments/job-d/submit", json={"candidateId": "c2", "responses": valid_answers()})
    assert ok.status_code == 200
    assert client.get("/api/assessments/job-d/attempts.csv").status_code == 404
    assert client.get("/api/candidates/c2/timeline").json()["timeline"] == []


def test_put_rejects_string_options(tmp_path):
    client = _client(tmp_path)
    body = assessment_to_dict(build_sample_assessment("job-o"))
    body["sections"][0]["questions"][0]["options"] = "yes"
    resp = client.put("/api/assessments/job-o", json=body)
    assert resp.status_code == 422
    assert client.get("/api/assessments/job-o").status_code == 404


def test_patch_with_non_string_type_is_422(tmp_path):
    client = _client(tmp_path)
    _put(client, build_sample_assessment("job-p"))
    resp = client.patch("/api/assessments/job-p/questions/city", json={"type": ["numeric"]})
    assert resp.status_code == 422
    resp = client.patch("/api/assessments/job-p/questions/relocate", json={"options": "yes"})
    assert resp.status_code == 422


def test_assignments_counts_and_routes(tmp_path):
    client = _client(tmp_path)
    created = _put(client, build_sample_assessment("job-a")).json()
    assert created["registeredCount"] == 0

    first = client.post("/api/assessments/job-a/assignments", json={"candidateId": "cand-1"})
    assert first.status_code == 200
    assert first.json()["status"] == "invited" and first.json()["assessmentId"] == "asmt-job-a"
    again = client.post("/api/assessments/job-a/assignments", json={"candidateId": "cand-1", "status": "registered"})
    assert again.json()["id"] == first.json()["id"]
    client.post("/api/assessments/job-a/assignments", json={"candidateId": "cand-2"})
    bad = client.post("/api/assessments/job-a/assignments", json={"candidateId": "cand-3", "status": "hired"})
    assert bad.status_code == 422

    assert client.get("/api/assessments/job-a").json()["registeredCount"] == 2
    assert client.get("/api/assessments").json()["assessments"][0]["registeredCount"] == 2

    # the assessment id works as well as the job id
    listed = client.get("/api/assessments/asmt-job-a/assignments").json()["assignments"]
    assert {a["candidateId"]: a["status"] for a in listed} == {"cand-1": "registered", "cand-2": "invited"}

    client.post("/api/assessments/job-a/submit", json={"candidateId": "cand-1", "responses": valid_answers()})
    mine = client.get("/api/candidates/cand-1/assignments").json()["assignments"]
    assert len(mine) == 1
    assert mine[0]["status"] == "submitted"
    assert mine[0]["assessment"]["jobId"] == "job-a"
    assert client.get("/api/candidates/nobody/assignments").json() == {"assignments": []}
    assert client.get("/api/assessments/missing/assignments").status_code == 404


def test_storage_root_from_config_file(tmp_path, monkeypatch):
    root = tmp_path / "from-config"
    (tmp_path / "config.json").write_text(json.dumps({"DATA_DIR": str(root)}), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATA_DIR", raising=False)
    import api.storage as storage

    importlib.reload(storage)
    try:
        assert storage.DATA_ROOT == root.resolve()
    finally:
        monkeypatch.undo()
        _reload_app(tmp_path / "restored")
