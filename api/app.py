from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging, uuid, typing as t

# ---- Engine imports ----
from assessment_core import config
from assessment_core.audit_export import to_csv as export_csv, to_json as export_json
from assessment_core.audit_schema import find_dependency_cycles
from assessment_core.codec import (
    assessment_from_dict,
    assessment_to_dict,
    assignment_to_dict,
    question_from_dict,
    question_updates_from_dict,
    response_to_dict,
)
from assessment_core.collector import ResponseCollector, validate_answers
from assessment_core.errors import SchemaError, SubmissionRejected
from assessment_core.schema import (
    add_question,
    add_section,
    remove_question,
    remove_section,
    update_question,
    update_section,
)
from assessment_core.types import Assessment, Assignment, ValidationError
from assessment_core.visibility import visible_ids
from . import storage

log = logging.getLogger(__name__)

app = FastAPI(title="Assessment Engine API")


@app.get("/")
def root():
    return {"status": "ok", "service": "assessment-engine-api"}


ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class SubmitReq(BaseModel):
    candidateId: str
    responses: dict[str, t.Any] = {}

class PreviewReq(BaseModel):
    responses: dict[str, t.Any] = {}

class SectionReq(BaseModel):
    title: str = "New Section"

class SectionPatch(BaseModel):
    title: str

class AssignReq(BaseModel):
    candidateId: str
    status: str = "invited"

# ---- Helpers ----
def _errors_payload(errors: t.Iterable[ValidationError]) -> list[dict[str, str]]:
    return [{"questionId": e.question_id, "message": e.message} for e in errors]


def _serialize(assessment: Assessment) -> dict[str, t.Any]:
    out = assessment_to_dict(assessment)
    out["registeredCount"] = storage.count_assignments(assessment.id)
    out["attemptedCount"] = storage.count_responses(assessment.id)
    return out


def _get_assessment(ref: str) -> Assessment:
    assessment = storage.find_assessment(ref)
    if assessment is None:
        raise HTTPException(404, "assessment not found")
    return assessment


def _store(assessment: Assessment) -> dict[str, t.Any]:
    cycles = find_dependency_cycles(assessment)
    if cycles:
        loops = ["->".join(c + c[:1]) for c in cycles]
        if config.REJECT_DEPENDENCY_CYCLES:
            raise HTTPException(422, f"conditional logic cycle(s): {', '.join(loops)}")
        log.warning("saving assessment for job %s with conditional cycles: %s", assessment.job_id, loops)
    return _serialize(storage.save_assessment(assessment))


def _edit(job_id: str, fn: t.Callable[[Assessment], Assessment]) -> dict[str, t.Any]:
    assessment = _get_assessment(job_id)
    try:
        updated = fn(assessment)
    except SchemaError as e:
        raise HTTPException(422, str(e))
    return _store(updated)

# ---- Health ----
@app.get("/health")
def health():
    return {
        "reject_dependency_cycles": config.REJECT_DEPENDENCY_CYCLES,
        "timeline_enabled": config.TIMELINE_ENABLED,
        "export_enabled": config.EXPORT_ENABLED,
    }

# ---- Assessments ----
@app.get("/api/assessments")
def list_assessments():
    return {"assessments": [_serialize(a) for a in storage.list_assessments()]}


@app.get("/api/assessments/{job_id}")
def get_assessment(job_id: str):
    return _serialize(_get_assessment(job_id))


@app.put("/api/assessments/{job_id}")
def put_assessment(job_id: str, payload: dict[str, t.Any] = Body(...)):
    body = dict(payload)
    body["jobId"] = job_id
    try:
        assessment = assessment_from_dict(body)
    except SchemaError as e:
        raise HTTPException(422, str(e))
    return _store(assessment)

# ---- Builder edits ----
@app.post("/api/assessments/{job_id}/sections")
def post_section(job_id: str, req: t.Optional[SectionReq] = None):
    title = req.title if req is not None else "New Section"
    return _edit(job_id, lambda a: add_section(a, title))


@app.patch("/api/assessments/{job_id}/sections/{section_id}")
def patch_section(job_id: str, section_id: str, req: SectionPatch):
    return _edit(job_id, lambda a: update_section(a, section_id, title=req.title))


@app.delete("/api/assessments/{job_id}/sections/{section_id}")
def delete_section(job_id: str, section_id: str):
    return _edit(job_id, lambda a: remove_section(a, section_id))


@app.post("/api/assessments/{job_id}/sections/{section_id}/questions")
def post_question(job_id: str, section_id: str, payload: t.Optional[dict[str, t.Any]] = Body(None)):
    def _add(a: Assessment) -> Assessment:
        if not payload:
            return add_question(a, section_id)
        body = dict(payload)
        body.setdefault("id", str(uuid.uuid4()))
        return add_question(a, section_id, question_from_dict(body))
    return _edit(job_id, _add)


@app.patch("/api/assessments/{job_id}/questions/{question_id}")
def patch_question(job_id: str, question_id: str, payload: dict[str, t.Any] = Body(...)):
    return _edit(job_id, lambda a: update_question(a, question_id, **question_updates_from_dict(payload)))


@app.delete("/api/assessments/{job_id}/questions/{question_id}")
def delete_question(job_id: str, question_id: str):
    return _edit(job_id, lambda a: remove_question(a, question_id))

# ---- Runtime ----
@app.post("/api/assessments/{job_id}/preview")
def preview(job_id: str, req: PreviewReq):
    assessment = _get_assessment(job_id)
    _, errors = validate_answers(assessment, req.responses)
    return {"visible": visible_ids(assessment, req.responses), "errors": _errors_payload(errors)}


@app.post("/api/assessments/{job_id}/submit")
def submit(job_id: str, req: SubmitReq):
    assessment = _get_assessment(job_id)
    collector = ResponseCollector(assessment, req.candidateId)
    try:
        collector.update(req.responses)
    except SchemaError as e:
        raise HTTPException(422, str(e))
    notify = storage.append_timeline_event if config.TIMELINE_ENABLED else None
    try:
        resp = collector.submit(storage.save_response, notify=notify)
    except SubmissionRejected as e:
        return JSONResponse(status_code=422, content={"errors": _errors_payload(e.errors)})
    storage.mark_assignment(assessment.id, req.candidateId, "submitted")
    return response_to_dict(resp)


@app.get("/api/assessments/{job_id}/attempts")
def list_attempts(job_id: str):
    assessment = _get_assessment(job_id)
    return export_json(storage.list_responses(assessment.id))


@app.get("/api/assessments/{job_id}/attempts.csv")
def attempts_csv(job_id: str):
    if not config.EXPORT_ENABLED:
        raise HTTPException(404, "export disabled")
    assessment = _get_assessment(job_id)
    body = export_csv(assessment, storage.list_responses(assessment.id))
    filename = f"{job_id}_attempts.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.get("/api/candidates/{candidate_id}/timeline")
def candidate_timeline(candidate_id: str):
    return {"timeline": storage.timeline_for_candidate(candidate_id)}


# ---- Assignments ----
@app.get("/api/assessments/{ref}/assignments")
def assessment_assignments(ref: str):
    assessment = _get_assessment(ref)
    return {"assignments": [assignment_to_dict(a) for a in storage.list_assignments(assessment_id=assessment.id)]}


@app.post("/api/assessments/{ref}/assignments")
def assign_candidate(ref: str, req: AssignReq):
    assessment = _get_assessment(ref)
    try:
        assignment = Assignment(id="", assessment_id=assessment.id, candidate_id=req.candidateId, status=req.status)
    except SchemaError as e:
        raise HTTPException(422, str(e))
    return assignment_to_dict(storage.save_assignment(assignment))


@app.get("/api/candidates/{candidate_id}/assignments")
def candidate_assignments(candidate_id: str):
    out = []
    for a in storage.list_assignments(candidate_id=candidate_id):
        row = assignment_to_dict(a)
        assessment = storage.find_assessment(a.assessment_id)
        row["assessment"] = assessment_to_dict(assessment) if assessment else None
        out.append(row)
    return {"assignments": out}
