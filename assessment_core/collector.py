# assessment_core/collector.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from . import config
from .errors import CollectorStateError, SubmissionRejected
from .schema import find_question
from .types import Assessment, Question, Response, TimelineEvent, ValidationError
from .validators import Validator, synthesize
from .visibility import should_show, visible_questions

log = logging.getLogger(__name__)

SaveResponse = Callable[[Response], Optional[Response]]
Notify = Callable[[TimelineEvent], Any]


def _emit_trace(**values: object) -> None:
    if not config.DEBUG_TRACE:
        return
    ordered = []
    for key in config.TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(ordered))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class CollectorState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    REJECTED = "rejected"
    ACCEPTED = "accepted"
    SUBMITTED = "submitted"


def validate_answers(
    assessment: Assessment,
    answers: Mapping[str, Any],
    validators: Optional[Mapping[str, Validator]] = None,
) -> Tuple[Dict[str, Any], List[ValidationError]]:
    """Validate every visible question in section/question order.

    Returns the answers to keep (visible questions that were answered) and the
    aggregated failures. Hidden questions are skipped, required or not.
    """
    if validators is None:
        validators = synthesize(assessment)
    cleaned: Dict[str, Any] = {}
    errors: List[ValidationError] = []
    for q in assessment.questions():
        visible = should_show(q, answers)
        if not visible:
            _emit_trace(question_id=q.id, type=q.type, required=q.required, visible=False)
            continue
        res = validators[q.id](answers.get(q.id))
        _emit_trace(question_id=q.id, type=q.type, required=q.required, visible=True, errors=len(res.errors))
        if res.errors:
            errors.extend(res.errors)
        elif q.id in answers:
            cleaned[q.id] = res.value
    return cleaned, errors


class ResponseCollector:
    """One candidate's fill session for one assessment.

    Answers accumulate in a private map; ``submit`` runs validation and either
    raises ``SubmissionRejected`` (the session stays editable) or hands a new
    ``Response`` to ``save_response``. After a successful submit the session is
    closed.
    """

    def __init__(
        self,
        assessment: Assessment,
        candidate_id: str,
        *,
        validators: Optional[Mapping[str, Validator]] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.assessment = assessment
        self.candidate_id = candidate_id
        self._validators = validators if validators is not None else synthesize(assessment)
        self._clock = clock
        self._id_factory = id_factory
        self._answers: Dict[str, Any] = {}
        self.state = CollectorState.EDITING
        self.errors: List[ValidationError] = []
        self.response: Optional[Response] = None

    @property
    def answers(self) -> Dict[str, Any]:
        return dict(self._answers)

    def _ensure_open(self) -> None:
        if self.state is CollectorState.SUBMITTED:
            raise CollectorStateError("response already submitted")

    def _edited(self) -> None:
        if self.state is CollectorState.REJECTED:
            self.state = CollectorState.EDITING

    def set_answer(self, question_id: str, value: Any) -> None:
        self._ensure_open()
        find_question(self.assessment, question_id)
        self._answers[question_id] = value
        self._edited()

    def clear_answer(self, question_id: str) -> None:
        self._ensure_open()
        self._answers.pop(question_id, None)
        self._edited()

    def update(self, answers: Mapping[str, Any]) -> None:
        """Set several answers at once; an unknown id leaves every answer unchanged."""
        self._ensure_open()
        for qid in answers:
            find_question(self.assessment, qid)
        self._answers.update(answers)
        self._edited()

    def visible_questions(self) -> List[Question]:
        return visible_questions(self.assessment, self._answers)

    def validate(self) -> List[ValidationError]:
        """Current failures without changing state; for inline feedback."""
        _, errors = validate_answers(self.assessment, self._answers, self._validators)
        return errors

    def submit(self, save_response: SaveResponse, notify: Optional[Notify] = None) -> Response:
        self._ensure_open()
        self.state = CollectorState.VALIDATING
        cleaned, errors = validate_answers(self.assessment, self._answers, self._validators)
        if errors:
            self.state = CollectorState.REJECTED
            self.errors = errors
            log.info(
                "submission rejected: assessment=%s candidate=%s errors=%d",
                self.assessment.id, self.candidate_id, len(errors),
            )
            raise SubmissionRejected(errors)

        self.state = CollectorState.ACCEPTED
        self.errors = []
        response = Response(
            id=self._id_factory(),
            assessment_id=self.assessment.id,
            candidate_id=self.candidate_id,
            responses=cleaned,
            submitted_at=self._clock(),
        )
        try:
            saved = save_response(response)
        except Exception:
            self.state = CollectorState.EDITING
            log.error("saving response %s failed", response.id)
            raise
        self.response = saved if saved is not None else response
        self.state = CollectorState.SUBMITTED
        log.info(
            "response submitted: id=%s assessment=%s candidate=%s answers=%d",
            self.response.id, self.assessment.id, self.candidate_id, len(cleaned),
        )

        if notify is not None:
            event = TimelineEvent(id=self._id_factory(), candidate_id=self.candidate_id, timestamp=self._clock())
            try:
                notify(event)
            except Exception:
                log.warning("timeline notification failed for candidate %s", self.candidate_id, exc_info=True)
        return self.response


__all__ = ["CollectorState", "ResponseCollector", "validate_answers"]
