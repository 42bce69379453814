from __future__ import annotations
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from .errors import SchemaError

QuestionType = Literal["single-choice","multi-choice","short-text","long-text","numeric","file-upload"]
Operator = Literal["equals","not-equals","contains","greater-than","less-than"]

CHOICE_TYPES: tuple[str, ...] = ("single-choice", "multi-choice")
TEXT_TYPES: tuple[str, ...] = ("short-text", "long-text")
QUESTION_TYPES: tuple[str, ...] = CHOICE_TYPES + TEXT_TYPES + ("numeric", "file-upload")
OPERATORS: tuple[str, ...] = ("equals", "not-equals", "contains", "greater-than", "less-than")


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


@dataclass(frozen=True)
class ConditionalLogic:
    question_id: str
    operator: str
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.question_id, str) or not self.question_id:
            raise SchemaError("conditional logic must reference a question id")
        if not isinstance(self.operator, str) or not self.operator:
            raise SchemaError("conditional logic needs an operator")


@dataclass(frozen=True)
class Question:
    """Base question. Used directly only for types the engine does not know."""

    id: str
    type: str
    title: str
    description: Optional[str] = None
    required: bool = False
    conditional_logic: Optional[ConditionalLogic] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise SchemaError("question id must be a non-empty string")
        if not isinstance(self.title, str):
            raise SchemaError(f"question {self.id}: title must be a string")
        if not isinstance(self.required, bool):
            raise SchemaError(f"question {self.id}: required must be a boolean")
        if self.conditional_logic is not None and not isinstance(self.conditional_logic, ConditionalLogic):
            raise SchemaError(f"question {self.id}: bad conditional logic")
        self._check_type()

    def _check_type(self) -> None:
        if self.type in QUESTION_TYPES:
            raise SchemaError(f"question {self.id}: {self.type!r} questions need their own variant")


@dataclass(frozen=True)
class ChoiceQuestion(Question):
    options: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.options, (list, tuple)):
            raise SchemaError(f"question {self.id}: options must be a list of strings")
        object.__setattr__(self, "options", tuple(self.options))
        super().__post_init__()
        if not self.options:
            raise SchemaError(f"question {self.id}: choice questions need at least one option")
        if any(not isinstance(o, str) for o in self.options):
            raise SchemaError(f"question {self.id}: options must be strings")

    def _check_type(self) -> None:
        if self.type not in CHOICE_TYPES:
            raise SchemaError(f"question {self.id}: {self.type!r} is not a choice type")


@dataclass(frozen=True)
class NumericQuestion(Question):
    min: Optional[float] = None
    max: Optional[float] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        for name in ("min", "max"):
            v = getattr(self, name)
            if v is not None and not _is_number(v):
                raise SchemaError(f"question {self.id}: {name} must be a number")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise SchemaError(f"question {self.id}: min {self.min} is greater than max {self.max}")

    def _check_type(self) -> None:
        if self.type != "numeric":
            raise SchemaError(f"question {self.id}: {self.type!r} is not numeric")


@dataclass(frozen=True)
class TextQuestion(Question):
    max_length: Optional[int] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        ml = self.max_length
        if ml is not None and (not isinstance(ml, int) or isinstance(ml, bool) or ml < 0):
            raise SchemaError(f"question {self.id}: max_length must be a non-negative integer")

    def _check_type(self) -> None:
        if self.type not in TEXT_TYPES:
            raise SchemaError(f"question {self.id}: {self.type!r} is not a text type")


@dataclass(frozen=True)
class FileUploadQuestion(Question):
    def _check_type(self) -> None:
        if self.type != "file-upload":
            raise SchemaError(f"question {self.id}: {self.type!r} is not file-upload")


QUESTION_CLASSES: Dict[str, Type[Question]] = {
    "single-choice": ChoiceQuestion,
    "multi-choice": ChoiceQuestion,
    "short-text": TextQuestion,
    "long-text": TextQuestion,
    "numeric": NumericQuestion,
    "file-upload": FileUploadQuestion,
}


def question_class(qtype: str) -> Type[Question]:
    return QUESTION_CLASSES.get(qtype, Question)


def question_field_names(qtype: str) -> tuple[str, ...]:
    return tuple(f.name for f in fields(question_class(qtype)))


def make_question(**values: Any) -> Question:
    """Build the variant for ``values['type']``; fields the variant lacks are a SchemaError."""
    qtype = values.get("type")
    if not isinstance(qtype, str) or not qtype:
        raise SchemaError("question type must be a non-empty string")
    allowed = set(question_field_names(qtype))
    extra = sorted(k for k in values if k not in allowed)
    if extra:
        raise SchemaError(f"question {values.get('id')!r}: {', '.join(extra)} not valid for type {qtype!r}")
    for name in ("id", "title"):
        if name not in values:
            raise SchemaError(f"question is missing {name!r}")
    return question_class(qtype)(**values)


@dataclass(frozen=True)
class Section:
    id: str
    title: str
    questions: Tuple[Question, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))
        if not isinstance(self.id, str) or not self.id:
            raise SchemaError("section id must be a non-empty string")


@dataclass(frozen=True)
class Assessment:
    id: str
    job_id: str
    title: str
    description: Optional[str] = None
    sections: Tuple[Section, ...] = ()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", tuple(self.sections))
        if not isinstance(self.job_id, str) or not self.job_id:
            raise SchemaError("assessment job_id must be a non-empty string")
        seen_sections: set[str] = set()
        seen: set[str] = set()
        for sec in self.sections:
            if sec.id in seen_sections:
                raise SchemaError(f"duplicate section id {sec.id!r}")
            seen_sections.add(sec.id)
            for q in sec.questions:
                if q.id in seen:
                    raise SchemaError(f"duplicate question id {q.id!r}")
                seen.add(q.id)

    def questions(self) -> List[Question]:
        return [q for sec in self.sections for q in sec.questions]


@dataclass(frozen=True)
class ValidationError:
    question_id: str
    message: str


@dataclass(frozen=True)
class Response:
    id: str
    assessment_id: str
    candidate_id: str
    responses: Dict[str, Any] = field(default_factory=dict)
    submitted_at: Optional[datetime] = None


@dataclass(frozen=True)
class TimelineEvent:
    id: str
    candidate_id: str
    timestamp: datetime
    kind: str = "assessment-submitted"
    change: str = "Assessment submitted"


ASSIGNMENT_STATUSES: tuple[str, ...] = ("invited", "registered", "started", "submitted")


@dataclass(frozen=True)
class Assignment:
    """Links a candidate to an assessment they were invited to."""
    id: str
    assessment_id: str
    candidate_id: str
    status: str = "invited"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.status not in ASSIGNMENT_STATUSES:
            raise SchemaError(f"assignment {self.id}: unknown status {self.status!r}")
