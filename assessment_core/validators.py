"""Per-question validators derived from question type and constraints."""
from __future__ import annotations

import logging
import math
from collections.abc import Sized
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Tuple

from .types import (
    Assessment,
    ChoiceQuestion,
    FileUploadQuestion,
    NumericQuestion,
    Question,
    TextQuestion,
    ValidationError,
    _is_number,
)

log = logging.getLogger(__name__)

REQUIRED_MSG = "This field is required"


@dataclass(frozen=True)
class ValidationResult:
    value: Any
    errors: Tuple[ValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


Validator = Callable[[Any], ValidationResult]


def _is_missing(v: Any) -> bool:
    return v is None or (isinstance(v, float) and math.isnan(v))


def _result(q: Question, value: Any, messages: List[str]) -> ValidationResult:
    return ValidationResult(value, tuple(ValidationError(q.id, m) for m in messages))


def _text_validator(q: Question, max_length: int | None = None, enforce_required: bool = True) -> Validator:
    def validate(value: Any) -> ValidationResult:
        if _is_missing(value): value = ""
        if not isinstance(value, str):
            return _result(q, value, ["Expected text"])
        errs: List[str] = []
        if enforce_required and q.required and not value:
            errs.append(REQUIRED_MSG)
        if max_length is not None and len(value) > max_length:
            errs.append(f"Maximum {max_length} characters")
        return _result(q, value, errs)
    return validate


def _numeric_validator(q: NumericQuestion) -> Validator:
    def validate(value: Any) -> ValidationResult:
        if _is_missing(value):
            return _result(q, None, [REQUIRED_MSG] if q.required else [])
        if not _is_number(value):
            return _result(q, value, ["Expected a number"])
        errs: List[str] = []
        if q.min is not None and value < q.min:
            errs.append(f"Minimum value is {q.min}")
        if q.max is not None and value > q.max:
            errs.append(f"Maximum value is {q.max}")
        return _result(q, value, errs)
    return validate


def _single_choice_validator(q: ChoiceQuestion) -> Validator:
    def validate(value: Any) -> ValidationResult:
        if _is_missing(value): value = ""
        if not isinstance(value, str):
            return _result(q, value, ["Expected a single option"])
        return _result(q, value, ["Please select an option"] if q.required and not value else [])
    return validate


def _multi_choice_validator(q: ChoiceQuestion) -> Validator:
    def validate(value: Any) -> ValidationResult:
        if _is_missing(value): value = []
        if isinstance(value, tuple): value = list(value)
        if not isinstance(value, list) or any(not isinstance(v, str) for v in value):
            return _result(q, value, ["Expected a list of options"])
        return _result(q, value, ["Please select at least one option"] if q.required and not value else [])
    return validate


def _file_upload_validator(q: FileUploadQuestion) -> Validator:
    # no content validation; only presence when required
    def validate(value: Any) -> ValidationResult:
        if q.required:
            empty = _is_missing(value) or not value or (isinstance(value, Sized) and len(value) == 0)
            if empty:
                return _result(q, value, ["Please upload a file"])
        return _result(q, value, [])
    return validate


def build_validator(question: Question) -> Validator:
    """Return the validator for one question.

    Types the engine does not know get a permissive text validator (any string,
    or nothing, regardless of ``required``) instead of an error, so an assessment authored with a newer
    question type still renders and submits.
    """
    if isinstance(question, TextQuestion):
        return _text_validator(question, question.max_length)
    if isinstance(question, NumericQuestion):
        return _numeric_validator(question)
    if isinstance(question, ChoiceQuestion):
        if question.type == "multi-choice":
            return _multi_choice_validator(question)
        return _single_choice_validator(question)
    if isinstance(question, FileUploadQuestion):
        return _file_upload_validator(question)
    log.debug("question %s has unsupported type %r; using permissive text validator", question.id, question.type)
    return _text_validator(question, enforce_required=False)


def synthesize(assessment: Assessment) -> Mapping[str, Validator]:
    """Validators for every question, keyed by id in canonical order. Read-only."""
    return MappingProxyType({q.id: build_validator(q) for q in assessment.questions()})


__all__ = ["REQUIRED_MSG", "ValidationResult", "Validator", "build_validator", "synthesize"]
