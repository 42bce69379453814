from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping

from .types import Assessment, Question

log = logging.getLogger(__name__)


def is_answered(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (int, float)) and value == 0:
        return False
    # empty collections count as answered; only the empty string is blank
    if isinstance(value, str) and not value:
        return False
    return True


def _strict_equals(a: Any, b: Any) -> bool:
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if isinstance(a, str) != isinstance(b, str):
        return False
    return a == b


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(v) for v in value)
    return str(value)


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def should_show(question: Question, answers: Mapping[str, Any]) -> bool:
    """Whether ``question`` is visible given the current answer map.

    A question whose dependency has not been answered stays hidden whatever the
    operator, including ``not-equals``. An empty multi-choice selection is an
    answer, so ``not-equals`` can show the question. Comparisons that cannot coerce to a
    number are false, so the question stays hidden.
    """
    logic = question.conditional_logic
    if logic is None:
        return True
    current = answers.get(logic.question_id)
    if not is_answered(current):
        return False
    op = logic.operator
    if op == "equals":
        return _strict_equals(current, logic.value)
    if op == "not-equals":
        return not _strict_equals(current, logic.value)
    if op == "contains":
        return _as_text(logic.value) in _as_text(current)
    if op == "greater-than":
        return _as_float(current) > _as_float(logic.value)
    if op == "less-than":
        return _as_float(current) < _as_float(logic.value)
    log.debug("question %s: unknown operator %r, showing", question.id, op)
    return True


def visible_questions(assessment: Assessment, answers: Mapping[str, Any]) -> List[Question]:
    return [q for q in assessment.questions() if should_show(q, answers)]


def visible_ids(assessment: Assessment, answers: Mapping[str, Any]) -> List[str]:
    return [q.id for q in visible_questions(assessment, answers)]
