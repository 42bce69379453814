"""Pure structural edits on assessments.

Every operation takes an assessment plus a locator and returns a new
``Assessment``; the input is never mutated. Sections are located by index or
id, questions by id or ``(section, index)``. A locator that does not resolve
raises ``SchemaError``.
"""
from __future__ import annotations

import uuid
from dataclasses import fields, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .codec import logic_from_dict
from .errors import SchemaError
from .types import (
    Assessment,
    ConditionalLogic,
    Question,
    Section,
    make_question,
    question_field_names,
)

SectionRef = Union[int, str]
QuestionRef = Union[str, Tuple[SectionRef, int]]


def _new_id() -> str:
    return str(uuid.uuid4())


def flatten_questions(assessment: Assessment) -> List[Question]:
    return assessment.questions()


def find_question(assessment: Assessment, question_id: str) -> Question:
    for q in assessment.questions():
        if q.id == question_id:
            return q
    raise SchemaError(f"no question with id {question_id!r}")


def section_index(assessment: Assessment, ref: SectionRef) -> int:
    if isinstance(ref, bool):
        raise SchemaError(f"bad section locator {ref!r}")
    if isinstance(ref, int):
        if 0 <= ref < len(assessment.sections):
            return ref
        raise SchemaError(f"section index {ref} out of range ({len(assessment.sections)} sections)")
    for idx, sec in enumerate(assessment.sections):
        if sec.id == ref:
            return idx
    raise SchemaError(f"no section with id {ref!r}")


def question_position(assessment: Assessment, ref: QuestionRef) -> Tuple[int, int]:
    """Resolve a question locator to ``(section_index, question_index)``."""
    if isinstance(ref, tuple):
        if len(ref) != 2:
            raise SchemaError(f"bad question locator {ref!r}")
        s_idx = section_index(assessment, ref[0])
        q_idx = ref[1]
        n = len(assessment.sections[s_idx].questions)
        if isinstance(q_idx, bool) or not isinstance(q_idx, int) or not 0 <= q_idx < n:
            raise SchemaError(f"question index {q_idx!r} out of range ({n} questions)")
        return s_idx, q_idx
    for s_idx, sec in enumerate(assessment.sections):
        for q_idx, q in enumerate(sec.questions):
            if q.id == ref:
                return s_idx, q_idx
    raise SchemaError(f"no question with id {ref!r}")


def _with_sections(assessment: Assessment, sections: List[Section]) -> Assessment:
    return replace(assessment, sections=tuple(sections))


def _map_section(assessment: Assessment, s_idx: int, fn: Callable[[Section], Section]) -> Assessment:
    sections = list(assessment.sections)
    sections[s_idx] = fn(sections[s_idx])
    return _with_sections(assessment, sections)


# ---- sections ----
def add_section(assessment: Assessment, title: str = "New Section", *, section_id: Optional[str] = None) -> Assessment:
    sec = Section(id=section_id or _new_id(), title=title, questions=())
    return _with_sections(assessment, list(assessment.sections) + [sec])


def update_section(assessment: Assessment, section: SectionRef, **updates: Any) -> Assessment:
    if "id" in updates:
        raise SchemaError("section ids cannot be changed")
    unknown = sorted(set(updates) - {"title", "questions"})
    if unknown:
        raise SchemaError(f"unknown section field(s): {', '.join(unknown)}")
    s_idx = section_index(assessment, section)
    return _map_section(assessment, s_idx, lambda s: replace(s, **updates))


def remove_section(assessment: Assessment, section: SectionRef) -> Assessment:
    s_idx = section_index(assessment, section)
    sections = [s for i, s in enumerate(assessment.sections) if i != s_idx]
    return _with_sections(assessment, sections)


# ---- questions ----
def new_question(question_id: Optional[str] = None) -> Question:
    return make_question(id=question_id or _new_id(), type="short-text", title="New Question", required=False)


def add_question(assessment: Assessment, section: SectionRef, question: Optional[Question] = None) -> Assessment:
    s_idx = section_index(assessment, section)
    q = question if question is not None else new_question()
    return _map_section(assessment, s_idx, lambda s: replace(s, questions=s.questions + (q,)))


def _coerce_logic(value: Any) -> Optional[ConditionalLogic]:
    if value is None or isinstance(value, ConditionalLogic):
        return value
    if isinstance(value, dict) and "question_id" in value:
        return ConditionalLogic(**value)
    return logic_from_dict(value)


def update_question(assessment: Assessment, question: QuestionRef, **updates: Any) -> Assessment:
    """Merge ``updates`` into a question and rebuild its variant.

    Changing ``type`` drops constraints the new variant does not use, so a
    numeric question turned into short-text loses its ``min``/``max``.
    """
    if "id" in updates:
        raise SchemaError("use rename_question to change a question id")
    if "type" in updates and (not isinstance(updates["type"], str) or not updates["type"]):
        raise SchemaError("question type must be a non-empty string")
    s_idx, q_idx = question_position(assessment, question)
    current = assessment.sections[s_idx].questions[q_idx]
    merged: Dict[str, Any] = {f.name: getattr(current, f.name) for f in fields(current)}
    merged.update(updates)
    if "conditional_logic" in updates:
        merged["conditional_logic"] = _coerce_logic(updates["conditional_logic"])
    if merged.get("type") != current.type:
        keep = set(question_field_names(merged.get("type")))
        merged = {k: v for k, v in merged.items() if k in keep or k in updates}
    rebuilt = make_question(**merged)

    def _swap(s: Section) -> Section:
        qs = list(s.questions)
        qs[q_idx] = rebuilt
        return replace(s, questions=tuple(qs))

    return _map_section(assessment, s_idx, _swap)


def remove_question(assessment: Assessment, question: QuestionRef) -> Assessment:
    s_idx, q_idx = question_position(assessment, question)
    return _map_section(
        assessment,
        s_idx,
        lambda s: replace(s, questions=tuple(q for i, q in enumerate(s.questions) if i != q_idx)),
    )


def rename_question(assessment: Assessment, old_id: str, new_id: str) -> Assessment:
    """Change a question id and rewrite every conditional reference to it."""
    question_position(assessment, old_id)
    if not isinstance(new_id, str) or not new_id:
        raise SchemaError("new question id must be a non-empty string")
    if new_id == old_id:
        return assessment

    def _fix(q: Question) -> Question:
        if q.id == old_id:
            q = replace(q, id=new_id)
        logic = q.conditional_logic
        if logic is not None and logic.question_id == old_id:
            q = replace(q, conditional_logic=replace(logic, question_id=new_id))
        return q

    sections = [replace(s, questions=tuple(_fix(q) for q in s.questions)) for s in assessment.sections]
    return _with_sections(assessment, sections)


__all__ = [
    "add_question",
    "add_section",
    "find_question",
    "flatten_questions",
    "new_question",
    "question_position",
    "remove_question",
    "remove_section",
    "rename_question",
    "section_index",
    "update_question",
    "update_section",
]
