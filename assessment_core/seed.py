"""Deterministic sample data.

Everything here draws from a ``random.Random`` passed in by the caller, so the
same seed always yields the same assessments and answers.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import config
from .types import QUESTION_TYPES, Assessment, Assignment, ConditionalLogic, Question, Section, make_question
from .visibility import should_show

JOB_TITLES = [
    "Senior Frontend Developer",
    "Full Stack Engineer",
    "Python Developer",
    "DevOps Engineer",
    "Product Manager",
    "UX Designer",
    "Data Scientist",
    "QA Engineer",
    "Cloud Engineer",
    "Security Engineer",
]

_WORDS = (
    "candidate experience team project design system deploy review metric customer "
    "pipeline release incident budget stakeholder roadmap testing latency mentor scope"
).split()


def _uuid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _words(rng: random.Random, lo: int, hi: int) -> str:
    return " ".join(rng.choice(_WORDS) for _ in range(rng.randint(lo, hi)))


def _sentence(rng: random.Random) -> str:
    s = _words(rng, 4, 9)
    return s[:1].upper() + s[1:]


def generate_question(rng: random.Random, qtype: Optional[str] = None) -> Question:
    qtype = qtype or rng.choice(QUESTION_TYPES)
    values: Dict[str, Any] = {
        "id": _uuid(rng),
        "type": qtype,
        "title": _sentence(rng),
        "required": rng.random() < 0.5,
    }
    if qtype in ("single-choice", "multi-choice"):
        lo, hi = config.SEED_OPTIONS_RANGE
        target = rng.randint(lo, hi)
        opts: List[str] = []
        while len(opts) < target:
            opt = _words(rng, 1, 3)
            if opt not in opts:
                opts.append(opt)
        values["options"] = tuple(opts)
    elif qtype == "numeric":
        lo = rng.randint(*config.SEED_NUMERIC_MIN_RANGE)
        values["min"] = lo
        values["max"] = lo + rng.randint(*config.SEED_NUMERIC_SPAN_RANGE)
    elif qtype in ("short-text", "long-text"):
        values["max_length"] = rng.randint(*config.SEED_MAX_LENGTH_RANGE)
    return make_question(**values)


def _link(rng: random.Random, q: Question, earlier: Sequence[Question]) -> Question:
    """Make ``q`` depend on an earlier choice or numeric question; never forms a cycle."""
    targets = [e for e in earlier if e.type in ("single-choice", "numeric")]
    if not targets:
        return q
    dep = rng.choice(targets)
    if dep.type == "single-choice":
        logic = ConditionalLogic(dep.id, "equals", rng.choice(dep.options))
    else:
        mid = (dep.min + dep.max) // 2
        logic = ConditionalLogic(dep.id, "greater-than", mid)
    return replace(q, conditional_logic=logic)


def generate_assessment(
    rng: random.Random,
    job_id: str,
    job_title: Optional[str] = None,
    n_questions: Optional[int] = None,
) -> Assessment:
    n = config.SEED_QUESTIONS_PER_ASSESSMENT if n_questions is None else n_questions
    title = job_title or rng.choice(JOB_TITLES)
    questions: List[Question] = []
    for _ in range(n):
        q = generate_question(rng)
        if questions and rng.random() < config.SEED_CONDITIONAL_RATIO:
            q = _link(rng, q, questions)
        questions.append(q)
    return Assessment(
        id=_uuid(rng),
        job_id=job_id,
        title=f"{title} Assessment",
        description=_sentence(rng) + ".",
        sections=(Section(id=_uuid(rng), title="General Questions", questions=tuple(questions)),),
    )


def generate_assessments(seed: int, jobs: Sequence[Tuple[str, str]] | None = None, count: Optional[int] = None) -> List[Assessment]:
    """Sample assessments for ``(job_id, job_title)`` pairs, or for made-up jobs."""
    rng = random.Random(seed)
    if jobs is None:
        n = config.SEED_ASSESSMENTS if count is None else count
        jobs = [(_uuid(rng), rng.choice(JOB_TITLES)) for _ in range(n)]
    return [generate_assessment(rng, job_id, title) for job_id, title in jobs]


def _assignment_status(rng: random.Random) -> str:
    roll = rng.random()
    if roll > 0.85:
        return "invited"
    return "registered" if roll > 0.25 else "started"


def generate_assignments(
    assessments: Sequence[Assessment],
    rng: random.Random,
    candidate_ids: Optional[Sequence[str]] = None,
) -> List[Assignment]:
    """Assign a random subset of candidates to every assessment, at most once per pair."""
    if candidate_ids is None:
        candidate_ids = [_uuid(rng) for _ in range(config.SEED_CANDIDATES)]
    out: List[Assignment] = []
    if not candidate_ids:
        return out
    lo, hi = config.SEED_ASSIGNMENTS_RANGE
    for a in assessments:
        k = min(len(candidate_ids), rng.randint(lo, hi))
        for cid in rng.sample(list(candidate_ids), k):
            out.append(Assignment(id=_uuid(rng), assessment_id=a.id, candidate_id=cid, status=_assignment_status(rng)))
    return out


def _answer_for(rng: random.Random, q: Question) -> Any:
    if q.type == "single-choice":
        return rng.choice(q.options)
    if q.type == "multi-choice":
        return rng.sample(list(q.options), rng.randint(1, len(q.options)))
    if q.type == "numeric":
        lo = q.min if q.min is not None else 0
        hi = q.max if q.max is not None else lo + 10
        return rng.randint(int(lo), int(hi))
    if q.type in ("short-text", "long-text"):
        text = _sentence(rng)
        limit = getattr(q, "max_length", None)
        return text[:limit] if limit is not None else text
    if q.type == "file-upload":
        return f"{_words(rng, 1, 1)}.pdf"
    return _sentence(rng)


def generate_answers(assessment: Assessment, rng: random.Random) -> Dict[str, Any]:
    """A valid answer map: every question visible so far gets an answer, in order."""
    answers: Dict[str, Any] = {}
    for q in assessment.questions():
        if should_show(q, answers):
            answers[q.id] = _answer_for(rng, q)
    return answers


__all__ = [
    "JOB_TITLES",
    "generate_answers",
    "generate_assessment",
    "generate_assessments",
    "generate_assignments",
    "generate_question",
]
