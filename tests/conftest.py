from __future__ import annotations

import pytest

from assessment_core.types import (
    Assessment,
    ChoiceQuestion,
    ConditionalLogic,
    FileUploadQuestion,
    NumericQuestion,
    Section,
    TextQuestion,
)


def build_gated_assessment() -> Assessment:
    """One numeric question gating a required multi-choice question (shown when > 2)."""

    return Assessment(
        id="asmt-gated",
        job_id="job-gated",
        title="Gated",
        sections=(
            Section(
                id="s1",
                title="Only",
                questions=(
                    NumericQuestion(id="years", type="numeric", title="Years", required=True, min=1, max=3),
                    ChoiceQuestion(
                        id="stack",
                        type="multi-choice",
                        title="Stack",
                        required=True,
                        options=("Python", "Go", "Rust"),
                        conditional_logic=ConditionalLogic("years", "greater-than", 2),
                    ),
                ),
            ),
        ),
    )


def build_sample_assessment(job_id: str = "job-1") -> Assessment:
    """Deterministic two-section assessment covering every question type."""

    general = Section(
        id="sec-general",
        title="General",
        questions=(
            ChoiceQuestion(
                id="relocate",
                type="single-choice",
                title="Willing to relocate?",
                required=True,
                options=("yes", "no"),
            ),
            TextQuestion(
                id="city",
                type="short-text",
                title="Preferred city",
                required=True,
                max_length=20,
                conditional_logic=ConditionalLogic("relocate", "equals", "yes"),
            ),
            NumericQuestion(id="experience", type="numeric", title="Years of experience", min=0, max=40),
        ),
    )
    details = Section(
        id="sec-details",
        title="Details",
        questions=(
            ChoiceQuestion(
                id="skills",
                type="multi-choice",
                title="Skills",
                required=True,
                options=("python", "sql", "docker"),
            ),
            TextQuestion(id="motivation", type="long-text", title="Why us?", max_length=200),
            FileUploadQuestion(id="resume", type="file-upload", title="Resume", required=True),
        ),
    )
    return Assessment(
        id=f"asmt-{job_id}",
        job_id=job_id,
        title="Backend Engineer Assessment",
        description="Screening questions",
        sections=(general, details),
    )


def valid_answers() -> dict:
    return {
        "relocate": "yes",
        "city": "Berlin",
        "experience": 4,
        "skills": ["python"],
        "motivation": "Interesting problems",
        "resume": "resume.pdf",
    }


@pytest.fixture
def sample_assessment() -> Assessment:
    return build_sample_assessment()


@pytest.fixture
def gated_assessment() -> Assessment:
    return build_gated_assessment()
