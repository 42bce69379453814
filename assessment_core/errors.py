from __future__ import annotations
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .types import ValidationError


class SchemaError(ValueError):
    """Malformed assessment data or an edit locator that does not resolve."""


class SubmissionRejected(Exception):
    """Raised by submit when one or more visible questions fail validation."""

    def __init__(self, errors: List["ValidationError"]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} question(s) failed validation")


class CollectorStateError(RuntimeError):
    pass


class DependencyCycleWarning(UserWarning):
    """Conditional logic forms a cycle; visibility order is undefined."""
