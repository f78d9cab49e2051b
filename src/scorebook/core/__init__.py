"""
Scorebook Core Package

Shared data models, identifier generation, schema validation and
serialization. Everything else in scorebook builds on these types.

The grading engines never read ambient state: they take the relevant
models as arguments and return new values.
"""

from .ids import IdGenerator, new_id, sequential_ids
from .models import (
    Assignment,
    Comment,
    Question,
    SelectionSet,
    Student,
    Submission,
)

__all__ = [
    "IdGenerator",
    "new_id",
    "sequential_ids",
    "Assignment",
    "Comment",
    "Question",
    "SelectionSet",
    "Student",
    "Submission",
]
