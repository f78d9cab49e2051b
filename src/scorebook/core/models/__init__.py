"""
Core Models Package

Immutable data models for rubrics and graded submissions.

All models in this package are frozen dataclasses. Stores replace whole
values on every edit, so any snapshot handed to a caller stays valid.

| Model | Owns | Identity |
|-------|------|----------|
| `Assignment` | `Question`s | `id` (store-unique) |
| `Question` | `Comment`s | `id` (unique in assignment) |
| `Submission` | `Student`, selections | `(assignment_id, student.id)` |
"""

from .selection import SelectionSet
from .rubric import Comment, Question, Assignment
from .submission import Student, Submission, DEFAULT_BASE_SCORE

__all__ = [
    "SelectionSet",
    "Comment",
    "Question",
    "Assignment",
    "Student",
    "Submission",
    "DEFAULT_BASE_SCORE",
]
