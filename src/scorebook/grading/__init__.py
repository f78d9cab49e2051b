"""
Grading Package

Pure engines over the core models. None of them touch a store: they take
the slices of state they need and return new values.

- score: deductions -> score, bulk recalculation
- transcript: selected comments -> readable summary
- markdown: rubric <-> editable markdown with hidden ids
- merge: imported submissions -> reconciled submission list
- export: CSV grade sheet and JSON documents
"""

from .score import compute_score, recalculate_all, total_deduction
from .transcript import generate_transcript
from .markdown import to_markdown, from_markdown
from .merge import merge_submissions, merge_selected
from .export import grades_to_csv, assignment_to_json, backup_to_json

__all__ = [
    "compute_score",
    "recalculate_all",
    "total_deduction",
    "generate_transcript",
    "to_markdown",
    "from_markdown",
    "merge_submissions",
    "merge_selected",
    "grades_to_csv",
    "assignment_to_json",
    "backup_to_json",
]
