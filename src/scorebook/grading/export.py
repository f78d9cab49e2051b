"""
Module: grading.export

Purpose:
    Build the export documents a grader downloads: a CSV grade sheet per
    assignment, a single-assignment JSON document and the full backup.

Key Functions:
    - grades_to_csv(assignment, submissions): CSV text
    - resolved_comment_texts(assignment, submission): Texts in selection order
    - assignment_to_json(assignment): Assignment document text
    - backup_to_json(assignments, submissions, now): Backup document text
    - *_filename(): Suggested download names

Dependencies:
    - core.utils.serialization: document builders and JSON rendering

Used By:
    - store.gradebook.Gradebook
    - cli
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from ..core.models import Assignment, Submission
from ..core.utils.formatting import format_points
from ..core.utils.serialization import backup_document, dumps_json

CSV_HEADER = "Student ID,Name,Score,Comments"
COMMENT_SEPARATOR = "; "


def resolved_comment_texts(assignment: Assignment, submission: Submission) -> list[str]:
    """
    Resolve a submission's selected comment ids to their texts.

    Follows the selection map's own order (question keys, then comment ids
    in the order they were selected). Dangling ids are skipped.
    """
    texts = []
    for question_id, comment_ids in submission.selected.items():
        question = assignment.find_question(question_id)
        if question is None:
            continue
        for comment_id in comment_ids:
            comment = question.find_comment(comment_id)
            if comment is not None:
                texts.append(comment.text)
    return texts


def _quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def grades_to_csv(assignment: Assignment, submissions: Iterable[Submission]) -> str:
    """
    Render the grade sheet for one assignment.

    One row per submission of this assignment, in store order. Only the
    Comments column is quoted; an assignment without submissions still
    gets its header line.

    Args:
        assignment: Assignment being exported
        submissions: Submissions from the store (other assignments ignored)

    Returns:
        CSV text with a trailing newline
    """
    rows = [CSV_HEADER]
    for sub in submissions:
        if sub.assignment_id != assignment.id:
            continue
        comments = COMMENT_SEPARATOR.join(resolved_comment_texts(assignment, sub))
        rows.append(
            ",".join([sub.student.id, sub.student.name, format_points(sub.score), _quoted(comments)])
        )
    return "\n".join(rows) + "\n"


def assignment_to_json(assignment: Assignment) -> str:
    return dumps_json(assignment.to_dict())


def backup_to_json(
    assignments: Iterable[Assignment],
    submissions: Iterable[Submission],
    now: Optional[datetime] = None,
) -> str:
    return dumps_json(backup_document(assignments, submissions, now))


# ─────────────────────────────────────────────────────────────────────────────
# Filenames
# ─────────────────────────────────────────────────────────────────────────────

def grades_filename(assignment: Assignment) -> str:
    return f"{assignment.title}-grades.csv"


def assignment_filename(assignment: Assignment) -> str:
    return f"{assignment.title}.json"


def backup_filename(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"scorebook-backup-{moment.date().isoformat()}.json"
