"""
Module: grading.transcript

Purpose:
    Render a plain-text summary of the comments a student received,
    grouped by question in rubric order.

Key Functions:
    - generate_transcript(assignment, submission): Transcript text

Used By:
    - store.gradebook.Gradebook.transcript
"""

from __future__ import annotations

from typing import Optional

from ..core.models import Assignment, Submission
from ..core.utils.formatting import format_points

BLANK_COMMENT_PLACEHOLDER = "(not filled in)"


def generate_transcript(
    assignment: Optional[Assignment], submission: Optional[Submission]
) -> str:
    """
    Generate the transcript for one submission.

    Only questions with at least one resolvable selected comment get a
    section. Comments appear in the question's order, not selection order::

        # Question title

        - wrong formula (-10)
        - late (-5)

    Args:
        assignment: Rubric the submission was graded against
        submission: Graded submission

    Returns:
        Transcript text, "" when nothing is selected or either side is missing
    """
    if assignment is None or submission is None:
        return ""

    lines: list[str] = []
    for question in assignment.questions:
        selected = submission.selection_for(question.id)
        if not selected:
            continue

        comments = [c for c in question.comments if c.id in selected]
        if not comments:
            continue

        lines.append(f"# {question.title}")
        lines.append("")
        for comment in comments:
            text = comment.text.strip() or BLANK_COMMENT_PLACEHOLDER
            lines.append(f"- {text} (-{format_points(comment.deduction)})")
        lines.append("")

    return "\n".join(lines).strip()
