"""
Module: grading.score

Purpose:
    Score engine. A submission's score is the base score minus the
    deductions of every selected comment that still exists in the rubric,
    floored at zero and rounded to two decimals.

Key Functions:
    - compute_score(assignment, submission, base_score): Single score
    - total_deduction(assignment, submission): Sum of resolved deductions
    - recalculate_all(assignment, submissions, base_score): Bulk refresh

Dependencies:
    - decimal (std)
    - dataclasses (std)

Used By:
    - store.submissions.SubmissionStore.resync_scores
    - store.gradebook.Gradebook
"""

from __future__ import annotations

from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..core.models import Assignment, Submission, DEFAULT_BASE_SCORE
from ..core.models.rubric import Points

_CENTS = Decimal("0.01")


def total_deduction(assignment: Assignment, submission: Submission) -> Points:
    """
    Sum the deductions of every selected comment that resolves.

    Selections that point at deleted questions or comments contribute 0.

    Returns:
        Total points deducted
    """
    total: Points = 0
    for question in assignment.questions:
        for comment_id in submission.selection_for(question.id):
            comment = question.find_comment(comment_id)
            if comment is not None:
                total += comment.deduction
    return total


def round_score(value: Points) -> float:
    """
    Round to 2 decimal places, ties away from zero.

    Goes through the decimal text of the value so 2.675 rounds to 2.68,
    not to the 2.67 binary float rounding would give.
    """
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def compute_score(
    assignment: Assignment,
    submission: Submission,
    base_score: Points = DEFAULT_BASE_SCORE,
) -> float:
    """
    Calculate the score for a submission.

    Args:
        assignment: Rubric structure (questions + comments)
        submission: Student's selections
        base_score: Starting score before deductions

    Returns:
        ``max(0, base_score - total_deduction)`` rounded to 2 decimals

    Example:
        >>> compute_score(rubric, graded)   # c1 (10) + c2 (5) selected
        85.0
    """
    final = max(0, base_score - total_deduction(assignment, submission))
    return round_score(final)


def recalculate_all(
    assignment: Assignment,
    submissions: Iterable[Submission],
    base_score: Points = DEFAULT_BASE_SCORE,
) -> list[Submission]:
    """
    Refresh the cached score of every submission for an assignment.

    Submissions for other assignments pass through unchanged (same objects).

    Args:
        assignment: Assignment after a structural change
        submissions: Any mix of submissions
        base_score: Base score per submission

    Returns:
        New list in the same order
    """
    return [
        replace(sub, score=compute_score(assignment, sub, base_score))
        if sub.assignment_id == assignment.id
        else sub
        for sub in submissions
    ]
