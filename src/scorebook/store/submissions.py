"""
Submission store.

Holds the submission collection as an immutable snapshot, persisted under
the submissions record key. Submissions whose assignment was deleted are
kept; every consumer treats them as "assignment not found".
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from scorebook.config import SUBMISSIONS_KEY
from scorebook.core.ids import IdGenerator, new_id
from scorebook.core.models import (
    DEFAULT_BASE_SCORE,
    Assignment,
    SelectionSet,
    Student,
    Submission,
)
from scorebook.core.models.rubric import Points
from scorebook.core.utils.serialization import load_submissions_record, submissions_record
from scorebook.grading.merge import merge_submissions
from scorebook.grading.score import recalculate_all
from scorebook.store.storage import RecordStorage

logger = logging.getLogger(__name__)


class SubmissionStore(QObject):
    """Persisted collection of submissions with explicit edit commands."""

    submissionsChanged = Signal()

    def __init__(self, storage: RecordStorage, key: str = SUBMISSIONS_KEY) -> None:
        super().__init__()
        self._storage = storage
        self._key = key
        self._submissions: tuple[Submission, ...] = load_submissions_record(storage.read(key))
        logger.debug(f"Loaded {len(self._submissions)} submission(s) from {key!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def submissions(self) -> tuple[Submission, ...]:
        return self._submissions

    def get(self, submission_id: str) -> Optional[Submission]:
        for submission in self._submissions:
            if submission.id == submission_id:
                return submission
        return None

    def find(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        for submission in self._submissions:
            if submission.identity_key == (assignment_id, student_id):
                return submission
        return None

    def for_assignment(self, assignment_id: str) -> list[Submission]:
        return [s for s in self._submissions if s.assignment_id == assignment_id]

    def __len__(self) -> int:
        return len(self._submissions)

    # ─────────────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_submission(self, submission: Submission) -> None:
        self._commit(self._submissions + (submission,), f"add submission {submission.id!r}")

    def remove_submission(self, submission_id: str) -> bool:
        remaining = tuple(s for s in self._submissions if s.id != submission_id)
        if len(remaining) == len(self._submissions):
            logger.debug(f"remove submission: {submission_id!r} not found")
            return False
        self._commit(remaining, f"remove submission {submission_id!r}")
        return True

    def clear_by_assignment(self, assignment_id: str) -> int:
        """Remove every submission of an assignment; returns how many went."""
        remaining = tuple(s for s in self._submissions if s.assignment_id != assignment_id)
        removed = len(self._submissions) - len(remaining)
        if removed:
            self._commit(remaining, f"clear {removed} submission(s) of {assignment_id!r}")
        return removed

    def upsert_submission(
        self,
        assignment_id: str,
        student: Student,
        id_factory: IdGenerator = new_id,
        base_score: Points = DEFAULT_BASE_SCORE,
    ) -> Submission:
        """
        Return the student's submission for an assignment, creating it if needed.

        A new submission starts with no selections and the base score. An
        existing one is returned as is (the given name is not applied).
        """
        existing = self.find(assignment_id, student.id)
        if existing is not None:
            return existing

        created = Submission(
            id=id_factory(),
            assignment_id=assignment_id,
            student=student,
            selected={},
            score=base_score,
        )
        self.add_submission(created)
        return created

    def update_selection(
        self, submission_id: str, selected: Mapping[str, Iterable[str]]
    ) -> bool:
        return self._edit(submission_id, lambda s: s.with_selected(selected), "update selection")

    def update_selection_for_question(
        self, submission_id: str, question_id: str, comment_ids: Iterable[str]
    ) -> bool:
        return self._edit(
            submission_id,
            lambda s: s.with_selection(question_id, SelectionSet.of(comment_ids)),
            "update question selection",
        )

    def toggle_comment(
        self, submission_id: str, question_id: str, comment_id: str, checked: bool
    ) -> bool:
        """Select (set union) or deselect one comment for a question."""
        return self._edit(
            submission_id,
            lambda s: s.with_selection(
                question_id, s.selection_for(question_id).toggled(comment_id, checked)
            ),
            "toggle comment",
        )

    def update_score(self, submission_id: str, score: Points) -> bool:
        return self._edit(submission_id, lambda s: replace(s, score=score), "update score")

    def update_student_name(self, submission_id: str, name: str) -> bool:
        return self._edit(
            submission_id,
            lambda s: replace(s, student=replace(s.student, name=name)),
            "update student name",
        )

    def update_student_id(self, submission_id: str, student_id: str) -> bool:
        return self._edit(
            submission_id,
            lambda s: replace(s, student=replace(s.student, id=student_id)),
            "update student id",
        )

    def resync_scores(
        self, assignment: Assignment, base_score: Points = DEFAULT_BASE_SCORE
    ) -> None:
        """Recompute the cached score of every submission of ``assignment``."""
        updated = tuple(recalculate_all(assignment, self._submissions, base_score))
        if updated != self._submissions:
            self._commit(updated, f"resync scores of {assignment.id!r}")

    def merge_submissions(
        self, incoming: Iterable[Submission], id_factory: IdGenerator = new_id
    ) -> None:
        """Reconcile an imported batch into the store (see grading.merge)."""
        batch = list(incoming)
        merged = tuple(merge_submissions(self._submissions, batch, id_factory))
        self._commit(merged, f"merge {len(batch)} incoming submission(s)")

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _edit(
        self, submission_id: str, edit: Callable[[Submission], Submission], action: str
    ) -> bool:
        if self.get(submission_id) is None:
            logger.debug(f"{action}: submission {submission_id!r} not found")
            return False
        updated = tuple(edit(s) if s.id == submission_id else s for s in self._submissions)
        self._commit(updated, f"{action} on {submission_id!r}")
        return True

    def _commit(self, submissions: tuple[Submission, ...], action: str) -> None:
        self._submissions = submissions
        self._storage.write(self._key, submissions_record(submissions))
        logger.debug(f"Submission store: {action}")
        self.submissionsChanged.emit()
