"""
Assignment store.

Holds the assignment collection as an immutable snapshot. Every command
builds a new tuple, persists it under the assignments record key and
emits ``assignmentsChanged``. Commands aimed at unknown ids change
nothing and emit nothing.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Signal

from scorebook.config import ASSIGNMENTS_KEY
from scorebook.core.models import Assignment, Comment, Question
from scorebook.core.utils.serialization import assignments_record, load_assignments_record
from scorebook.store.storage import RecordStorage

logger = logging.getLogger(__name__)


class AssignmentStore(QObject):
    """Persisted collection of assignments with explicit edit commands."""

    assignmentsChanged = Signal()

    def __init__(self, storage: RecordStorage, key: str = ASSIGNMENTS_KEY) -> None:
        super().__init__()
        self._storage = storage
        self._key = key
        self._assignments: tuple[Assignment, ...] = load_assignments_record(storage.read(key))
        logger.debug(f"Loaded {len(self._assignments)} assignment(s) from {key!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def assignments(self) -> tuple[Assignment, ...]:
        return self._assignments

    def get(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self._assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def __len__(self) -> int:
        return len(self._assignments)

    # ─────────────────────────────────────────────────────────────────────────
    # Assignment Commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_assignment(self, assignment: Assignment) -> None:
        self._commit(self._assignments + (assignment,), f"add assignment {assignment.id!r}")

    def update_assignment(self, assignment_id: str, **changes: Any) -> bool:
        """
        Replace fields of one assignment (e.g. ``title=...``).

        Returns:
            True if the assignment existed
        """
        if "questions" in changes:
            changes["questions"] = tuple(changes["questions"])
        return self._edit(assignment_id, lambda a: replace(a, **changes), "update assignment")

    def put_assignment(self, assignment: Assignment) -> None:
        """Overwrite the assignment with the same id, or add it."""
        if self.get(assignment.id) is None:
            self.add_assignment(assignment)
        else:
            self._edit(assignment.id, lambda _: assignment, "overwrite assignment")

    def replace_questions(self, assignment_id: str, questions: tuple[Question, ...]) -> bool:
        return self._edit(
            assignment_id, lambda a: a.with_questions(questions), "replace questions"
        )

    def remove_assignment(self, assignment_id: str) -> bool:
        """Remove an assignment. Its submissions are left untouched."""
        remaining = tuple(a for a in self._assignments if a.id != assignment_id)
        if len(remaining) == len(self._assignments):
            logger.debug(f"remove assignment: {assignment_id!r} not found")
            return False
        self._commit(remaining, f"remove assignment {assignment_id!r}")
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Question Commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_question(self, assignment_id: str, question: Question) -> bool:
        return self._edit(
            assignment_id,
            lambda a: a.with_questions(a.questions + (question,)),
            "add question",
        )

    def update_question(self, assignment_id: str, question_id: str, **changes: Any) -> bool:
        if "comments" in changes:
            changes["comments"] = tuple(changes["comments"])
        return self._edit_question(
            assignment_id, question_id, lambda q: replace(q, **changes), "update question"
        )

    def remove_question(self, assignment_id: str, question_id: str) -> bool:
        """Remove a question together with its comments."""
        assignment = self.get(assignment_id)
        if assignment is None or assignment.find_question(question_id) is None:
            logger.debug(f"remove question: {assignment_id!r}/{question_id!r} not found")
            return False
        return self._edit(
            assignment_id,
            lambda a: a.with_questions(tuple(q for q in a.questions if q.id != question_id)),
            "remove question",
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Comment Commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_comment(self, assignment_id: str, question_id: str, comment: Comment) -> bool:
        return self._edit_question(
            assignment_id,
            question_id,
            lambda q: q.with_comments(q.comments + (comment,)),
            "add comment",
        )

    def update_comment(
        self, assignment_id: str, question_id: str, comment_id: str, **changes: Any
    ) -> bool:
        question = self._find_question(assignment_id, question_id)
        if question is None or question.find_comment(comment_id) is None:
            logger.debug(f"update comment: {comment_id!r} not found")
            return False
        return self._edit_question(
            assignment_id,
            question_id,
            lambda q: q.with_comments(tuple(
                replace(c, **changes) if c.id == comment_id else c for c in q.comments
            )),
            "update comment",
        )

    def remove_comment(self, assignment_id: str, question_id: str, comment_id: str) -> bool:
        question = self._find_question(assignment_id, question_id)
        if question is None or question.find_comment(comment_id) is None:
            logger.debug(f"remove comment: {comment_id!r} not found")
            return False
        return self._edit_question(
            assignment_id,
            question_id,
            lambda q: q.with_comments(tuple(c for c in q.comments if c.id != comment_id)),
            "remove comment",
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _find_question(self, assignment_id: str, question_id: str) -> Optional[Question]:
        assignment = self.get(assignment_id)
        return assignment.find_question(question_id) if assignment else None

    def _edit(
        self, assignment_id: str, edit: Callable[[Assignment], Assignment], action: str
    ) -> bool:
        if self.get(assignment_id) is None:
            logger.debug(f"{action}: assignment {assignment_id!r} not found")
            return False
        updated = tuple(edit(a) if a.id == assignment_id else a for a in self._assignments)
        self._commit(updated, f"{action} on {assignment_id!r}")
        return True

    def _edit_question(
        self,
        assignment_id: str,
        question_id: str,
        edit: Callable[[Question], Question],
        action: str,
    ) -> bool:
        if self._find_question(assignment_id, question_id) is None:
            logger.debug(f"{action}: question {assignment_id!r}/{question_id!r} not found")
            return False
        return self._edit(
            assignment_id,
            lambda a: a.with_questions(tuple(
                edit(q) if q.id == question_id else q for q in a.questions
            )),
            action,
        )

    def _commit(self, assignments: tuple[Assignment, ...], action: str) -> None:
        self._assignments = assignments
        self._storage.write(self._key, assignments_record(assignments))
        logger.debug(f"Assignment store: {action}")
        self.assignmentsChanged.emit()
