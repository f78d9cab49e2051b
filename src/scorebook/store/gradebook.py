"""
Module: store.gradebook

Purpose:
    The Gradebook is what a UI talks to. It owns an AssignmentStore and a
    SubmissionStore and keeps cached scores in step with the rubric:
    rubric edits that can change deductions resync every submission of
    that assignment, selection edits recompute the one submission touched.

Key Classes:
    - Gradebook: Command and query surface over both stores
    - MarkdownApplyError: Generic failure raised when rubric markdown
      cannot be applied

Dependencies:
    - scorebook.grading: score, transcript, markdown, export engines
    - scorebook.core.schemas: import validation

Used By:
    - cli
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from scorebook.config import ASSIGNMENTS_KEY, SUBMISSIONS_KEY, ScorebookConfig
from scorebook.core.ids import IdGenerator, new_id
from scorebook.core.models import (
    DEFAULT_BASE_SCORE,
    Assignment,
    Comment,
    Question,
    Student,
    Submission,
)
from scorebook.core.models.rubric import Points
from scorebook.core.utils.serialization import deserialize_assignment, read_backup_document
from scorebook.grading.export import assignment_to_json, backup_to_json, grades_to_csv
from scorebook.grading.markdown import UNNAMED_QUESTION, from_markdown, to_markdown
from scorebook.grading.score import compute_score
from scorebook.grading.transcript import generate_transcript
from scorebook.store.assignments import AssignmentStore
from scorebook.store.storage import JsonFileStorage, RecordStorage
from scorebook.store.submissions import SubmissionStore

logger = logging.getLogger(__name__)

UNTITLED_ASSIGNMENT = "Untitled assignment"


class MarkdownApplyError(Exception):
    """Raised when edited rubric markdown could not be applied."""
    pass


class Gradebook:
    """
    Coordinates rubric edits, grading and import/export.

    Args:
        storage: Record storage shared by both stores
        base_score: Score before deductions
        id_factory: Source of new ids for everything the gradebook creates
        assignments_key / submissions_key: Record keys

    Example:
        >>> book = Gradebook(MemoryStorage())
        >>> lab = book.create_assignment("Lab 1")
        >>> q = book.add_question(lab.id, "Formula")
    """

    def __init__(
        self,
        storage: RecordStorage,
        *,
        base_score: Points = DEFAULT_BASE_SCORE,
        id_factory: IdGenerator = new_id,
        assignments_key: str = ASSIGNMENTS_KEY,
        submissions_key: str = SUBMISSIONS_KEY,
    ) -> None:
        self.base_score = base_score
        self.id_factory = id_factory
        self.assignments = AssignmentStore(storage, assignments_key)
        self.submissions = SubmissionStore(storage, submissions_key)

    @classmethod
    def from_config(cls, config: ScorebookConfig, id_factory: IdGenerator = new_id) -> Gradebook:
        return cls(
            JsonFileStorage(config.data_dir),
            base_score=config.base_score,
            id_factory=id_factory,
            assignments_key=config.assignments_key,
            submissions_key=config.submissions_key,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Rubric Commands
    # ─────────────────────────────────────────────────────────────────────────

    def create_assignment(self, title: Optional[str] = None) -> Assignment:
        assignment = Assignment(
            id=self.id_factory(),
            title=title or f"New assignment ({len(self.assignments) + 1})",
        )
        self.assignments.add_assignment(assignment)
        logger.info(f"Created assignment {assignment.title!r}")
        return assignment

    def rename_assignment(self, assignment_id: str, title: str) -> bool:
        return self.assignments.update_assignment(
            assignment_id, title=title.strip() or UNTITLED_ASSIGNMENT
        )

    def remove_assignment(self, assignment_id: str) -> bool:
        """Remove an assignment; its submissions are kept as orphans."""
        return self.assignments.remove_assignment(assignment_id)

    def add_question(self, assignment_id: str, title: Optional[str] = None) -> Optional[Question]:
        assignment = self._require_assignment(assignment_id)
        if assignment is None:
            return None
        question = Question(
            id=self.id_factory(),
            title=title or f"Question {assignment.question_count + 1}",
        )
        self.assignments.add_question(assignment_id, question)
        return question

    def rename_question(self, assignment_id: str, question_id: str, title: str) -> bool:
        return self.assignments.update_question(
            assignment_id, question_id, title=title.strip() or UNNAMED_QUESTION
        )

    def remove_question(self, assignment_id: str, question_id: str) -> bool:
        return self._then_resync(
            assignment_id, self.assignments.remove_question(assignment_id, question_id)
        )

    def replace_questions(self, assignment_id: str, questions: Iterable[Question]) -> bool:
        return self._then_resync(
            assignment_id, self.assignments.replace_questions(assignment_id, tuple(questions))
        )

    def add_comment(
        self,
        assignment_id: str,
        question_id: str,
        text: str = "",
        deduction: Points = 0,
    ) -> Optional[Comment]:
        comment = Comment(id=self.id_factory(), text=text, deduction=deduction)
        if not self.assignments.add_comment(assignment_id, question_id, comment):
            return None
        self._then_resync(assignment_id, True)
        return comment

    def update_comment(
        self, assignment_id: str, question_id: str, comment_id: str, **changes: Any
    ) -> bool:
        return self._then_resync(
            assignment_id,
            self.assignments.update_comment(assignment_id, question_id, comment_id, **changes),
        )

    def remove_comment(self, assignment_id: str, question_id: str, comment_id: str) -> bool:
        return self._then_resync(
            assignment_id,
            self.assignments.remove_comment(assignment_id, question_id, comment_id),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Markdown Editing
    # ─────────────────────────────────────────────────────────────────────────

    def markdown(self, assignment_id: str) -> str:
        assignment = self.assignments.get(assignment_id)
        return to_markdown(assignment) if assignment else ""

    def apply_markdown(self, assignment_id: str, text: str) -> Assignment:
        """
        Replace an assignment's questions with edited markdown.

        All or nothing: the store only changes once parsing has finished.

        Raises:
            KeyError: If the assignment doesn't exist
            MarkdownApplyError: If parsing failed for any reason
        """
        original = self.assignments.get(assignment_id)
        if original is None:
            raise KeyError(assignment_id)
        try:
            parsed = from_markdown(text, original, self.id_factory)
        except Exception as e:
            logger.error(f"Markdown parsing failed for {assignment_id!r}: {e}")
            raise MarkdownApplyError("Markdown parsing failed") from e

        self.assignments.replace_questions(assignment_id, parsed.questions)
        self._then_resync(assignment_id, True)
        logger.info(
            f"Applied markdown to {original.title!r}: "
            f"{parsed.question_count} question(s), {parsed.comment_count} comment(s)"
        )
        return parsed

    # ─────────────────────────────────────────────────────────────────────────
    # Grading Commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_student(self, assignment_id: str, student_id: str, name: str = "") -> Submission:
        return self.submissions.upsert_submission(
            assignment_id,
            Student(id=student_id, name=name),
            id_factory=self.id_factory,
            base_score=self.base_score,
        )

    def toggle_comment(
        self, submission_id: str, question_id: str, comment_id: str, checked: bool = True
    ) -> Optional[Submission]:
        if not self.submissions.toggle_comment(submission_id, question_id, comment_id, checked):
            return None
        return self._rescore(submission_id)

    def set_question_selection(
        self, submission_id: str, question_id: str, comment_ids: Iterable[str]
    ) -> Optional[Submission]:
        if not self.submissions.update_selection_for_question(
            submission_id, question_id, comment_ids
        ):
            return None
        return self._rescore(submission_id)

    def remove_submission(self, submission_id: str) -> bool:
        return self.submissions.remove_submission(submission_id)

    def resync(self, assignment_id: str) -> None:
        assignment = self.assignments.get(assignment_id)
        if assignment is not None:
            self.submissions.resync_scores(assignment, self.base_score)

    # ─────────────────────────────────────────────────────────────────────────
    # Reports
    # ─────────────────────────────────────────────────────────────────────────

    def transcript(self, submission_id: str) -> str:
        submission = self.submissions.get(submission_id)
        if submission is None:
            return ""
        return generate_transcript(self.assignments.get(submission.assignment_id), submission)

    def grades_csv(self, assignment_id: str) -> Optional[str]:
        assignment = self._require_assignment(assignment_id)
        if assignment is None:
            return None
        return grades_to_csv(assignment, self.submissions.submissions)

    def export_assignment(self, assignment_id: str) -> Optional[str]:
        assignment = self._require_assignment(assignment_id)
        return assignment_to_json(assignment) if assignment else None

    def export_backup(self, now: Optional[datetime] = None) -> str:
        return backup_to_json(self.assignments.assignments, self.submissions.submissions, now)

    # ─────────────────────────────────────────────────────────────────────────
    # Imports
    # ─────────────────────────────────────────────────────────────────────────

    def import_assignment(self, data: Any, *, strict: bool = False) -> Assignment:
        """
        Import a single-assignment document.

        An assignment with the same id is overwritten, otherwise it is added.

        Raises:
            ValidationError: If the document is not an assignment
        """
        assignment = deserialize_assignment(data, strict=strict)
        self.assignments.put_assignment(assignment)
        self.resync(assignment.id)
        logger.info(f"Imported assignment {assignment.title!r}")
        return assignment

    def import_backup(self, data: Any, *, strict: bool = False) -> None:
        """
        Import a full backup: assignments are put, submissions merged.

        Nothing is applied unless the whole document validates.

        Raises:
            ValidationError: If any part of the backup is invalid
        """
        assignments, submissions = read_backup_document(data, strict=strict)
        for assignment in assignments:
            self.assignments.put_assignment(assignment)
        self.submissions.merge_submissions(submissions, self.id_factory)

        touched = {a.id for a in assignments} | {s.assignment_id for s in submissions}
        for assignment_id in touched:
            self.resync(assignment_id)
        logger.info(
            f"Imported backup: {len(assignments)} assignment(s), {len(submissions)} submission(s)"
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _require_assignment(self, assignment_id: str) -> Optional[Assignment]:
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            logger.warning(f"Assignment not found: {assignment_id!r}")
        return assignment

    def _then_resync(self, assignment_id: str, changed: bool) -> bool:
        if changed:
            self.resync(assignment_id)
        return changed

    def _rescore(self, submission_id: str) -> Optional[Submission]:
        submission = self.submissions.get(submission_id)
        if submission is None:
            return None
        assignment = self.assignments.get(submission.assignment_id)
        if assignment is None:
            return submission
        score = compute_score(assignment, submission, self.base_score)
        if score != submission.score:
            self.submissions.update_score(submission_id, score)
        return self.submissions.get(submission_id)
