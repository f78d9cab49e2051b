"""
Module: rubric

Purpose:
    Provides the rubric dataclasses - Comment, Question and Assignment.
    An Assignment owns its Questions and each Question owns its bank of
    reusable deduction Comments. All three are immutable; edits build new
    instances so stores can hand out snapshots safely.

Key Functions:
    - Question.find_comment(id): Look up a comment, None if it was deleted
    - Assignment.find_question(id): Look up a question, None if missing
    - Assignment.comment_count: Total comments across all questions
    - *.to_dict() / *.from_dict(): JSON-compatible serialization

Dependencies:
    - dataclasses (std)
    - typing (std)

Used By:
    - grading.score / grading.transcript / grading.markdown
    - grading.export
    - core.utils.serialization
    - store.assignments.AssignmentStore
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

Points = Union[int, float]


@dataclass(frozen=True)
class Comment:
    """
    A reusable grading remark with a point deduction.

    Attributes:
        id: Unique within the owning question
        text: Remark shown to the student
        deduction: Points subtracted when selected (treated as non-negative)
    """

    id: str
    text: str = ""
    deduction: Points = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "deduction": self.deduction}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        return cls(
            id=str(data["id"]),
            text=str(data.get("text") or ""),
            deduction=data.get("deduction") or 0,
        )


@dataclass(frozen=True)
class Question:
    """
    A gradable item holding a bank of comments.

    Comment order is display order (transcript and markdown output).

    Attributes:
        id: Unique within the owning assignment
        title: Short description shown as the section heading
        comments: Available comments in display order
    """

    id: str
    title: str = ""
    comments: tuple[Comment, ...] = ()

    def find_comment(self, comment_id: str) -> Optional[Comment]:
        """
        Find a comment by id.

        Args:
            comment_id: Id referenced by a submission

        Returns:
            Matching Comment, or None for a stale reference
        """
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None

    def with_comments(self, comments: tuple[Comment, ...]) -> Question:
        return replace(self, comments=tuple(comments))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            comments=tuple(Comment.from_dict(c) for c in data.get("comments") or []),
        )


@dataclass(frozen=True)
class Assignment:
    """
    A grading rubric template (immutable).

    Attributes:
        id: Unique within the assignment store
        title: Assignment name
        questions: Questions in display order
        extra: Any further top-level fields read from JSON; carried through
            edits and written back unchanged

    Example:
        >>> a = Assignment(id="a1", title="Lab 1")
        >>> a.question_count
        0
    """

    id: str
    title: str = ""
    questions: tuple[Question, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    # ─────────────────────────────────────────────────────────────────────────
    # Query Methods
    # ─────────────────────────────────────────────────────────────────────────

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def comment_count(self) -> int:
        return sum(len(q.comments) for q in self.questions)

    def with_questions(self, questions: tuple[Question, ...]) -> Assignment:
        """
        Replace only the question list.

        id, title and any extra metadata are kept as they are.
        """
        return replace(self, questions=tuple(questions))

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = dict(self.extra)
        d.update(
            id=self.id,
            title=self.title,
            questions=[q.to_dict() for q in self.questions],
        )
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Assignment:
        extra = {k: v for k, v in data.items() if k not in ("id", "title", "questions")}
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            questions=tuple(Question.from_dict(q) for q in data.get("questions") or []),
            extra=extra,
        )

    def __repr__(self) -> str:
        return (
            f"Assignment({self.id!r}, title={self.title!r}, "
            f"questions={self.question_count}, comments={self.comment_count})"
        )
