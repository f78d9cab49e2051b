"""
Module: submission

Purpose:
    Provides Student and Submission. A Submission is one student's graded
    instance of an assignment: the comments selected per question plus a
    cached score. The selections are the source of truth; the score is
    derived and recomputed by grading.score whenever either side changes.

Key Functions:
    - Submission.selection_for(question_id): Selection, empty if none
    - Submission.with_selection(question_id, selection): New instance
    - Submission.to_dict() / Submission.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - .selection.SelectionSet

Used By:
    - grading.score / grading.transcript / grading.merge / grading.export
    - store.submissions.SubmissionStore
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from .rubric import Points
from .selection import SelectionSet

DEFAULT_BASE_SCORE = 100


@dataclass(frozen=True)
class Student:
    """
    Free-form student identity chosen by the instructor.

    Attributes:
        id: Roster-independent identifier, e.g. "S1"
        name: Display name (may be empty)
    """

    id: str
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Student:
        return cls(id=str(data["id"]), name=str(data.get("name") or ""))


@dataclass(frozen=True)
class Submission:
    """
    One student's graded assignment (immutable).

    Attributes:
        id: Store-unique submission id
        assignment_id: Assignment this submission grades (may dangle)
        student: Embedded student identity
        selected: Question id -> selected comment ids. May reference
            questions or comments that no longer exist.
        score: Cached result of grading.score.compute_score

    Invariants:
        - (assignment_id, student.id) identifies the submission across
          import/export; ``id`` does not
    """

    id: str
    assignment_id: str
    student: Student
    selected: Mapping[str, SelectionSet] = field(default_factory=dict)
    score: Points = DEFAULT_BASE_SCORE

    @property
    def identity_key(self) -> tuple[str, str]:
        """Natural key used when matching submissions across stores."""
        return (self.assignment_id, self.student.id)

    def selection_for(self, question_id: str) -> SelectionSet:
        return self.selected.get(question_id, SelectionSet.empty())

    def with_selection(self, question_id: str, selection: Iterable[str]) -> Submission:
        selected = dict(self.selected)
        selected[question_id] = (
            selection if isinstance(selection, SelectionSet) else SelectionSet.of(selection)
        )
        return replace(self, selected=selected)

    def with_selected(self, selected: Mapping[str, Iterable[str]]) -> Submission:
        return replace(self, selected=normalize_selected(selected))

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize using the interchange key names (``assignmentId``).

        Returns:
            Dict representation
        """
        return {
            "id": self.id,
            "assignmentId": self.assignment_id,
            "student": self.student.to_dict(),
            "selected": {qid: sel.to_list() for qid, sel in self.selected.items()},
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Submission:
        score = data.get("score")
        return cls(
            id=str(data["id"]),
            assignment_id=str(data["assignmentId"]),
            student=Student.from_dict(data["student"]),
            selected=normalize_selected(data.get("selected") or {}),
            score=DEFAULT_BASE_SCORE if score is None else score,
        )

    def __repr__(self) -> str:
        return (
            f"Submission({self.id!r}, assignment={self.assignment_id!r}, "
            f"student={self.student.id!r}, score={self.score})"
        )


def normalize_selected(selected: Mapping[str, Iterable[str]]) -> dict[str, SelectionSet]:
    """Convert any mapping of id iterables into SelectionSets, keeping key order."""
    return {
        str(qid): ids if isinstance(ids, SelectionSet) else SelectionSet.of(str(i) for i in ids)
        for qid, ids in selected.items()
    }
