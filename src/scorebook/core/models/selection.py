"""
Module: selection

Purpose:
    Provides SelectionSet - the comment ids a grader has ticked for one
    question. Selections are sets semantically but their order is kept for
    display and export, so the type is an immutable insertion-ordered set.

Key Functions:
    - SelectionSet.of(ids): Build from any iterable, collapsing duplicates
    - SelectionSet.union(other): Left order, then unseen right ids
    - SelectionSet.toggled(id, checked): Add or remove one id

Dependencies:
    - dataclasses (std)
    - itertools (std)
    - typing (std)

Used By:
    - core.models.submission.Submission
    - grading.merge
    - store.submissions.SubmissionStore
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class SelectionSet:
    """
    Insertion-ordered, duplicate-free set of comment ids (immutable).

    Attributes:
        ids: Comment ids in first-selected order

    Invariants:
        - No id appears twice in ``ids``

    Example:
        >>> s = SelectionSet.of(["c1", "c2", "c1"])
        >>> s.to_list()
        ['c1', 'c2']
    """

    ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Coerce to a tuple and collapse duplicates, whatever was passed in."""
        object.__setattr__(self, "ids", tuple(dict.fromkeys(self.ids)))

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def of(cls, ids: Iterable[str] = ()) -> SelectionSet:
        """
        Create a selection from any iterable of ids.

        The first occurrence of a repeated id wins its position.
        """
        return cls(tuple(dict.fromkeys(ids)))

    @classmethod
    def empty(cls) -> SelectionSet:
        return cls()

    # ─────────────────────────────────────────────────────────────────────────
    # Set Operations (all return new instances)
    # ─────────────────────────────────────────────────────────────────────────

    def with_id(self, comment_id: str) -> SelectionSet:
        if comment_id in self.ids:
            return self
        return SelectionSet(self.ids + (comment_id,))

    def without_id(self, comment_id: str) -> SelectionSet:
        if comment_id not in self.ids:
            return self
        return SelectionSet(tuple(i for i in self.ids if i != comment_id))

    def toggled(self, comment_id: str, checked: bool) -> SelectionSet:
        """
        Select or deselect one comment.

        Args:
            comment_id: Comment to change
            checked: True to add it, False to remove it

        Returns:
            New selection (or self when nothing changes)
        """
        return self.with_id(comment_id) if checked else self.without_id(comment_id)

    def union(self, other: Iterable[str]) -> SelectionSet:
        """
        Set union keeping this selection's order first.

        Args:
            other: Another SelectionSet or any iterable of ids

        Returns:
            Selection containing every id from both sides exactly once
        """
        return SelectionSet.of(itertools.chain(self.ids, other))

    # ─────────────────────────────────────────────────────────────────────────
    # Container Protocol
    # ─────────────────────────────────────────────────────────────────────────

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self.ids

    def __bool__(self) -> bool:
        return bool(self.ids)

    def to_list(self) -> list[str]:
        """Serialize to a plain list for JSON storage."""
        return list(self.ids)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self.ids)!r})"

