"""
Module: grading.merge

Purpose:
    Reconcile an imported batch of submissions with the submissions
    already in a store.

Matching uses the natural key ``(assignment_id, student.id)``; submission
ids are regenerated per store and carry no meaning across an
export/import boundary.

- Match: incoming score wins (no recompute here), selections are unioned
  per question, the name is replaced only by a non-empty incoming name.
- No match: appended. The incoming id is kept unless it collides with any
  existing submission id, in which case a fresh id is minted.

Selections only ever grow, so merging the same batch twice gives the same
selections as merging it once.

Key Functions:
    - merge_submissions(existing, incoming, id_factory): Merged list
    - merge_selected(existing, incoming): Per-question union

Used By:
    - store.submissions.SubmissionStore.merge_submissions
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping

from ..core.ids import IdGenerator, new_id
from ..core.models import SelectionSet, Submission

logger = logging.getLogger(__name__)


def merge_selected(
    existing: Mapping[str, SelectionSet],
    incoming: Mapping[str, SelectionSet],
) -> dict[str, SelectionSet]:
    """
    Union two selection maps question by question.

    Existing questions keep their position; questions only present in
    ``incoming`` are appended in incoming order.
    """
    merged = dict(existing)
    for question_id, ids in incoming.items():
        merged[question_id] = merged.get(question_id, SelectionSet.empty()).union(ids)
    return merged


def _merge_into(current: Submission, incoming: Submission) -> Submission:
    return replace(
        current,
        score=incoming.score,
        selected=merge_selected(current.selected, incoming.selected),
        student=replace(current.student, name=incoming.student.name or current.student.name),
    )


def merge_submissions(
    existing: Iterable[Submission],
    incoming: Iterable[Submission],
    id_factory: IdGenerator = new_id,
) -> list[Submission]:
    """
    Merge an incoming batch into the existing submissions.

    Args:
        existing: Submissions currently in the store (all assignments)
        incoming: Imported batch
        id_factory: Source of replacement ids on collision

    Returns:
        New list: existing submissions (updated in place where matched)
        followed by newly added ones in incoming order
    """
    merged = list(existing)
    index_by_key: dict[tuple[str, str], int] = {}
    for i, sub in enumerate(merged):
        index_by_key.setdefault(sub.identity_key, i)
    known_ids = {sub.id for sub in merged}

    for inc in incoming:
        position = index_by_key.get(inc.identity_key)
        if position is not None:
            merged[position] = _merge_into(merged[position], inc)
            continue

        if inc.id in known_ids:
            fresh = id_factory()
            logger.debug(f"Submission id {inc.id!r} already in use, re-keyed to {fresh!r}")
            inc = replace(inc, id=fresh)

        index_by_key[inc.identity_key] = len(merged)
        known_ids.add(inc.id)
        merged.append(inc)

    return merged
