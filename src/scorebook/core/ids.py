"""
Module: ids

Purpose:
    Identifier generation for rubric entities and submissions. Every
    operation that mints ids (markdown parsing, merge, upsert) takes an
    ``IdGenerator`` so callers can inject a deterministic source.

Key Functions:
    - new_id(): Random UUID4 string (default generator)
    - sequential_ids(prefix): Deterministic generator for tests/tooling

Dependencies:
    - itertools (std)
    - uuid (std)

Used By:
    - grading.markdown.from_markdown
    - grading.merge.merge_submissions
    - store.submissions.SubmissionStore.upsert_submission
    - store.gradebook.Gradebook
"""

from __future__ import annotations

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def new_id() -> str:
    """
    Create a random unique identifier.

    The hyphenated UUID form only uses ``[0-9a-f-]`` so it survives the
    markdown id marker unchanged.

    Returns:
        UUID4 string like "3f1c2a9e-..."
    """
    return str(uuid.uuid4())


def sequential_ids(prefix: str = "id") -> IdGenerator:
    """
    Build a deterministic id generator.

    Args:
        prefix: Text placed before the running counter

    Returns:
        Callable yielding "prefix-1", "prefix-2", ...

    Example:
        >>> gen = sequential_ids("q")
        >>> gen(), gen()
        ('q-1', 'q-2')
    """
    counter = itertools.count(1)

    def _next() -> str:
        return f"{prefix}-{next(counter)}"

    return _next
