"""
Serialization Utilities

Provides to/from JSON utilities for the scorebook data models.

- `deserialize_assignment` wraps `Assignment.from_dict()` with the import
  checks.
- `*_record` / `load_*_record` build and read the two persisted store
  records (`{"assignments": [...]}` and `{"submissions": [...]}`).
- `backup_document` builds the full backup interchange document.
- `load_json_file` / `save_json_file` do the file I/O, writing through a
  temp file so an interrupted save never leaves half a document behind.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from ..models.rubric import Assignment
from ..models.submission import Submission
from ..schemas.validator import (
    ValidationError,
    validate_assignment,
    validate_backup,
)

logger = logging.getLogger(__name__)

ASSIGNMENTS_FIELD = "assignments"
SUBMISSIONS_FIELD = "submissions"


# ─────────────────────────────────────────────────────────────────────────────
# Model Serialization
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_assignment(
    data: Any, *, validate: bool = True, strict: bool = False
) -> Assignment:
    """
    Deserialize an Assignment from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to run the import checks first
        strict: Also run full JSON Schema validation

    Returns:
        Assignment instance

    Raises:
        ValidationError: If validate=True and data is invalid
    """
    if validate:
        validate_assignment(data, strict=strict)
    return Assignment.from_dict(data)


# ─────────────────────────────────────────────────────────────────────────────
# Store Records
# ─────────────────────────────────────────────────────────────────────────────

def assignments_record(assignments: Iterable[Assignment]) -> dict[str, Any]:
    return {ASSIGNMENTS_FIELD: [a.to_dict() for a in assignments]}


def submissions_record(submissions: Iterable[Submission]) -> dict[str, Any]:
    return {SUBMISSIONS_FIELD: [s.to_dict() for s in submissions]}


def load_assignments_record(value: Any) -> tuple[Assignment, ...]:
    """
    Read a persisted assignments record.

    A structurally incompatible value yields an empty collection; it is
    logged, never raised.

    Args:
        value: Whatever the storage returned (may be None)

    Returns:
        Tuple of assignments in stored order
    """
    items = _record_items(value, ASSIGNMENTS_FIELD)
    try:
        return tuple(Assignment.from_dict(item) for item in items)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        logger.warning(f"Ignoring incompatible assignments record: {e}")
        return ()


def load_submissions_record(value: Any) -> tuple[Submission, ...]:
    """Read a persisted submissions record; incompatible values read as empty."""
    items = _record_items(value, SUBMISSIONS_FIELD)
    try:
        return tuple(Submission.from_dict(item) for item in items)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        logger.warning(f"Ignoring incompatible submissions record: {e}")
        return ()


def _record_items(value: Any, field: str) -> list:
    if value is None:
        return []
    if not isinstance(value, dict) or not isinstance(value.get(field), list):
        logger.warning(f"Stored {field} record has unexpected shape, using empty collection")
        return []
    return value[field]


# ─────────────────────────────────────────────────────────────────────────────
# Backup Documents
# ─────────────────────────────────────────────────────────────────────────────

def backup_document(
    assignments: Iterable[Assignment],
    submissions: Iterable[Submission],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build the full backup document.

    Args:
        assignments: Every assignment in the store
        submissions: Every submission in the store (orphans included)
        now: Timestamp to record (defaults to current UTC time)

    Returns:
        ``{"assignments": [...], "submissions": [...], "timestamp": iso}``
    """
    moment = now or datetime.now(timezone.utc)
    return {
        ASSIGNMENTS_FIELD: [a.to_dict() for a in assignments],
        SUBMISSIONS_FIELD: [s.to_dict() for s in submissions],
        "timestamp": moment.isoformat(),
    }


def read_backup_document(
    data: Any, *, strict: bool = False
) -> tuple[tuple[Assignment, ...], tuple[Submission, ...]]:
    """
    Validate and load a backup document.

    Raises:
        ValidationError: If the document (or any entry in it) is invalid
    """
    validate_backup(data, strict=strict)
    assignments = tuple(Assignment.from_dict(a) for a in data[ASSIGNMENTS_FIELD])
    submissions = tuple(Submission.from_dict(s) for s in data[SUBMISSIONS_FIELD])
    return assignments, submissions


# ─────────────────────────────────────────────────────────────────────────────
# File Utilities
# ─────────────────────────────────────────────────────────────────────────────

def load_json_file(path: Path) -> Any:
    """
    Load a JSON document from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not valid JSON
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ValidationError(f"Invalid JSON in {path.name}: {e}", path=str(path), errors=[str(e)])


def dumps_json(data: Any) -> str:
    """Render a document the way every scorebook export does (2-space indent)."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def save_json_file(path: Path, data: Any) -> None:
    """
    Save a JSON document with atomic replacement.

    Args:
        path: Output path
        data: JSON-serializable document
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_path.write_text(dumps_json(data), encoding="utf-8")
        temp_path.replace(path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
