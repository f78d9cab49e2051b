"""
Schema Validation Utilities

Validates imported JSON documents before they reach the stores.

Two levels, as with every import path in scorebook:
- Basic checks (always): the structural shape the stores rely on. An
  assignment needs a truthy ``id``, a truthy ``title`` and a ``questions``
  list; anything else is rejected before any state changes.
- Strict checks (``strict=True``): full JSON Schema validation against the
  bundled ``*.schema.json`` documents using jsonschema.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _run_jsonschema(data: Any, schema_name: str, prefix: str = "") -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        location = ".".join(str(p) for p in e.absolute_path)
        if prefix:
            location = f"{prefix}.{location}" if location else prefix
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=location,
            errors=[e.message],
        )


def validate_assignment(data: Any, *, strict: bool = False, path: str = "") -> None:
    """
    Validate an imported assignment document.

    Args:
        data: Parsed JSON value
        strict: If True, also run jsonschema against assignment.schema.json
        path: Location prefix used in error reports (for nested documents)

    Raises:
        ValidationError: If data is not an acceptable assignment
    """
    if not isinstance(data, dict):
        raise ValidationError("Assignment must be a JSON object", path=path)

    problems = []
    if not data.get("id"):
        problems.append("id")
    if not data.get("title"):
        problems.append("title")
    if not isinstance(data.get("questions"), list):
        problems.append("questions")
    if problems:
        raise ValidationError(
            f"Invalid assignment format: {problems}",
            path=path,
            errors=[f"Missing or invalid field: {f}" for f in problems],
        )

    for i, question in enumerate(data["questions"]):
        _validate_question(question, f"{path}.questions[{i}]" if path else f"questions[{i}]")

    if strict:
        _run_jsonschema(data, "assignment", path)


def _validate_question(data: Any, path: str) -> None:
    """Check the parts of a question the models need to load it."""
    if not isinstance(data, dict) or not data.get("id"):
        raise ValidationError("Question must be an object with an id", path=path)
    comments = data.get("comments", [])
    if not isinstance(comments, list):
        raise ValidationError("comments must be a list", path=f"{path}.comments")
    for i, comment in enumerate(comments):
        if not isinstance(comment, dict) or not comment.get("id"):
            raise ValidationError(
                "Comment must be an object with an id",
                path=f"{path}.comments[{i}]",
            )
        deduction = comment.get("deduction", 0)
        if isinstance(deduction, bool) or not isinstance(deduction, (int, float)):
            raise ValidationError(
                f"Invalid deduction: {deduction!r} (must be a number)",
                path=f"{path}.comments[{i}].deduction",
            )


def validate_submission(data: Any, *, strict: bool = False, path: str = "") -> None:
    """
    Validate an imported submission document.

    Raises:
        ValidationError: If data is not an acceptable submission
    """
    if not isinstance(data, dict):
        raise ValidationError("Submission must be a JSON object", path=path)

    required = ["id", "assignmentId", "student"]
    missing = [f for f in required if not data.get(f)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )

    student = data["student"]
    if not isinstance(student, dict) or not student.get("id"):
        raise ValidationError("student must be an object with an id", path=f"{path}.student")

    selected = data.get("selected", {})
    if not isinstance(selected, dict) or not all(
        isinstance(ids, list) for ids in selected.values()
    ):
        raise ValidationError(
            "selected must map question ids to lists",
            path=f"{path}.selected",
        )

    if strict:
        _run_jsonschema(data, "submission", path)


def validate_backup(data: Any, *, strict: bool = False) -> None:
    """
    Validate a full backup document (assignments + submissions).

    Every nested assignment and submission is validated too, so a backup
    is either accepted whole or rejected whole.

    Raises:
        ValidationError: If any part of the backup is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Backup must be a JSON object")

    for key in ("assignments", "submissions"):
        if not isinstance(data.get(key), list):
            raise ValidationError(f"{key} must be a list", path=key)

    if strict:
        _run_jsonschema(data, "backup")

    for i, assignment in enumerate(data["assignments"]):
        validate_assignment(assignment, strict=strict, path=f"assignments[{i}]")
    for i, submission in enumerate(data["submissions"]):
        validate_submission(submission, strict=strict, path=f"submissions[{i}]")
