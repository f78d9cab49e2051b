"""
Schemas Package

JSON schema definitions and import validation utilities.
"""

from .validator import (
    validate_assignment,
    validate_submission,
    validate_backup,
    ValidationError,
)

__all__ = [
    "validate_assignment",
    "validate_submission",
    "validate_backup",
    "ValidationError",
]
