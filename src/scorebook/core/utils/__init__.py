"""
Utils Package

Serialization and formatting helpers.
"""

from .formatting import format_points
from .serialization import (
    deserialize_assignment,
    assignments_record,
    submissions_record,
    load_assignments_record,
    load_submissions_record,
    backup_document,
    read_backup_document,
    load_json_file,
    save_json_file,
    dumps_json,
)

__all__ = [
    "format_points",
    "deserialize_assignment",
    "assignments_record",
    "submissions_record",
    "load_assignments_record",
    "load_submissions_record",
    "backup_document",
    "read_backup_document",
    "load_json_file",
    "save_json_file",
    "dumps_json",
]
