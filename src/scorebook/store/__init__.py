"""
Store Package

Persisted assignment and submission collections plus the Gradebook that
coordinates them with the grading engines.
"""

from .storage import RecordStorage, JsonFileStorage, MemoryStorage
from .assignments import AssignmentStore
from .submissions import SubmissionStore
from .gradebook import Gradebook, MarkdownApplyError

__all__ = [
    "RecordStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "AssignmentStore",
    "SubmissionStore",
    "Gradebook",
    "MarkdownApplyError",
]
