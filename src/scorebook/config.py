"""
Module: config

Purpose:
    Configuration dataclass for a scorebook session. Immutable
    configuration with validation on construction.

Key Classes:
    - ScorebookConfig: Where records live and how scores are based

Dependencies:
    - dataclasses (std)
    - json (std)
    - scorebook.paths: default data directory

Used By:
    - store.gradebook.Gradebook.from_config
    - cli
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from scorebook.core.models import DEFAULT_BASE_SCORE
from scorebook.paths import get_app_data_dir

logger = logging.getLogger(__name__)

ASSIGNMENTS_KEY = "scorebook.assignments"
SUBMISSIONS_KEY = "scorebook.submissions"


@dataclass(frozen=True)
class ScorebookConfig:
    """
    Configuration for a grading session (immutable).

    Attributes:
        data_dir: Directory holding the persisted records
        base_score: Score before any deduction
        assignments_key: Record key for the assignments collection
        submissions_key: Record key for the submissions collection

    Example:
        >>> config = ScorebookConfig(data_dir=Path("/tmp/grades"), base_score=50)
    """

    data_dir: Path = field(default_factory=get_app_data_dir)
    base_score: Union[int, float] = DEFAULT_BASE_SCORE
    assignments_key: str = ASSIGNMENTS_KEY
    submissions_key: str = SUBMISSIONS_KEY

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not isinstance(self.data_dir, Path):
            object.__setattr__(self, "data_dir", Path(self.data_dir))
        if isinstance(self.base_score, bool) or not isinstance(self.base_score, (int, float)):
            raise ValueError(f"base_score must be a number: {self.base_score!r}")
        if self.base_score <= 0:
            raise ValueError(f"base_score must be positive: {self.base_score}")
        if not self.assignments_key or not self.submissions_key:
            raise ValueError("record keys must be non-empty")
        if self.assignments_key == self.submissions_key:
            raise ValueError(f"record keys must differ: {self.assignments_key!r}")

    @classmethod
    def from_file(cls, path: Path, **overrides: Any) -> ScorebookConfig:
        """
        Load configuration from a JSON settings file.

        Unknown keys are ignored. A missing, unreadable or invalid file falls
        back to defaults with a warning rather than failing.

        Args:
            path: Settings file path
            **overrides: Values that win over the file (e.g. from the CLI)

        Returns:
            ScorebookConfig

        Raises:
            ValueError: If an override itself is invalid
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if isinstance(raw, dict):
                    values = {k: v for k, v in raw.items() if k in known}
                else:
                    logger.warning(f"Settings file {path} is not a JSON object, using defaults")
            except (OSError, ValueError) as e:
                # ValueError covers JSONDecodeError and UnicodeDecodeError
                logger.warning(f"Failed to read settings {path}: {e}")

        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid settings in {path}: {e}")
            return cls(**{k: v for k, v in overrides.items() if v is not None})
