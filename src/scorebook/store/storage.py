"""
Record storage for the scorebook stores.

A store persists each collection as one JSON record under a key. Reading
never raises: a missing or corrupt record reads as None and the store
falls back to an empty collection. Failed writes are logged and the
in-memory snapshot stays authoritative.
"""
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from scorebook.core.utils.serialization import save_json_file

logger = logging.getLogger(__name__)


class RecordStorage(Protocol):
    """Key-value storage holding JSON-compatible records."""

    def read(self, key: str) -> Optional[Any]:
        ...

    def write(self, key: str, value: Any) -> None:
        ...


class JsonFileStorage:
    """One ``<key>.json`` file per record inside ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            logger.warning(f"Record {key!r} is corrupted, ignoring it: {e}")
        except OSError as e:
            logger.warning(f"Failed to read record {key!r}: {e}")
        return None

    def write(self, key: str, value: Any) -> None:
        """Write a record through save_json_file; failures are logged, not raised."""
        try:
            save_json_file(self.path_for(key), value)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save record {key!r}: {e}")


class MemoryStorage:
    """In-process storage; values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._records: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def read(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._records.get(key))

    def write(self, key: str, value: Any) -> None:
        self._records[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        return list(self._records)
