"""Point-value rendering shared by transcripts, markdown and CSV export."""

from __future__ import annotations

from ..models.rubric import Points


def format_points(value: Points) -> str:
    """Render a point value without a trailing ``.0`` (5.0 -> "5", 2.5 -> "2.5")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
