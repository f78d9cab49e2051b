"""
Path utilities for handling dev vs production (frozen) file locations.

Dev mode: Uses local workspace/ directory
Frozen mode: Uses the platform's application data location via Qt
"""
from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QStandardPaths

APP_NAME = "Scorebook"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_app_data_dir() -> Path:
    """
    Get the application data directory for the assignment/submission records.

    Frozen: ~/Library/Application Support/Scorebook (macOS),
            %LOCALAPPDATA%/Scorebook (Windows),
            ~/.local/share/Scorebook (Linux)
    Dev: workspace/
    """
    if not is_frozen():
        return Path.cwd() / "workspace"

    if not QCoreApplication.applicationName():
        QCoreApplication.setApplicationName(APP_NAME)
    app_data = Path(QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.AppLocalDataLocation
    ))
    app_data.mkdir(parents=True, exist_ok=True)
    return app_data


def get_settings_path() -> Path:
    """Get the path of the optional scorebook settings file."""
    return get_app_data_dir() / "scorebook_settings.json"
