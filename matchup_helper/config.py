"""Environment-driven settings for Matchup Helper."""

import logging
import os
import sys
from pathlib import Path

APP_DIR_NAME = "matchuphelper"


def get_data_dir() -> Path:
    """Get the data directory path."""
    # Check environment variable first
    if env_path := os.environ.get("MATCHUP_HELPER_DATA_DIR"):
        return Path(env_path)

    # Default to the per-user data directory
    if sys.platform == "win32" and (appdata := os.environ.get("APPDATA")):
        return Path(appdata) / APP_DIR_NAME
    if xdg := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME


def get_log_level() -> int:
    """Get the log level from MATCHUP_HELPER_LOG_LEVEL, defaulting to INFO."""
    name = os.environ.get("MATCHUP_HELPER_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
