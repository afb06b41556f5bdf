"""
Data path utilities for Settlement Sync.

Handles the distinction between bundled read-only data (like the frozen
cargo snapshot) and user-writable data (the optional config file and the
item catalog cache).
"""

import os
import sys
import logging
from pathlib import Path

APP_NAME = "SettlementSync"


def get_bundled_data_directory():
    """
    Get the directory for bundled read-only data files like static_cargo.json.

    Returns:
        str: Path to bundled data directory (read-only)
    """
    return os.path.normpath(os.path.join(os.path.dirname(__file__), "..", "data"))


def get_user_data_directory():
    """
    Get the directory for user-writable data files like settlement_sync.toml.

    Honors SETTLEMENT_SYNC_HOME, otherwise uses the OS-appropriate user data
    directory for the application.

    Returns:
        str: Path to user data directory (writable)
    """
    override = os.getenv("SETTLEMENT_SYNC_HOME")
    if override:
        return os.path.normpath(override)

    if sys.platform == "win32":
        # Windows: %APPDATA%/SettlementSync/
        base_dir = os.getenv("APPDATA") or os.path.expanduser("~")
    elif sys.platform == "darwin":
        # macOS: ~/Library/Application Support/SettlementSync/
        base_dir = os.path.expanduser("~/Library/Application Support")
    else:
        # Linux: ~/.local/share/SettlementSync/
        base_dir = os.getenv("XDG_DATA_HOME") or os.path.expanduser("~/.local/share")

    return os.path.join(base_dir, APP_NAME)


def get_cache_directory():
    """
    Get the directory for cached catalog data.

    Returns:
        Path: Cache directory (not created here)
    """
    if os.name == "nt":
        cache_base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        cache_base = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))

    return cache_base / APP_NAME / "item_cache"


def get_bundled_data_path(filename):
    """
    Get the full path to a bundled data file.

    Args:
        filename: Name of the data file (e.g., "static_cargo.json")

    Returns:
        str: Full path to the bundled data file
    """
    return os.path.join(get_bundled_data_directory(), filename)


def get_user_data_path(filename):
    """
    Get the full path to a user data file.

    Args:
        filename: Name of the user data file (e.g., "settlement_sync.toml")

    Returns:
        str: Full path to the user data file
    """
    return os.path.join(get_user_data_directory(), filename)


def ensure_directory(path) -> bool:
    """
    Ensure a directory exists and is writable.

    Returns:
        bool: True if directory is accessible, False otherwise
    """
    try:
        Path(path).mkdir(parents=True, exist_ok=True)

        test_file = os.path.join(path, ".write_test")
        with open(test_file, "w") as f:
            f.write("test")
        os.remove(test_file)

        logging.debug(f"Directory ready: {path}")
        return True

    except OSError as e:
        logging.error(f"Cannot access directory {path}: {e}")
        return False
