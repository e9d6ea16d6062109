"""
Cross-platform utilities for Preview Unblock.

Centralises all OS-detection logic so every other module can import
a single canonical set of helpers rather than scattering ``sys.platform``
checks throughout the codebase.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"

# Name of the marker written by browsers and mail clients on download.
# NTFS stores it as an alternate data stream; copies made from Windows
# into WSL or Samba shares surface it as a literal sidecar file.
ZONE_IDENTIFIER = "Zone.Identifier"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """
    Return the application data directory, created if needed.

    - Windows : ``%APPDATA%\\PreviewUnblock``
    - macOS   : ``~/Library/Application Support/PreviewUnblock``
    - Linux   : ``$XDG_CONFIG_HOME/PreviewUnblock`` (default ``~/.config``)
    """
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))

    config_dir = Path(base) / "PreviewUnblock"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the path to the diagnostic log file."""
    return get_config_dir() / "preview_unblock.log"


def get_default_folder() -> str:
    """Return the user's Downloads folder, or the home folder if it is missing."""
    home = Path.home()
    downloads = home / "Downloads"
    if downloads.is_dir():
        return str(downloads)
    return str(home)


# ---- marker ------------------------------------------------------------


def marker_path(file_path: str) -> str:
    """Return the address of the download marker attached to *file_path*."""
    return f"{file_path}:{ZONE_IDENTIFIER}"


# ---- desktop integration -----------------------------------------------


def open_file_in_default_app(filepath: str | Path) -> None:
    """Open a file with the OS default application."""
    fp = str(filepath)
    try:
        if IS_WINDOWS:
            os.startfile(fp)  # type: ignore[attr-defined]
        elif IS_MACOS:
            subprocess.Popen(["open", fp])
        else:
            subprocess.Popen(["xdg-open", fp])
    except Exception:
        logger.warning("Could not open file: %s", fp, exc_info=True)
