"""Folder validation used before a folder is monitored."""

from __future__ import annotations

import logging
import os
from pathlib import PurePath

from preview_unblock.errors import InvalidReason, ValidationError

logger = logging.getLogger(__name__)


def check_folder(path: str) -> None:
    """Raise :class:`ValidationError` unless *path* is a safe, existing folder.

    The path must be absolute and free of ``..`` segments; a well-formed
    path that does not name an existing directory is reported as
    ``DirectoryMissing``.
    """
    try:
        if not path or not os.path.isabs(path):
            raise ValidationError(path, InvalidReason.INVALID_PATH)
        if ".." in PurePath(path).parts:
            raise ValidationError(path, InvalidReason.INVALID_PATH)
        exists = os.path.isdir(path)
    except (TypeError, ValueError, OSError) as exc:
        logger.debug("Rejected folder %r: %s", path, exc)
        raise ValidationError(str(path), InvalidReason.INVALID_PATH) from exc
    if not exists:
        raise ValidationError(path, InvalidReason.DIRECTORY_MISSING)


def is_valid_folder(path: str) -> bool:
    """Return True if *path* is an absolute, traversal-free, existing folder."""
    try:
        check_folder(path)
    except ValidationError:
        return False
    return True
