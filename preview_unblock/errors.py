"""Exceptions raised by the monitoring core."""

from __future__ import annotations

from enum import Enum


class PreviewUnblockError(Exception):
    """Base class for all Preview Unblock errors."""


class InvalidReason(str, Enum):
    """Why a folder was rejected."""

    INVALID_PATH = "InvalidPath"
    DIRECTORY_MISSING = "DirectoryMissing"


class ValidationError(PreviewUnblockError):
    """A folder path was rejected before any side effect took place."""

    def __init__(self, path: str, reason: InvalidReason):
        self.path = path
        self.reason = reason
        if reason is InvalidReason.DIRECTORY_MISSING:
            message = f"Folder does not exist: {path}"
        else:
            message = f"Invalid folder path: {path}"
        super().__init__(message)


class EnumerationError(PreviewUnblockError):
    """Listing the watched folder failed."""


class NotificationError(PreviewUnblockError):
    """The change-notification mechanism reported a failure."""
