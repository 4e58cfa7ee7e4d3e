"""Backup error kinds surfaced to callers."""

from __future__ import annotations


class BackupError(Exception):
    """Base class for every failure raised by a backup operation."""


class BackupIOError(BackupError):
    """Unreadable source file, unwritable destination, or uncreatable directory."""


class SerializationError(BackupError):
    """Metadata could not be converted to or parsed from JSON."""


class InvalidConfigurationError(BackupError):
    """The backup configuration cannot be run as given."""
