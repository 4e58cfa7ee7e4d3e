"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcbackup.config import Config
    from mcbackup.core.backup import BackupManager


@dataclass
class AppContext:
    """Central service container handed to the command handlers."""

    config: Config
    backup_manager: BackupManager
