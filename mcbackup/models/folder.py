"""Recognized Minecraft data folders."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from mcbackup.errors import InvalidConfigurationError


class Folder(StrEnum):
    """Selectable source subdirectory. The value is its path under the install root."""

    SAVES = "saves"
    MODS = "mods"
    CONFIG = "config"
    LOGS = "logs"
    SCREENSHOTS = "screenshots"
    BACKUPS = "backups"

    @property
    def relative_path(self) -> str:
        return self.value

    def path_under(self, root: str | Path) -> Path:
        return Path(root) / self.relative_path

    @classmethod
    def parse(cls, name: str | Folder) -> Folder:
        """Resolve a member name or value, case-insensitively."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for folder in cls:
            if key in (folder.value, folder.name.lower()):
                return folder
        valid = ", ".join(f.value for f in cls)
        raise InvalidConfigurationError(f"Unknown folder '{name}' (expected one of: {valid})")
