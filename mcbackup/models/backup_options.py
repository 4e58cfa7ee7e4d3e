"""Backup configuration model."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcbackup.core.scanner import scan_files
from mcbackup.errors import InvalidConfigurationError
from mcbackup.models.folder import Folder


def normalize_extension(ext: str) -> str:
    """'.DAT' → 'dat'"""
    return ext.strip().lstrip(".").lower()


@dataclass
class BackupConfiguration:
    """
    What to back up and where.

    Built by the caller before a run and only read while a backup is in
    progress. Paths are not checked here; a missing source folder just
    contributes no files.
    """

    source_root: Path
    folders: list[Folder]
    destination: Path
    compress: bool = False
    excluded_extensions: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.source_root = Path(self.source_root)
        self.destination = Path(self.destination)

        folders: list[Folder] = []
        for name in self.folders:
            folder = Folder.parse(name)
            if folder not in folders:
                folders.append(folder)
        self.folders = folders

        extensions: list[str] = []
        for ext in self.excluded_extensions:
            normalized = normalize_extension(ext)
            if normalized and normalized not in extensions:
                extensions.append(normalized)
        self.excluded_extensions = extensions

    # ── Paths ──

    @property
    def absolute_source_root(self) -> Path:
        return self.source_root.expanduser().absolute()

    def get_all_paths(self) -> list[Path]:
        """Absolute path of every selected folder, in selection order."""
        root = self.absolute_source_root
        return [folder.path_under(root) for folder in self.folders]

    def is_excluded(self, path: str | Path) -> bool:
        return normalize_extension(Path(path).suffix) in self.excluded_extensions

    # ── Enumeration ──

    def list_all_files(self) -> list[Path]:
        """All non-excluded files under the selected folders, recursively."""
        return scan_files(self).paths

    def compute_total_size(self) -> int:
        """Total bytes of ``list_all_files()``, re-read from disk."""
        return scan_files(self).total_size

    # ── Mutation (before a run only) ──

    def set_compress(self, compress: bool) -> None:
        self.compress = compress

    def add_excluded_extension(self, extension: str) -> None:
        normalized = normalize_extension(extension)
        if normalized and normalized not in self.excluded_extensions:
            self.excluded_extensions.append(normalized)

    def clone(self, **changes: Any) -> BackupConfiguration:
        """Independent copy, optionally with some fields replaced."""
        return dataclasses.replace(self, **changes)

    # ── Validation ──

    def validate(self) -> None:
        """Reject configurations that cannot produce a sensible backup."""
        if not self.folders:
            raise InvalidConfigurationError("No folders selected for backup")

        source = self.absolute_source_root.resolve()
        destination = self.destination.expanduser().absolute().resolve()
        if destination == source:
            raise InvalidConfigurationError(
                f"Destination is the same as the source root: {destination}"
            )
        for folder_path in self.get_all_paths():
            if destination.is_relative_to(folder_path.resolve()):
                raise InvalidConfigurationError(
                    f"Destination {destination} is inside backed-up folder {folder_path}"
                )
