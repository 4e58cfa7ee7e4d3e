"""File scanner — enumerate the files a backup configuration selects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from mcbackup.errors import BackupIOError

if TYPE_CHECKING:
    from mcbackup.models.backup_options import BackupConfiguration


@dataclass
class ScannedFile:
    """A file selected for backup, sized at scan time."""

    path: Path
    relative_path: str  # POSIX path under source_root
    size: int = 0


@dataclass
class ScanResult:
    """Outcome of one scan; never reused across scans."""

    files: list[ScannedFile] = field(default_factory=list)

    @property
    def paths(self) -> list[Path]:
        return [f.path for f in self.files]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    @property
    def file_count(self) -> int:
        return len(self.files)


def scan_files(options: BackupConfiguration) -> ScanResult:
    """
    Walk every selected folder under the source root.

    Missing folders count as empty. Files whose extension is excluded
    are skipped. Each call reads the disk again.
    """
    root = options.absolute_source_root
    result = ScanResult()

    for folder_path in options.get_all_paths():
        if not folder_path.is_dir():
            logger.debug(f"Skipping missing folder: {folder_path}")
            continue

        try:
            candidates = sorted(folder_path.rglob("*"))
        except OSError as e:
            raise BackupIOError(f"Cannot read folder {folder_path}: {e}") from e

        for path in candidates:
            if not path.is_file() or options.is_excluded(path):
                continue
            try:
                size = path.stat().st_size
            except FileNotFoundError:
                logger.warning(f"File disappeared during scan: {path}")
                continue
            except OSError as e:
                raise BackupIOError(f"Cannot stat {path}: {e}") from e

            result.files.append(
                ScannedFile(
                    path=path,
                    relative_path=path.relative_to(root).as_posix(),
                    size=size,
                )
            )

    logger.debug(f"Scanned {result.file_count} file(s), {result.total_size} bytes under {root}")
    return result
