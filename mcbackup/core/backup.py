"""Backup manager — plain mirror copies or ZIP archives with JSON metadata."""

from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from mcbackup.core.scanner import ScanResult, scan_files
from mcbackup.errors import BackupError, BackupIOError
from mcbackup.models.backup_record import METADATA_ENTRY_NAME, BackupRecord
from mcbackup.utils import format_size

if TYPE_CHECKING:
    from mcbackup.config import Config
    from mcbackup.models.backup_options import BackupConfiguration


@dataclass
class BackupResult:
    """Result of a backup run (or a backup found on disk)."""

    record: BackupRecord
    output_path: Path
    meta_path: Path | None = None  # None when metadata only lives inside the archive
    files_written: int = 0


class BackupManager:
    """
    Runs backups for a ``BackupConfiguration``.

    Plain mode mirrors the selected files under ``destination``; compressed
    mode writes one ZIP holding the files plus ``backup_metadata.json``.
    Nothing is rolled back on failure: files already copied stay on disk.
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    @property
    def backup_root(self) -> Path:
        return self._config.backup_path

    def run_backup(
        self, options: BackupConfiguration, embed_metadata: bool = False
    ) -> BackupResult:
        """Dispatch on ``options.compress``; ``embed_metadata`` only affects plain copies."""
        if options.compress:
            return self.zip_backup(options)
        return self.plain_copy(options, embed_metadata=embed_metadata)

    # ── Plain copy ──

    def plain_copy(
        self, options: BackupConfiguration, embed_metadata: bool = False
    ) -> BackupResult:
        """
        Copy every selected file into a tree mirroring ``source_root``.

        The metadata record goes next to the destination directory unless
        ``embed_metadata`` puts it at the top of the mirrored tree.
        """
        options.validate()
        scan = scan_files(options)
        record = BackupRecord.create(options, scan.total_size, scan.file_count)
        dest_root = options.destination
        try:
            dest_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupIOError(f"Cannot create destination {dest_root}: {e}") from e

        logger.info(
            f"Copying {scan.file_count} file(s) ({format_size(scan.total_size)}) to {dest_root}"
        )
        for scanned in scan.files:
            self._copy_file(scanned.path, dest_root / scanned.relative_path)

        meta_target = dest_root / METADATA_ENTRY_NAME if embed_metadata else None
        meta_path = record.write_json(meta_target)

        logger.info(f"Created plain backup at {dest_root} ({scan.file_count} files)")
        return BackupResult(
            record=record,
            output_path=dest_root,
            meta_path=meta_path,
            files_written=scan.file_count,
        )

    @staticmethod
    def _copy_file(source: Path, target: Path) -> None:
        """Copy one file via a temporary sibling, then rename over the target."""
        tmp_path: Path | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # mkstemp never reuses an existing name, so no copied file is clobbered
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            os.close(fd)
            tmp_path = Path(tmp_name)
            shutil.copy2(source, tmp_path)
            tmp_path.replace(target)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise BackupIOError(f"Failed to copy {source} to {target}: {e}") from e
        logger.debug(f"Copied {source} -> {target}")

    # ── ZIP ──

    def zip_backup(self, options: BackupConfiguration) -> BackupResult:
        """Write all selected files plus the metadata record into one ZIP."""
        options.validate()
        scan = scan_files(options)
        record = BackupRecord.create(options, scan.total_size, scan.file_count)
        archive_path = self.archive_path_for(options.destination, record)
        tmp_path = archive_path.with_name(archive_path.name + ".tmp")

        logger.info(
            f"Compressing {scan.file_count} file(s) ({format_size(scan.total_size)}) "
            f"into {archive_path}"
        )
        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            self._write_zip(scan, record, tmp_path)
            tmp_path.replace(archive_path)
        except OSError as e:
            raise BackupIOError(f"Failed to write archive {archive_path}: {e}") from e
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        logger.info(
            f"Created backup: {archive_path.name} "
            f"({format_size(archive_path.stat().st_size)} compressed)"
        )
        return BackupResult(
            record=record,
            output_path=archive_path,
            files_written=scan.file_count,
        )

    @staticmethod
    def archive_path_for(destination: Path, record: BackupRecord) -> Path:
        """``*.zip`` destinations are used as-is; anything else is a directory."""
        if destination.suffix.lower() == ".zip":
            return destination
        return destination / f"minecraft_backup_{record.stamp}.zip"

    @staticmethod
    def _write_zip(scan: ScanResult, record: BackupRecord, zip_path: Path) -> None:
        with tempfile.TemporaryDirectory(prefix="mcbackup_") as tmp_dir:
            meta_file = record.write_json(Path(tmp_dir) / METADATA_ENTRY_NAME)
            with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
                for scanned in scan.files:
                    zf.write(scanned.path, scanned.relative_path)
                zf.write(meta_file, METADATA_ENTRY_NAME)

    # ── Listing ──

    def list_backups(self, directory: Path | None = None) -> list[BackupResult]:
        """List backups in a directory, newest first."""
        root = directory or self.backup_root
        if not root.is_dir():
            return []

        results: list[BackupResult] = []
        for meta_file in root.glob("*.json"):
            try:
                record = BackupRecord.load_json(meta_file)
            except (BackupError, OSError) as e:
                logger.warning(f"Skipping malformed backup metadata: {meta_file}: {e}")
                continue
            results.append(
                BackupResult(
                    record=record,
                    output_path=Path(record.destination),
                    meta_path=meta_file,
                    files_written=record.file_count,
                )
            )

        for zip_file in root.glob("*.zip"):
            try:
                with zipfile.ZipFile(zip_file) as zf:
                    record = BackupRecord.from_json(zf.read(METADATA_ENTRY_NAME))
            except (BackupError, OSError, KeyError, zipfile.BadZipFile) as e:
                logger.warning(f"Skipping archive without readable metadata: {zip_file}: {e}")
                continue
            results.append(
                BackupResult(
                    record=record,
                    output_path=zip_file,
                    files_written=record.file_count,
                )
            )

        results.sort(key=lambda r: r.record.timestamp, reverse=True)
        return results
