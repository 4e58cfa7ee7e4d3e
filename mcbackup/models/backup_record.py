"""Backup record model — metadata written alongside (or into) each backup."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mcbackup.core.path_resolver import from_portable_path, to_portable_path
from mcbackup.errors import BackupIOError, SerializationError

if TYPE_CHECKING:
    from mcbackup.models.backup_options import BackupConfiguration

METADATA_ENTRY_NAME = "backup_metadata.json"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


@dataclass
class BackupRecord:
    """One backup run, snapshotted after enumeration."""

    timestamp: datetime
    size_in_bytes: int
    file_count: int = 0
    folders: list[str] = field(default_factory=list)
    compress: bool = False
    excluded_extensions: list[str] = field(default_factory=list)
    source_root: str = ""  # Portable format with ${HOME} etc.
    destination: str = ""
    json_size_in_bytes: int = 0  # Not serialized; known after write_json()

    @classmethod
    def create(
        cls,
        options: BackupConfiguration,
        size_in_bytes: int,
        file_count: int = 0,
    ) -> BackupRecord:
        return cls(
            timestamp=datetime.now(tz=timezone.utc),
            size_in_bytes=size_in_bytes,
            file_count=file_count,
            folders=[folder.value for folder in options.folders],
            compress=options.compress,
            excluded_extensions=list(options.excluded_extensions),
            source_root=to_portable_path(options.absolute_source_root),
            destination=str(options.destination.expanduser().absolute()),
        )

    @property
    def stamp(self) -> str:
        return self.timestamp.strftime(TIMESTAMP_FORMAT)

    @property
    def source_path(self) -> Path:
        """``source_root`` resolved for this machine."""
        return from_portable_path(self.source_root)

    # ── Serialization ──

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "size_in_bytes": self.size_in_bytes,
            "file_count": self.file_count,
            "folders": list(self.folders),
            "compress": self.compress,
            "excluded_extensions": list(self.excluded_extensions),
            "source_root": self.source_root,
            "destination": self.destination,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackupRecord:
        try:
            return cls(
                timestamp=datetime.fromisoformat(data["timestamp"]),
                size_in_bytes=int(data["size_in_bytes"]),
                file_count=int(data.get("file_count", 0)),
                folders=list(data.get("folders", [])),
                compress=bool(data.get("compress", False)),
                excluded_extensions=list(data.get("excluded_extensions", [])),
                source_root=data.get("source_root", ""),
                destination=data.get("destination", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Malformed backup metadata: {e}") from e

    def to_json(self) -> str:
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize backup metadata: {e}") from e

    @classmethod
    def from_json(cls, text: str | bytes) -> BackupRecord:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Backup metadata is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError("Backup metadata must be a JSON object")
        return cls.from_dict(data)

    # ── Files ──

    def default_json_path(self) -> Path:
        """Sidecar path next to the destination: ``<dest>_<stamp>.json``."""
        destination = Path(self.destination).expanduser().absolute()
        return destination.parent / f"{destination.name}_{self.stamp}.json"

    def _unused_json_path(self) -> Path:
        """``default_json_path()``, suffixed ``_1``, ``_2`` ... if already taken."""
        base = self.default_json_path()
        candidate = base
        counter = 1
        while candidate.exists():
            candidate = base.with_name(f"{base.stem}_{counter}{base.suffix}")
            counter += 1
        return candidate

    def write_json(self, path: Path | None = None) -> Path:
        """Write the record and learn its on-disk size."""
        target = path or self._unused_json_path()
        text = self.to_json()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                f.write(text)
            self.json_size_in_bytes = target.stat().st_size
        except OSError as e:
            raise BackupIOError(f"Cannot write backup metadata to {target}: {e}") from e
        return target

    @classmethod
    def load_json(cls, path: Path) -> BackupRecord:
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
            json_size = Path(path).stat().st_size
        except OSError as e:
            raise BackupIOError(f"Cannot read backup metadata {path}: {e}") from e
        record = cls.from_json(text)
        record.json_size_in_bytes = json_size
        return record
