"""Application configuration — JSON-based, with file locking and batch update support."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from mcbackup.core.path_resolver import default_minecraft_dir
from mcbackup.errors import InvalidConfigurationError
from mcbackup.models.backup_options import BackupConfiguration
from mcbackup.models.folder import Folder
from mcbackup.utils import split_csv

_instance: "Config | None" = None

# Default data directory
_DEFAULT_DATA_DIR = Path.home() / "Documents" / "MinecraftBackup"


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based application configuration with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "minecraft_path": "",
        "backup_path": "",
        "folders": ["saves"],
        "compress": True,
        "excluded_extensions": [],
        "log_level": "INFO",
    }

    def __init__(self, data_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = data_dir or _DEFAULT_DATA_DIR
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._defer_save = False
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        if self._defer_save:
            return
        with self._lock:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp_path.exists():
                    tmp_path.unlink(missing_ok=True)

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
            self._save()

    # ── Update ──

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # ── Typed properties ──

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def log_dir(self) -> Path:
        return self._dir / "logs"

    @property
    def log_level(self) -> str:
        return str(self._data.get("log_level", "INFO")).upper()

    @property
    def minecraft_path(self) -> Path:
        raw = self._data.get("minecraft_path", "")
        return Path(raw).expanduser() if raw else default_minecraft_dir()

    @minecraft_path.setter
    def minecraft_path(self, value: Path | None) -> None:
        self.set("minecraft_path", str(value) if value else "")

    @property
    def backup_path(self) -> Path:
        raw = self._data.get("backup_path", "")
        return Path(raw).expanduser() if raw else self._dir / "backups"

    @backup_path.setter
    def backup_path(self, value: Path | None) -> None:
        self.set("backup_path", str(value) if value else "")

    @property
    def default_folders(self) -> list[Folder]:
        folders: list[Folder] = []
        for name in self._data.get("folders", []):
            try:
                folders.append(Folder.parse(name))
            except InvalidConfigurationError as e:
                logger.warning(f"Ignoring configured folder: {e}")
        return folders

    @default_folders.setter
    def default_folders(self, value: list[Folder]) -> None:
        self.set("folders", [Folder.parse(f).value for f in value])

    @property
    def compress(self) -> bool:
        return bool(self._data.get("compress", True))

    @compress.setter
    def compress(self, value: bool) -> None:
        self.set("compress", value)

    @property
    def excluded_extensions(self) -> list[str]:
        return split_csv(self._data.get("excluded_extensions", []))

    @excluded_extensions.setter
    def excluded_extensions(self, value: list[str]) -> None:
        self.set("excluded_extensions", list(value))

    # ── Backup options ──

    def build_options(
        self,
        folders: list[Folder | str] | None = None,
        source_root: Path | None = None,
        destination: Path | None = None,
        compress: bool | None = None,
        excluded_extensions: list[str] | None = None,
    ) -> BackupConfiguration:
        """
        Build a ``BackupConfiguration`` from stored defaults plus overrides.

        Without an explicit destination, compressed backups land in
        ``backup_path`` (one archive per run) and plain copies mirror into
        ``backup_path / "minecraft"``.
        """
        use_compress = self.compress if compress is None else compress
        if destination is None:
            destination = self.backup_path if use_compress else self.backup_path / "minecraft"
        return BackupConfiguration(
            source_root=source_root or self.minecraft_path,
            folders=list(folders) if folders else list(self.default_folders),
            destination=destination,
            compress=use_compress,
            excluded_extensions=(
                self.excluded_extensions if excluded_extensions is None else excluded_extensions
            ),
        )
