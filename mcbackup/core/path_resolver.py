"""Platform paths — default Minecraft location and portable path placeholders."""

from __future__ import annotations

import os
import platform
from pathlib import Path


def _appdata_dir() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def default_minecraft_dir() -> Path:
    """Return the launcher's default ``.minecraft`` directory for this OS."""
    system = platform.system()
    if system == "Windows":
        return _appdata_dir() / ".minecraft"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "minecraft"
    return Path.home() / ".minecraft"


def _resolve_placeholders() -> dict[str, Path]:
    """Build the placeholder-to-path mapping for the current system."""
    mapping = {"${HOME}": Path.home()}
    if platform.system() == "Windows":
        mapping["${APPDATA}"] = _appdata_dir()
        mapping["${LOCALAPPDATA}"] = Path(
            os.environ.get("LOCALAPPDATA", str(Path.home() / "AppData" / "Local"))
        )
    return mapping


def to_portable_path(path: str | Path) -> str:
    """Convert an absolute path to a portable path string with placeholders."""
    path_str = str(Path(path).expanduser().resolve())
    mapping = _resolve_placeholders()
    # Longest match wins
    sorted_items = sorted(mapping.items(), key=lambda x: len(str(x[1])), reverse=True)
    for placeholder, resolved in sorted_items:
        resolved_str = str(resolved.resolve())
        if path_str == resolved_str or path_str.startswith(resolved_str + os.sep):
            return placeholder + path_str[len(resolved_str) :]
    return path_str


def from_portable_path(portable: str) -> Path:
    """Convert a portable path string back to an absolute Path."""
    mapping = _resolve_placeholders()
    for placeholder, resolved in mapping.items():
        if portable.startswith(placeholder):
            return resolved.resolve() / portable[len(placeholder) :].lstrip("/\\")
    return Path(portable)
