"""Application entry point — wires services and runs the command line.

Usage:
    mc-backup backup [FOLDER ...] [--source DIR] [--dest PATH] [--compress | --no-compress]
                     [--exclude EXT[,EXT...]] [--embed-metadata]
    mc-backup list [--dir DIR]

Examples:
    mc-backup backup saves mods --dest backups/out.zip --compress
    mc-backup backup saves --no-compress --exclude log,tmp
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from mcbackup.config import Config, get_config
from mcbackup.context import AppContext
from mcbackup.core.backup import BackupManager
from mcbackup.errors import BackupError
from mcbackup.logger import setup_logger
from mcbackup.models.folder import Folder
from mcbackup.utils import format_size, split_csv


def create_context(data_dir: Path | None = None) -> AppContext:
    """Wire all services and return an AppContext."""
    config = Config(data_dir) if data_dir else get_config()

    # Logger
    setup_logger(config.log_dir, level=config.log_level)

    return AppContext(config=config, backup_manager=BackupManager(config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mc-backup", description="Back up Minecraft data folders."
    )
    parser.add_argument("--data-dir", type=Path, help="settings and log directory")
    commands = parser.add_subparsers(dest="command", required=True)

    backup = commands.add_parser("backup", help="run a backup")
    backup.add_argument(
        "folders",
        nargs="*",
        metavar="FOLDER",
        help=f"folders to include ({', '.join(f.value for f in Folder)}); defaults from config",
    )
    backup.add_argument("--source", type=Path, help="Minecraft directory")
    backup.add_argument("--dest", type=Path, help="archive path (*.zip) or target directory")
    backup.add_argument(
        "--compress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="write a ZIP archive instead of a plain copy",
    )
    backup.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="EXT",
        help="file extension to skip (repeatable, comma-separated)",
    )
    backup.add_argument(
        "--embed-metadata",
        action="store_true",
        help="plain copy only: put backup_metadata.json inside the copied tree",
    )

    listing = commands.add_parser("list", help="list existing backups")
    listing.add_argument("--dir", type=Path, help="directory to inspect; defaults to backup_path")
    return parser


def run_backup(ctx: AppContext, args: argparse.Namespace) -> int:
    excluded = None
    if args.exclude is not None:
        excluded = [ext for raw in args.exclude for ext in split_csv(raw)]

    options = ctx.config.build_options(
        folders=args.folders,
        source_root=args.source,
        destination=args.dest,
        compress=args.compress,
        excluded_extensions=excluded,
    )
    result = ctx.backup_manager.run_backup(options, embed_metadata=args.embed_metadata)

    record = result.record
    print(
        f"{result.output_path}: {record.file_count} files, "
        f"{format_size(record.size_in_bytes)}"
    )
    return 0


def list_backups(ctx: AppContext, args: argparse.Namespace) -> int:
    results = ctx.backup_manager.list_backups(args.dir)
    if not results:
        print("No backups found.")
        return 0
    for result in results:
        record = result.record
        kind = "zip" if record.compress else "copy"
        print(
            f"{record.timestamp.isoformat(timespec='seconds')}  {kind:<4}  "
            f"{format_size(record.size_in_bytes):>10}  {record.file_count:>6} files  "
            f"{','.join(record.folders)}  {record.source_path} -> {result.output_path}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)
    ctx = create_context(args.data_dir)

    handlers = {"backup": run_backup, "list": list_backups}
    try:
        return handlers[args.command](ctx, args)
    except BackupError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
