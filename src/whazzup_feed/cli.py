"""
Command-line interface for the whazzup feed pipeline.

This module provides the main CLI entry point with commands for:
- fetch: Download and decode the snapshot if the polling rules allow it
- json: Print the decoded participants of the last snapshot
- status: Show the mirrors announced in the status document
- config: Configuration management

Settings can also come from the environment (or a .env file):
WHAZZUP_APP_NAME, WHAZZUP_WORK_DIR and WHAZZUP_CREATE_JSON.
"""

import argparse
import dataclasses
import json
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .config import (
    DEFAULT_STATUS_URL,
    FreshnessPolicy,
    LoggingConfig,
    PipelineConfig,
    StorageConfig,
)
from .enums import TimeUnit
from .exceptions import WhazzupError
from .pipeline import SnapshotPipeline


DEFAULT_CONFIG_PATH = Path.home() / ".whazzup_feed" / "config.json"


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def create_default_config(
    app_name: str = "",
    work_dir: Optional[Path] = None,
    create_json: bool = False,
) -> PipelineConfig:
    """
    Create a default pipeline configuration.

    Args:
        app_name: Name sent to IVAO as User-Agent
        work_dir: Directory holding the persisted artifacts
        create_json: Also write the decoded JSON aggregate

    Returns:
        PipelineConfig with default settings
    """
    if work_dir is None:
        work_dir = Path("tmp")

    return PipelineConfig(
        app_name=app_name,
        status_url=DEFAULT_STATUS_URL,
        storage=StorageConfig(work_dir=work_dir),
        status_policy=FreshnessPolicy(24, TimeUnit.HOURS),
        snapshot_policy=FreshnessPolicy(5, TimeUnit.MINUTES),
        create_json=create_json,
        logging=LoggingConfig(level="info", output_format="text"),
    )


def _policy_from_dict(data: dict, default: FreshnessPolicy) -> FreshnessPolicy:
    return FreshnessPolicy(
        max_age=int(data.get("max_age", default.max_age)),
        unit=TimeUnit(data.get("unit", default.unit.value)),
    )


def load_config_from_file(config_path: Path) -> Optional[PipelineConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        PipelineConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        defaults = create_default_config()

        storage_data = data.get("storage", {})
        storage = StorageConfig(
            work_dir=Path(storage_data.get("work_dir", str(defaults.storage.work_dir))),
            status_file=storage_data.get("status_file", defaults.storage.status_file),
            snapshot_file=storage_data.get("snapshot_file", defaults.storage.snapshot_file),
            compressed_file=storage_data.get("compressed_file", defaults.storage.compressed_file),
            clean_file=storage_data.get("clean_file", defaults.storage.clean_file),
            json_file=storage_data.get("json_file", defaults.storage.json_file),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return PipelineConfig(
            app_name=data.get("app_name", ""),
            status_url=data.get("status_url", DEFAULT_STATUS_URL),
            storage=storage,
            status_policy=_policy_from_dict(data.get("status_policy", {}), defaults.status_policy),
            snapshot_policy=_policy_from_dict(data.get("snapshot_policy", {}), defaults.snapshot_policy),
            create_json=bool(data.get("create_json", False)),
            http_timeout=float(data.get("http_timeout", defaults.http_timeout)),
            feed_encoding=data.get("feed_encoding", defaults.feed_encoding),
            logging=logging_config,
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except OSError as e:
        print(f"Error reading config file: {e}", file=sys.stderr)
        return None


def save_config_to_file(config: PipelineConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: Configuration to save
        config_path: Path to the configuration file

    Returns:
        True if successful, False otherwise
    """
    data = {
        "app_name": config.app_name,
        "status_url": config.status_url,
        "storage": {
            "work_dir": str(config.storage.work_dir),
            "status_file": config.storage.status_file,
            "snapshot_file": config.storage.snapshot_file,
            "compressed_file": config.storage.compressed_file,
            "clean_file": config.storage.clean_file,
            "json_file": config.storage.json_file,
        },
        "status_policy": {
            "max_age": config.status_policy.max_age,
            "unit": config.status_policy.unit.value,
        },
        "snapshot_policy": {
            "max_age": config.snapshot_policy.max_age,
            "unit": config.snapshot_policy.unit.value,
        },
        "create_json": config.create_json,
        "http_timeout": config.http_timeout,
        "feed_encoding": config.feed_encoding,
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return True
    except OSError as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def resolve_config(args: argparse.Namespace) -> Optional[PipelineConfig]:
    """
    Build the effective configuration for a command.

    Precedence: command line flags, then environment, then config file,
    then defaults.
    """
    load_dotenv()

    config = None
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None
    if config is None:
        config = create_default_config()

    overrides = {}
    app_name = getattr(args, "app_name", None) or os.getenv("WHAZZUP_APP_NAME")
    if app_name:
        overrides["app_name"] = app_name

    work_dir = getattr(args, "work_dir", None) or os.getenv("WHAZZUP_WORK_DIR")
    if work_dir:
        overrides["storage"] = dataclasses.replace(config.storage, work_dir=Path(work_dir))

    create_json = _bool_env("WHAZZUP_CREATE_JSON", config.create_json)
    if getattr(args, "json", False):
        create_json = True
    overrides["create_json"] = create_json

    if getattr(args, "verbose", False):
        overrides["logging"] = dataclasses.replace(config.logging, level="debug")

    return dataclasses.replace(config, **overrides)


def cmd_fetch(args: argparse.Namespace) -> int:
    """Handle the 'fetch' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    try:
        with SnapshotPipeline(config) as pipeline:
            result = pipeline.fetch_snapshot(args.target)
    except WhazzupError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if not result.refreshed:
        print(f"Snapshot at {result.snapshot_path} is still fresh, nothing downloaded.")
        return 0

    print(f"Snapshot written to {result.snapshot_path}")
    print(f"  Participant lines: {result.clean_lines}")
    for client_type, count in sorted(result.counts.items()):
        print(f"  {client_type}: {count}")
    if result.skipped:
        print(f"  Skipped malformed lines: {result.skipped}")
    return 0


def cmd_json(args: argparse.Namespace) -> int:
    """Handle the 'json' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    try:
        with SnapshotPipeline(config) as pipeline:
            output = pipeline.get_decoded_json()
    except WhazzupError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if output is None:
        print("No clean snapshot available. Run 'fetch' first.", file=sys.stderr)
        return 1

    print(output)
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Handle the 'status' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    try:
        with SnapshotPipeline(config) as pipeline:
            document = pipeline.status_document
            refreshed = pipeline.status_refreshed
    except WhazzupError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(f"Status document: {config.storage.status_path}")
    print(f"  Refreshed now: {refreshed}")
    for url in document.gz_urls:
        print(f"  gzip: {url}")
    for url in document.plain_urls:
        print(f"  plain: {url}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  App name: {config.app_name}")
        print(f"  Status URL: {config.status_url}")
        print(f"  Work dir: {config.storage.work_dir}")
        print(f"  Status max age: {config.status_policy.max_age} {config.status_policy.unit.value}")
        print(f"  Snapshot min age: {config.snapshot_policy.max_age} {config.snapshot_policy.unit.value}")
        print(f"  Create JSON: {config.create_json}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = create_default_config(app_name=args.app_name or "")
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1
        if not config.app_name.strip():
            print("Error: app_name is required by IVAO and must not be empty", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--app-name", "-a",
        help="Application name sent to IVAO (overrides WHAZZUP_APP_NAME)",
    )
    parser.add_argument(
        "--work-dir", "-w",
        help="Directory for downloaded artifacts (overrides WHAZZUP_WORK_DIR)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="whazzup-feed",
        description="Polite downloader and decoder for the IVAO whazzup feed",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'fetch' command
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Download the snapshot if it is old enough",
    )
    fetch_parser.add_argument(
        "--target", "-t",
        help="Where to store the raw snapshot",
    )
    fetch_parser.add_argument(
        "--json",
        action="store_true",
        help="Also write the decoded JSON aggregate",
    )
    _add_common_arguments(fetch_parser)
    fetch_parser.set_defaults(func=cmd_fetch)

    # 'json' command
    json_parser = subparsers.add_parser(
        "json",
        help="Print decoded participants of the last snapshot",
    )
    _add_common_arguments(json_parser)
    json_parser.set_defaults(func=cmd_json)

    # 'status' command
    status_parser = subparsers.add_parser(
        "status",
        help="Show the snapshot mirrors from the status document",
    )
    _add_common_arguments(status_parser)
    status_parser.set_defaults(func=cmd_status)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--app-name", "-a",
        help="Application name for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
