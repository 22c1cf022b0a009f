"""Lakecat CLI entry points.
This module exposes reconciliation and catalog inspection commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.reconcile_command import (
    add_data_key_arguments,
    add_reconcile_command,
    run_reconcile_command,
)
from core.config import LakecatConfig
from core.errors import LakecatError
from core.types import DataKey
from reconcile.client import LakecatClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="lakecat", description="Lakecat catalog CLI")
    parser.add_argument("--data-root", help="Override LAKECAT_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_reconcile_command(subparsers)
    _add_versions_command(subparsers)
    _add_load_catalog_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Lakecat CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root)
        if args.command == "reconcile":
            return run_reconcile_command(client, args)
        if args.command == "versions":
            return _run_versions_command(client, args)
        if args.command == "load-catalog":
            return _run_load_catalog_command(client, args)
    except LakecatError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> LakecatClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = LakecatConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return LakecatClient(config)


def _run_versions_command(client: LakecatClient, args: argparse.Namespace) -> int:
    """Handle versions command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    data_key = DataKey(
        namespace=args.namespace.strip(),
        definition_name=args.definition.strip(),
        format_usage=args.usage.strip(),
        format_file_type=args.file_type.strip(),
        format_version=args.format_version,
        partition_value=args.partition_value.strip(),
        sub_partition_values=tuple(value.strip() for value in args.sub_partition_value or ()),
    )
    for record in client.list_versions(data_key):
        directory = record.storage_units[0].directory_path if record.storage_units else "-"
        print(
            f"{record.data_version}\t"
            f"{record.status}\t"
            f"{'latest' if record.latest_version else '-'}\t"
            f"{directory}"
        )
    return 0


def _run_load_catalog_command(client: LakecatClient, args: argparse.Namespace) -> int:
    """Handle load-catalog command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    seed = client.load_catalog_seed(args.seed)
    print(f"formats={len(seed.formats)}")
    print(f"storages={len(seed.storages)}")
    return 0


def _add_versions_command(subparsers: Any) -> None:
    """Register versions subcommand."""
    parser = subparsers.add_parser("versions", help="List registered data versions")
    add_data_key_arguments(parser)


def _add_load_catalog_command(subparsers: Any) -> None:
    """Register load-catalog subcommand."""
    parser = subparsers.add_parser(
        "load-catalog",
        help="Import formats and storages from a YAML seed file",
    )
    parser.add_argument("seed", help="Path to catalog seed YAML")
