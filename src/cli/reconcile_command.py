"""Reconcile command wiring for Lakecat CLI."""

from __future__ import annotations

import argparse
import json
from typing import Any

from core.config import parse_probe_timeout
from core.types import ReconcileRequest
from reconcile.client import LakecatClient
from reconcile.response_payload import response_to_payload


def add_reconcile_command(subparsers: Any) -> None:
    """Register reconcile subcommand."""
    parser = subparsers.add_parser(
        "reconcile",
        help="Register data present in S3 but missing from the catalog as INVALID",
    )
    add_data_key_arguments(parser)
    parser.add_argument("--storage", required=True, help="Storage name to reconcile against")
    parser.add_argument("--timeout", help="Storage probe deadline in seconds")


def run_reconcile_command(client: LakecatClient, args: argparse.Namespace) -> int:
    """Execute reconciliation and print the JSON response."""
    request = ReconcileRequest(
        namespace=args.namespace,
        definition_name=args.definition,
        format_usage=args.usage,
        format_file_type=args.file_type,
        format_version=args.format_version,
        partition_value=args.partition_value,
        sub_partition_values=tuple(args.sub_partition_value)
        if args.sub_partition_value
        else None,
        storage_name=args.storage,
    )
    response = client.invalidate_unregistered(
        request,
        timeout_seconds=parse_probe_timeout(args.timeout),
    )
    print(json.dumps(response_to_payload(response), indent=2))
    return 0


def add_data_key_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the arguments identifying business object data."""
    parser.add_argument("--namespace", required=True, help="Namespace code")
    parser.add_argument("--definition", required=True, help="Business object definition name")
    parser.add_argument("--usage", required=True, help="Business object format usage")
    parser.add_argument("--file-type", required=True, help="Business object format file type")
    parser.add_argument(
        "--format-version",
        type=int,
        required=True,
        help="Business object format version",
    )
    parser.add_argument("--partition-value", required=True, help="Primary partition value")
    parser.add_argument(
        "--sub-partition-value",
        action="append",
        help="Sub-partition value; repeat up to four times in order",
    )
