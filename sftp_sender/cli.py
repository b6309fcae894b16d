"""Command-line argument parsing for the SFTP sender."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .config import DEFAULT_CONFIG_PATH


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sftpsender",
        description="Upload/download files over SFTP using credentials from a YAML config",
    )
    parser.add_argument("--upload", type=str, help="Local file/directory to upload")
    parser.add_argument("--download", type=str, help="Remote file/directory to download")
    parser.add_argument(
        "--ip",
        type=str,
        help="VPS IP address or name. Optionally include a path: IP:/path or name:/path. "
        "With --autosend, '*' is replaced by worker<N>",
    )
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH, help="Path to config file")
    parser.add_argument("--silent", action="store_true", help="Silent mode (no banner)")
    parser.add_argument("--version", action="store_true", help="Print the version of the tool and exit")
    parser.add_argument("--log-file", type=str, help="Also write log output to this file")

    # autosend
    parser.add_argument(
        "--autosend",
        type=str,
        help="Send a numbered file sequence to workers. Accepts ranges (e.g. 21-27) "
        "or comma-separated numbers (e.g. 21,27)",
    )
    parser.add_argument("--ignore", type=str, default="", help="Comma-separated worker numbers to exclude from --autosend")
    parser.add_argument("--max-workers", type=int, help="Parallel uploads in --autosend mode (default: config or 1)")
    parser.add_argument("--dry-run", action="store_true", help="With --autosend: print the plan without uploading")
    parser.add_argument("--report", type=str, help="With --autosend: write the upload summary as JSON to this path")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.version:
        return
    if args.autosend and args.download:
        parser.error("--autosend can only be used with --upload, not with --download")
    if args.ignore and not args.autosend:
        parser.error("--ignore requires --autosend")
    if not args.ip:
        parser.error("IP address or VPS name is required. Use --ip flag")
    if bool(args.upload) == bool(args.download):
        parser.error("You must specify either --upload or --download (but not both)")
    if args.max_workers is not None and args.max_workers < 1:
        parser.error("--max-workers must be >= 1")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)
    return args


__all__ = ["build_parser", "validate_args", "parse_args"]
