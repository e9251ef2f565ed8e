"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version

from logseq_gtasks.config import DEFAULT_CONFIG_PATH


def _package_version() -> str:
    try:
        return version("logseq-gtasks")
    except PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logseq-gtasks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Pull Google Tasks into the Logseq graph")
    sync_parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to logseq-gtasks.json")
    sync_parser.add_argument("--dry-run", action="store_true", help="Plan only; write nothing on either side")
    sync_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    auth_parser = subparsers.add_parser("auth", help="Manage stored Google credentials")
    auth_subparsers = auth_parser.add_subparsers(dest="auth_command", required=True)

    receive_parser = auth_subparsers.add_parser("receive", help="Store a freshly issued token pair")
    receive_parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to logseq-gtasks.json")
    receive_parser.add_argument("--access-token", required=True, help="OAuth access token")
    receive_parser.add_argument(
        "--refresh-token",
        default=None,
        help="OAuth refresh token (the stored one is kept when omitted)",
    )
    receive_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    refresh_parser = auth_subparsers.add_parser("refresh", help="Exchange the refresh token for a new access token")
    refresh_parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to logseq-gtasks.json")
    refresh_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


__all__ = ["build_parser"]
