"""Command-line interface for logseq-gtasks."""

from __future__ import annotations

import asyncio
import logging as logging

from logseq_gtasks import TaskSync as TaskSync
from logseq_gtasks import load_config as load_config
from logseq_gtasks.cli.app import main as main
from logseq_gtasks.cli.commands import auth as auth_command
from logseq_gtasks.cli.commands import sync as sync_command
from logseq_gtasks.cli.parser import build_parser as build_parser

_format_summary = sync_command.format_sync_summary

_run_sync = sync_command.run_sync
_run_receive = auth_command.run_receive
_run_refresh = auth_command.run_refresh
