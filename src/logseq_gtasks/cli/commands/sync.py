"""Sync command formatting."""

from __future__ import annotations

import argparse

from logseq_gtasks import Classification, SyncResult
from logseq_gtasks.cli.common import format_comma_or_none
from logseq_gtasks.cli.progress.rich import RichSyncProgress


def format_sync_summary(result: SyncResult) -> str:
    mode = "dry-run" if result.dry_run else "apply"
    created = result.counts.get(Classification.NEW, 0)
    updated = result.counts.get(Classification.REMOTE_CHANGED, 0)
    pushed = result.counts.get(Classification.LOCAL_CHANGED, 0)
    unchanged = result.counts.get(Classification.UNCHANGED, 0)
    skipped = result.counts.get(Classification.SKIP_DELETED, 0)

    lines = [
        "",
        f"logseq-gtasks - sync complete ({mode})",
        "",
        f"  Tasks:     {result.total_tasks} total",
    ]
    if created:
        lines.append(f"  Created:   {created}")
    if updated:
        lines.append(f"  Updated:   {updated}")
    if pushed:
        lines.append(f"  Pushed:    {pushed}")
    if skipped:
        lines.append(f"  Skipped:   {skipped} (deleted remotely)")
    if unchanged:
        lines.append(f"  Unchanged: {unchanged}")
    if not (created or updated or pushed):
        lines.append("  Status:    all tasks up to date")

    lines.append("")
    lines.append(f"  Pages:     {format_comma_or_none(result.pages_touched)}")

    if result.duplicates:
        lines.append("")
        lines.append(f"  Warning:   {len(result.duplicates)} task(s) linked to more than one block")
        for task_id, block_ids in sorted(result.duplicates.items()):
            lines.append(f"    {task_id}: {', '.join(block_ids)}")

    if result.dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)


async def run_sync(args: argparse.Namespace) -> SyncResult:
    import logseq_gtasks.cli as cli

    config = cli.load_config(args.config)

    if not args.verbose:
        with RichSyncProgress() as progress:
            result = await cli.TaskSync(config, progress=progress).sync(dry_run=args.dry_run)
    else:
        result = await cli.TaskSync(config).sync(dry_run=args.dry_run)

    print(cli._format_summary(result))
    return result


__all__ = ["format_sync_summary", "run_sync"]
