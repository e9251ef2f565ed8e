"""Mapping between Google Tasks records and Logseq blocks.

A synced task is rendered as::

    LATER Buy milk
    DEADLINE: <2024-03-01>
    google-task-id:: abc123
    google-task-updated:: 2024-02-27T10:11:12.000Z
    ...

with up to two children, one holding the notes and one the links, each
tagged through ``google-task-context`` so later syncs can replace them without
touching children the user added by hand.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date

from logseq_gtasks.codec.dates import decode_deadline, format_date, parse_date
from logseq_gtasks.models.local import BlockDraft, LocalBlock, PropertyValue, UserConfig
from logseq_gtasks.models.remote import RemoteTask, RemoteTaskList

logger = logging.getLogger(__name__)

PROP_TASK_ID = "google-task-id"
PROP_LIST_ID = "google-task-list-id"
PROP_LIST = "google-task-list"
PROP_UPDATED = "google-task-updated"
PROP_LINK = "google-task-link"
PROP_HIDDEN = "google-task-hidden"
PROP_DELETED = "google-task-deleted"
PROP_COMPLETED = "google-task-completed"
PROP_CONTEXT = "google-task-context"

CONTEXT_NOTES = "notes"
CONTEXT_LINKS = "links"
MANAGED_CONTEXTS = frozenset({CONTEXT_NOTES, CONTEXT_LINKS})

DONE_MARKER = "DONE"
TASK_MARKERS = frozenset({"TODO", "LATER", "NOW", "DOING", "DONE", "WAIT", "WAITING", "CANCELED", "CANCELLED"})

_ANNOTATION_LINE = re.compile(r"^\s*(?:DEADLINE|SCHEDULED):\s*<[^>]*>\s*$")
_PROPERTY_LINE = re.compile(r"^\s*[A-Za-z0-9_][\w-]*::")
_PAGE_REF = re.compile(r"^\[\[(.*)\]\]$")


def task_link(task: RemoteTask) -> str:
    return task.web_view_link or f"https://tasks.google.com/task/{task.id}"


def encode(task_list: RemoteTaskList, task: RemoteTask, user_config: UserConfig) -> BlockDraft:
    """Render *task* as the block this system keeps in sync with it."""
    fmt = user_config.preferred_date_format
    marker = DONE_MARKER if task.is_completed else user_config.preferred_todo

    content = f"{marker} {task.title.strip()}"
    due = task.due_date
    if due is not None:
        content += f"\nDEADLINE: <{format_date(due, fmt)}>"

    properties: dict[str, PropertyValue] = {
        PROP_TASK_ID: task.id,
        PROP_LIST_ID: task_list.id,
        PROP_LIST: f"[[{task_list.title}]]",
        PROP_LINK: task_link(task),
    }
    if task.updated:
        properties[PROP_UPDATED] = task.updated
    if task.hidden and not task.is_completed:
        properties[PROP_HIDDEN] = "true"
    if task.deleted:
        properties[PROP_DELETED] = "true"
    completed = task.completed_date
    if completed is not None:
        properties[PROP_COMPLETED] = f"[[{format_date(completed, fmt)}]]"

    children: list[BlockDraft] = []
    notes = (task.notes or "").strip()
    if notes:
        children.append(BlockDraft(content=notes, properties={PROP_CONTEXT: CONTEXT_NOTES}))
    if task.links:
        rendered = json.dumps([link.model_dump(by_alias=True) for link in task.links], indent=2, ensure_ascii=False)
        children.append(
            BlockDraft(content=f"```json\n{rendered}\n```", properties={PROP_CONTEXT: CONTEXT_LINKS})
        )

    return BlockDraft(content=content, properties=properties, children=children)


def is_managed_child(block: LocalBlock) -> bool:
    return block.prop(PROP_CONTEXT) in MANAGED_CONTEXTS


def block_marker(block: LocalBlock) -> str | None:
    if block.marker:
        return block.marker.upper()
    first = block.content.split(maxsplit=1)
    if first and first[0] in TASK_MARKERS:
        return first[0]
    return None


def is_done(block: LocalBlock) -> bool:
    return block_marker(block) == DONE_MARKER


def derive_title(content: str) -> str:
    """The task title a block's content expresses.

    Drops deadline/scheduled annotation lines and ``key:: value`` property
    lines, then the leading task marker.
    """
    lines = [
        line for line in content.splitlines() if not _ANNOTATION_LINE.match(line) and not _PROPERTY_LINE.match(line)
    ]
    text = "\n".join(lines).strip()
    head, _, rest = text.partition(" ")
    if head in TASK_MARKERS:
        text = rest
    elif text in TASK_MARKERS:
        text = ""
    return text.strip()


def block_deadline(block: LocalBlock) -> date | None:
    if block.deadline is None:
        return None
    try:
        return decode_deadline(block.deadline)
    except ValueError:
        logger.debug("Ignoring unparseable deadline %r on block %s", block.deadline, block.id)
        return None


def completion_date(block: LocalBlock, date_format: str) -> date | None:
    """Date held by the completion property, written as a page reference."""
    raw = block.prop(PROP_COMPLETED)
    if not raw:
        return None
    match = _PAGE_REF.match(raw.strip())
    text = match.group(1) if match else raw
    try:
        return parse_date(text, date_format)
    except ValueError:
        logger.warning("Block %s has a completion date %r not in format %r", block.id, raw, date_format)
        return None
