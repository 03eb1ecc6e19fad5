"""Request bodies for the exported Notion table."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from models import Record

DATABASE_TITLE_PREFIX = "Obsidian Table Export"

# Fixed column layout; not inferred from the records.
DATABASE_PROPERTIES: dict[str, dict[str, Any]] = {
    "name": {"type": "title", "title": {}},
    "link": {"type": "url", "url": {}},
    "tags": {"type": "multi_select", "multi_select": {}},
    "description": {"type": "rich_text", "rich_text": {}},
    "type": {"type": "select", "select": {}},
}


def current_timestamp_label() -> str:
    """Local time in the locale's date-time format, for the database title."""
    return datetime.now().strftime("%c")


def database_title(timestamp_label: str) -> str:
    return f"{DATABASE_TITLE_PREFIX} - {timestamp_label}"


def build_create_request(page_id: str, timestamp_label: str) -> dict[str, Any]:
    """Build the create-database body for a new table under ``page_id``."""
    return {
        "parent": {"page_id": page_id},
        "title": [{"type": "text", "text": {"content": database_title(timestamp_label)}}],
        "properties": copy.deepcopy(DATABASE_PROPERTIES),
    }


def build_row_request(database_id: str, record: Record) -> dict[str, Any]:
    """Build the create-page body that inserts ``record`` as one row."""
    return {
        "parent": {"database_id": database_id},
        "properties": _build_properties(record),
    }


def _build_properties(record: Record) -> dict[str, Any]:
    return {
        "name": _title_property(record.name),
        # Notion rejects empty URLs and option names; null leaves the cell blank.
        "link": {"url": record.link or None},
        "tags": {"multi_select": [{"name": tag} for tag in record.tags]},
        "description": _rich_text_property(record.description),
        "type": {"select": {"name": record.type} if record.type else None},
    }


def _title_property(text: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": text}}]}


def _rich_text_property(text: str) -> dict[str, Any]:
    if not text:
        return {"rich_text": []}
    return {"rich_text": [{"text": {"content": text}}]}
