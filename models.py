"""Shared typed models for the publisher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from errors import FatalPublishError


@dataclass(frozen=True, slots=True)
class Record:
    """One publishable note, normalized from the vault."""

    name: str
    link: str = ""
    tags: tuple[str, ...] = ()
    description: str = ""
    type: str = ""


@dataclass(frozen=True, slots=True)
class RemoteDatabase:
    """The Notion database created for one publish run."""

    database_id: str
    url: str
    created_time: str
    last_edited_time: str

    @classmethod
    def from_response(cls, body: Any) -> RemoteDatabase:
        if not isinstance(body, dict) or not isinstance(body.get("id"), str):
            raise FatalPublishError(f"Unexpected Notion database response shape: {body}")
        return cls(
            database_id=body["id"],
            url=_as_str(body.get("url")),
            created_time=_as_str(body.get("created_time")),
            last_edited_time=_as_str(body.get("last_edited_time")),
        )


@dataclass(frozen=True, slots=True)
class FailedEntry:
    """A record whose row insert failed, with the reason."""

    record: Record
    error: str


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Summary of a completed (non-cancelled) publish run.

    ``failed_entries`` is the authoritative partial-failure report;
    ``entries_added`` is derived from it.
    """

    database_id: str
    database_url: str
    entries_added: int
    created_time: str
    last_edited_time: str
    failed_entries: tuple[FailedEntry, ...] = field(default_factory=tuple)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
