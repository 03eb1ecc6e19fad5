"""Publish a list of records as a freshly created Notion database."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from cancellation import CancellationToken
from errors import FatalPublishError, PublishAborted
from models import FailedEntry, PublishOutcome, Record, RemoteDatabase
from notion_api import NotionAPIError, create_database, create_page
from schema import build_create_request, build_row_request, current_timestamp_label

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[Record], None]


def publish_table(
    records: Sequence[Record],
    *,
    api_key: str,
    page_id: str,
    on_progress: ProgressCallback | None = None,
    cancellation_token: CancellationToken | None = None,
    timestamp_label: str | None = None,
) -> PublishOutcome:
    """Create a new database under ``page_id`` and insert one row per record.

    Rows are inserted sequentially in input order. A failed row is recorded in
    ``failed_entries`` and the run continues; a failed database creation ends
    the run with FatalPublishError. The token is checked before every remote
    call, and a requested cancellation raises PublishAborted. A database that
    was already created is left in place.

    Args:
        records: Records to publish.
        api_key: Notion integration token.
        page_id: Parent page for the new database.
        on_progress: Called with each record after its row is inserted. If it
            raises, the record is reported as failed and the run continues.
        cancellation_token: Polled at every checkpoint; never reset here.
        timestamp_label: Text embedded in the database title. Defaults to the
            current local time.
    """
    token = cancellation_token or CancellationToken()
    _check_cancelled(token)

    label = timestamp_label if timestamp_label is not None else current_timestamp_label()
    request_body = build_create_request(page_id, label)

    _check_cancelled(token)
    LOGGER.info("Creating database under page_id=%s", page_id)
    try:
        response = create_database(api_key, request_body)
    except NotionAPIError as exc:
        LOGGER.error("Database creation failed: %s", exc)
        raise FatalPublishError(f"Failed to create Notion database: {exc}") from exc
    database = RemoteDatabase.from_response(response)
    LOGGER.info("Database created: %s", database.database_id)

    _check_cancelled(token)

    failed_entries: list[FailedEntry] = []
    for record in records:
        _check_cancelled(token)
        try:
            LOGGER.debug("Adding row: %s", record.name)
            create_page(api_key, build_row_request(database.database_id, record))
            if on_progress is not None:
                on_progress(record)
        except Exception as exc:  # broad by design: one bad row must not void the run
            LOGGER.warning("Failed to add item: %s. Error: %s", record.name, exc)
            failed_entries.append(FailedEntry(record=record, error=str(exc)))

    outcome = PublishOutcome(
        database_id=database.database_id,
        database_url=database.url,
        entries_added=len(records) - len(failed_entries),
        created_time=database.created_time,
        last_edited_time=database.last_edited_time,
        failed_entries=tuple(failed_entries),
    )
    LOGGER.info(
        "Table published. database_id=%s added=%s failed=%s",
        outcome.database_id,
        outcome.entries_added,
        len(outcome.failed_entries),
    )
    return outcome


def _check_cancelled(token: CancellationToken) -> None:
    if token.cancelled:
        LOGGER.info("Publish cancelled")
        raise PublishAborted()
