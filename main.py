"""CLI entrypoint: publish the link-aggregator notes of a vault as a Notion table."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from dotenv import load_dotenv

from cancellation import CancellationToken
from errors import CredentialError, is_cancellation
from models import PublishOutcome, Record
from notion_api import verify_access
from publisher import publish_table
from settings import Settings, load_settings, update_settings
from vault import collect_records


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Publish link-aggregator notes from a vault to a new Notion table")
    parser.add_argument("--vault", default=".", help="Path to the vault directory (default: current directory)")
    parser.add_argument("--settings", default=None, help="Settings file (default: PUBLISH_SETTINGS_PATH or .publish_table.json)")
    parser.add_argument("--api-key", default=None, help="Store a new Notion API key in the settings file")
    parser.add_argument("--page-id", default=None, help="Store a new target Notion page id in the settings file")
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Only verify that the API key can read the target page",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list the records that would be published, without API writes",
    )
    return parser.parse_args(argv)


def configure(
    settings_path: str | None = None,
    api_key: str | None = None,
    page_id: str | None = None,
) -> tuple[Settings, bool]:
    """Load (and optionally update) settings, then check the credentials once.

    A failed check is logged but does not stop the caller: a publish attempt
    with bad credentials fails on its own later.
    """
    if api_key is not None or page_id is not None:
        settings, changed = update_settings(settings_path, api_key=api_key, page_id=page_id)
        if changed:
            logging.info("Notion credentials changed; re-checking access")
    else:
        settings = load_settings(settings_path)
    return settings, check_credentials(settings)


def check_credentials(settings: Settings) -> bool:
    try:
        verify_access(settings.notion_api_key, settings.notion_page_id)
    except CredentialError as exc:
        logging.error("Invalid Notion API key: %s", exc)
        return False
    logging.info("Notion credentials OK for page_id=%s", settings.notion_page_id)
    return True


def format_outcome(outcome: PublishOutcome) -> list[str]:
    """Human-readable summary lines for a finished publish run."""
    lines = [
        f"Database URL: {outcome.database_url}",
        f"Entries Added: {outcome.entries_added}",
        f"Created: {outcome.created_time}",
        f"Last Edited: {outcome.last_edited_time}",
    ]
    for failed in outcome.failed_entries:
        lines.append(f"Failed: {failed.record.name}: {failed.error}")
    return lines


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl-C into a cooperative cancellation for the duration of the block."""

    def _handler(signum, frame) -> None:
        logging.info("Cancellation requested; stopping after the current request")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run(vault_path: str, settings: Settings, dry_run: bool) -> int:
    """Run one publish cycle and return the process exit status."""
    try:
        records = collect_records(vault_path)
    except RuntimeError as exc:
        logging.error("%s", exc)
        return 1
    logging.info("Collected %s records from %s", len(records), vault_path)

    if dry_run:
        for record in records:
            logging.info("[dry-run] Would publish: %s (%s) tags=%s", record.name, record.type, list(record.tags))
        return 0

    total = len(records)
    added = 0

    def on_progress(record: Record) -> None:
        nonlocal added
        added += 1
        logging.info("Added row %s/%s: %s", added, total, record.name)

    token = CancellationToken()
    try:
        with cancel_on_interrupt(token):
            outcome = publish_table(
                records,
                api_key=settings.notion_api_key,
                page_id=settings.notion_page_id,
                on_progress=on_progress,
                cancellation_token=token,
            )
    except Exception as exc:
        if is_cancellation(exc):
            logging.info("Publish cancelled after %s of %s rows", added, total)
            return 0
        logging.exception("Failed to publish table to Notion: %s", exc)
        return 1

    logging.info("Published table to Notion")
    for line in format_outcome(outcome):
        logging.info(line)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the publisher."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    try:
        settings, credentials_ok = configure(args.settings, api_key=args.api_key, page_id=args.page_id)
    except RuntimeError as exc:
        logging.error("%s", exc)
        return 1

    if args.check_only:
        return 0 if credentials_ok else 1
    return run(args.vault, settings, dry_run=args.dry_run)


if __name__ == "__main__":
    sys.exit(main())
