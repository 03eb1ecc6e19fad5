"""Persisted publisher settings: the Notion API key and the target page id."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

DEFAULT_SETTINGS_PATH = os.getenv("PUBLISH_SETTINGS_PATH", ".publish_table.json")

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settings:
    notion_api_key: str = ""
    notion_page_id: str = ""


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings: empty defaults, then environment, then the settings file.

    A missing file is fine. Values stored in the file win over the
    NOTION_API_KEY / NOTION_PAGE_ID environment variables.
    """
    settings = Settings(
        notion_api_key=os.getenv("NOTION_API_KEY", ""),
        notion_page_id=os.getenv("NOTION_PAGE_ID", ""),
    )

    stored = _read_file(Path(path or DEFAULT_SETTINGS_PATH))
    known = {f.name for f in fields(Settings)}
    overrides = {
        key: value for key, value in stored.items() if key in known and isinstance(value, str)
    }
    return replace(settings, **overrides)


def save_settings(settings: Settings, path: str | Path | None = None) -> None:
    _write_file(Path(path or DEFAULT_SETTINGS_PATH), asdict(settings))


def update_settings(
    path: str | Path | None = None,
    *,
    api_key: str | None = None,
    page_id: str | None = None,
) -> tuple[Settings, bool]:
    """Persist new credential values.

    Only the values already stored in the file and the ones passed here are
    written; credentials coming from the environment stay out of the file.
    Returns the resulting settings and whether either credential changed,
    which tells the caller to re-check access.
    """
    target = Path(path or DEFAULT_SETTINGS_PATH)
    current = load_settings(target)

    stored = _read_file(target)
    if api_key is not None:
        stored["notion_api_key"] = api_key
    if page_id is not None:
        stored["notion_page_id"] = page_id
    _write_file(target, stored)

    updated = load_settings(target)
    return updated, updated != current


def _write_file(path: Path, data: dict) -> None:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)
    LOGGER.info("Saved settings to %s", path)


def _read_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        raise RuntimeError(f"Could not read settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Settings file {path} must contain a JSON object")
    return data
