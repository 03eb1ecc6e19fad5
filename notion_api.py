"""Notion REST API calls used by the table publisher."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import requests

from errors import CredentialError, PublishError

NOTION_API_BASE_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"

LOGGER = logging.getLogger(__name__)


class NotionAPIError(PublishError):
    """Raised when a Notion request fails or returns a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def verify_access(api_key: str, page_id: str) -> None:
    """Check that ``api_key`` can read the page identified by ``page_id``.

    Every failure mode (bad key, bad page id, network error, unexpected body)
    is reported as the same CredentialError.
    """
    try:
        response = requests.get(
            f"{NOTION_API_BASE_URL}/pages/{page_id}",
            headers=_headers(api_key),
            timeout=_request_timeout(),
        )
        if response.status_code != 200:
            raise CredentialError(f"Page lookup returned HTTP {response.status_code}")
        body = response.json()
        if not isinstance(body, dict):
            raise CredentialError("Page lookup returned an unexpected body")
    except (requests.RequestException, ValueError, PublishError) as exc:
        LOGGER.error("Notion credential check failed for page_id=%s: %s", page_id, exc)
        raise CredentialError("Invalid Notion API key or page ID") from exc

    LOGGER.debug("Notion page reachable: id=%s", body.get("id", page_id))


def create_database(api_key: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Create a database under a page and return the response body."""
    response = _request(
        method="POST",
        url=f"{NOTION_API_BASE_URL}/databases",
        api_key=api_key,
        json_payload=payload,
    )
    return _json_body(response)


def create_page(api_key: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Create one page (a database row) and return the response body."""
    response = _request(
        method="POST",
        url=f"{NOTION_API_BASE_URL}/pages",
        api_key=api_key,
        json_payload=payload,
    )
    return _json_body(response)


def _headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Notion-Version": NOTION_VERSION,
        "Content-Type": "application/json",
    }


def _request_timeout() -> float | None:
    # Unset means no timeout: a hung call hangs the run.
    raw = os.getenv("NOTION_TIMEOUT_SECONDS")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise NotionAPIError(f"NOTION_TIMEOUT_SECONDS must be a number of seconds, got {raw!r}") from exc


def _request(
    *,
    method: str,
    url: str,
    api_key: str,
    json_payload: dict[str, Any] | None = None,
) -> requests.Response:
    """Send a single Notion request. No retries."""
    try:
        response = requests.request(
            method=method,
            url=url,
            headers=_headers(api_key),
            json=json_payload,
            timeout=_request_timeout(),
        )
        response.raise_for_status()
        return response
    except requests.HTTPError as exc:
        status_code = exc.response.status_code if exc.response is not None else None
        raise NotionAPIError(
            f"Notion API request failed: {exc} {_error_text(exc.response)}".rstrip(),
            status_code=status_code,
        ) from exc
    except requests.RequestException as exc:
        raise NotionAPIError(f"Notion API request failed: {exc}") from exc


def _error_text(response: requests.Response | None) -> str:
    if response is None:
        return ""
    try:
        return json.dumps(response.json())
    except ValueError:
        return response.text


def _json_body(response: requests.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise NotionAPIError(
            f"Notion API returned a non-JSON body: {response.text[:200]}",
            status_code=response.status_code,
        ) from exc
    if not isinstance(body, dict):
        raise NotionAPIError(
            f"Unexpected Notion response shape: {body}", status_code=response.status_code
        )
    return body
