"""Operator-triggered calls: connection test, handshake, ready list and publish.

All of them are best effort. Failures come back as notices or messages, never
as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal

from contentpulse_sync import __version__
from contentpulse_sync.boundary.auth import API_KEY_HEADER
from contentpulse_sync.boundary.handlers import ROUTE_NAMESPACE, Request
from contentpulse_sync.domain.errors import AuthenticationError, ContentPulseError

if TYPE_CHECKING:
    from contentpulse_sync.adapters.contentpulse import ContentPulseClient
    from contentpulse_sync.boundary.handlers import IngestionBoundary

log = getLogger(__name__)

MIN_API_VERSION: Final[str] = "1.0.0"
READY_STATUSES: Final[frozenset[str]] = frozenset({"draft", "review", "published", "scheduled"})
READY_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M"
MISSING_KEY_MESSAGE: Final[str] = "Please save your settings API key first."

NoticeType = Literal["success", "error"]


@dataclass(frozen=True, slots=True)
class Notice:
    type: NoticeType
    message: str

    @property
    def ok(self) -> bool:
        return self.type == "success"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True, slots=True)
class ReadyContent:
    id: int
    title: str
    status: str
    updated_at: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "updated_at": self.updated_at,
        }


def test_connection(boundary: IngestionBoundary, api_key: str) -> Notice:
    """Authenticated plugin-info request dispatched in-process."""

    if not api_key:
        return Notice("error", MISSING_KEY_MESSAGE)

    response = boundary.dispatch(
        Request(
            method="GET",
            path=f"{ROUTE_NAMESPACE}/plugin-info",
            headers={API_KEY_HEADER: api_key},
        )
    )
    body = response.body if isinstance(response.body, dict) else {}
    if response.status != 200:  # noqa: PLR2004
        message = f"Connection failed with HTTP {response.status}"
        remote_message = body.get("message")
        if isinstance(remote_message, str):
            message += f": {remote_message}"
        return Notice("error", message)

    plugin_version = str(body.get("plugin_version", __version__))
    return Notice("success", f"Connection successful. Plugin version: {plugin_version}")


@dataclass(slots=True)
class VersionHandshake:
    """Reachability and compatibility check against the upstream API."""

    client: ContentPulseClient

    @property
    def min_api_version(self) -> str:
        return MIN_API_VERSION

    def check(self) -> dict[str, object]:
        config = self.client.config
        if not config.api_url or not config.has_api_key:
            return self._result(False, "Settings API key must be configured.")

        try:
            self.client.get_content_feed(page=1)
        except AuthenticationError:
            return self._result(False, "Authentication failed - check your API key.")
        except ContentPulseError as error:
            return self._result(False, f"Connection failed: {error.message}")
        return self._result(True, "Connection successful.")

    def _result(self, compatible: bool, message: str) -> dict[str, object]:
        return {"compatible": compatible, "plugin_version": __version__, "message": message}


def fetch_ready_contents(client: ContentPulseClient) -> tuple[list[ReadyContent], str]:
    """Return (items, error). Items are sorted by last update, newest first."""

    if not client.config.api_url:
        return [], "ContentPulse API URL could not be resolved."

    items: list[ReadyContent] = []
    try:
        for item in client.iter_content():
            status = item.status or ""
            if status not in READY_STATUSES:
                continue
            items.append(
                ReadyContent(
                    id=item.id,
                    title=item.display_title,
                    status=status,
                    updated_at=(
                        item.updated_at.strftime(READY_TIMESTAMP_FORMAT) if item.updated_at else ""
                    ),
                )
            )
    except ContentPulseError as error:
        log.warning("Loading ready contents failed: %s", error.message)
        return [], f"Failed to load ready contents: {error.message}"

    items.sort(key=lambda ready: ready.updated_at, reverse=True)
    return items, ""


def publish_ready(client: ContentPulseClient, content_id: int) -> Notice:
    if content_id <= 0:
        return Notice("error", "Please provide a valid ContentPulse content ID.")
    if not client.config.api_url or not client.config.has_api_key:
        return Notice("error", MISSING_KEY_MESSAGE)

    try:
        response = client.publish_to_site(content_id)
    except ContentPulseError as error:
        log.warning("Publishing content %s failed: %s", content_id, error.message)
        return Notice("error", error.message)

    message = "Ready content published successfully."
    if response.message and response.message.strip():
        message = response.message
    if response.data is not None and response.data.remote_url:
        message += f" {response.data.remote_url}"
    return Notice("success", message)
