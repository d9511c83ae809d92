"""Request routing for the ingestion boundary.

Every route requires the shared secret. Domain errors are rendered as
``{"code", "message", "data": {"status"}}`` bodies with their status code.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from contentpulse_sync.boundary.schema import normalize_payload
from contentpulse_sync.domain.errors import (
    AuthenticationError,
    ContentPulseError,
    ValidationError,
)
from contentpulse_sync.domain.model import SyncAction
from contentpulse_sync.domain.result import Err, Ok

if TYPE_CHECKING:
    from contentpulse_sync.app import ContentPulseApp

log = getLogger(__name__)

ROUTE_NAMESPACE: Final[str] = "/contentpulse/v1"


def _empty_mapping() -> Mapping[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class Request:
    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=_empty_mapping)
    query: Mapping[str, str] = field(default_factory=_empty_mapping)
    body: object = None


@dataclass(frozen=True, slots=True)
class Response:
    status: int
    body: object

    @classmethod
    def from_error(cls, error: ContentPulseError) -> Response:
        return cls(status=error.status, body=error.to_dict())


type Handler = Callable[[Request, Mapping[str, str]], Response]


@dataclass(slots=True)
class IngestionBoundary:
    app: ContentPulseApp
    _routes: list[tuple[str, re.Pattern[str], Handler]] = field(
        default_factory=list, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._add("GET", "/plugin-info", self.plugin_info)
        self._add("POST", "/posts", self.upsert)
        self._add("GET", r"/posts/(?P<id>\d+)", self.show)
        self._add("DELETE", r"/posts/(?P<id>\d+)", self.destroy)
        self._add("GET", "/ingestion/status", self.status)

    def _add(self, method: str, pattern: str, handler: Handler) -> None:
        compiled = re.compile(f"^{re.escape(ROUTE_NAMESPACE)}{pattern}/?$")
        self._routes.append((method, compiled, handler))

    def dispatch(self, request: Request) -> Response:
        route = self._match(request)
        if route is None:
            error = ContentPulseError(
                "No route was found matching the URL and request method.",
                code="rest_no_route",
                status=404,
            )
            return Response.from_error(error)
        handler, params = route

        if not self.app.authenticate(request.headers, request.query):
            log.warning("Rejected %s %s: invalid API key", request.method, request.path)
            error = AuthenticationError("Sorry, you are not allowed to do that.")
            return Response.from_error(error)

        try:
            return handler(request, params)
        except ContentPulseError as error:
            log.info("%s %s failed: %s", request.method, request.path, error.message)
            return Response.from_error(error)

    def _match(self, request: Request) -> tuple[Handler, Mapping[str, str]] | None:
        method = request.method.upper()
        for route_method, pattern, handler in self._routes:
            match = pattern.match(request.path)
            if match is not None and route_method == method:
                return handler, match.groupdict()
        return None

    # Handlers -----------------------------------------------------------------------

    def plugin_info(self, _request: Request, _params: Mapping[str, str]) -> Response:
        return Response(200, self.app.plugin_info())

    def upsert(self, request: Request, _params: Mapping[str, str]) -> Response:
        payload = normalize_payload(
            request.body, default_status=self.app.sync.default_status_label
        )
        match self.app.upsert(payload):
            case Ok(outcome):
                status = 201 if outcome.action is SyncAction.CREATED else 200
                return Response(status, outcome.as_response())
            case Err(error):
                return Response.from_error(error)

    def show(self, _request: Request, params: Mapping[str, str]) -> Response:
        return Response(200, self.app.show(_record_id(params)))

    def destroy(self, _request: Request, params: Mapping[str, str]) -> Response:
        return Response(200, self.app.destroy(_record_id(params)))

    def status(self, _request: Request, _params: Mapping[str, str]) -> Response:
        return Response(200, self.app.ingestion_status())


def _record_id(params: Mapping[str, str]) -> int:
    record_id = int(params["id"])
    if record_id <= 0:
        raise ValidationError("Invalid parameter(s): id", code="rest_invalid_param", status=400)
    return record_id
