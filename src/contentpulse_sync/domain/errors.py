"""Error taxonomy shared by the engine, adapters and the ingestion boundary."""

from __future__ import annotations

from typing import ClassVar


class ContentPulseError(Exception):
    """Base class for errors that carry a machine code and an HTTP-equivalent status."""

    default_code: ClassVar[str] = "contentpulse_error"
    default_status: ClassVar[int] = 500

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status or self.default_status

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}


class ValidationError(ContentPulseError):
    """The request is missing or carries an invalid required field."""

    default_code = "invalid_payload"
    default_status = 422


class AuthenticationError(ContentPulseError):
    """The caller did not present the shared secret."""

    default_code = "rest_forbidden"
    default_status = 401


class NotFoundError(ContentPulseError):
    """A referenced record does not exist."""

    default_code = "not_found"
    default_status = 404


class StoreWriteError(ContentPulseError):
    """The content store rejected a write."""

    default_code = "store_write_failed"
    default_status = 500


class MediaFetchFailure(ContentPulseError):
    """A media asset could not be imported. Never escalated to a request error."""

    default_code = "media_fetch_failed"
    default_status = 502


class RemoteCallFailure(ContentPulseError):
    """A best-effort call to the upstream ContentPulse API failed."""

    default_code = "remote_call_failed"
    default_status = 502
