"""Ingestion boundary: request authentication, payload normalization and routing."""

from __future__ import annotations

from .auth import API_KEY_HEADER, check_api_key, provided_api_key
from .handlers import ROUTE_NAMESPACE, IngestionBoundary, Request, Response
from .schema import InboundPayload, normalize_payload

__all__ = [
    "API_KEY_HEADER",
    "ROUTE_NAMESPACE",
    "InboundPayload",
    "IngestionBoundary",
    "Request",
    "Response",
    "check_api_key",
    "normalize_payload",
    "provided_api_key",
]
