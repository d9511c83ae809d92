"""ContentPulse API adapter."""

from __future__ import annotations

from .client import API_KEY_HEADER, ContentPulseClient
from .schema import ContentFeed, ContentItem, FeedMeta, PublishResponse

__all__ = [
    "API_KEY_HEADER",
    "ContentFeed",
    "ContentItem",
    "ContentPulseClient",
    "FeedMeta",
    "PublishResponse",
]
