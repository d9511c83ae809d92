"""Normalized inbound content as handed to the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contentpulse_sync.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

type SeoValue = str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TermRef:
    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ContentPayload:
    """A validated content item from the upstream source.

    ``title`` is stripped on construction and must not be empty. Timestamps are
    either timezone-aware or naive values interpreted in the site timezone.
    """

    title: str
    external_id: int | None = None
    body_html: str = ""
    excerpt: str = ""
    slug: str = ""
    status_label: str = "draft"
    author_id: int | None = None
    featured_image_url: str | None = None
    categories: tuple[TermRef, ...] = ()
    tags: tuple[TermRef, ...] = ()
    seo: Mapping[str, SeoValue] = field(default_factory=dict[str, SeoValue])
    published_at: datetime | None = None
    scheduled_at: datetime | None = None

    def __post_init__(self) -> None:
        title = self.title.strip()
        if not title:
            raise ValidationError("Title is required.", code="missing_title")
        object.__setattr__(self, "title", title)
