"""Pydantic models describing the ContentPulse API payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ContentPulseBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ContentItem(ContentPulseBaseModel):
    id: int
    title: str = ""
    slug: str = ""
    status: str | None = None
    updated_at: datetime | None = None

    _normalize_updated_at = field_validator("updated_at", mode="before")(_blank_to_none)

    @field_validator("title", "slug", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def display_title(self) -> str:
        return self.title or self.slug


class FeedMeta(ContentPulseBaseModel):
    current_page: int = 1
    last_page: int = 1
    per_page: int | None = None
    total: int | None = None


class ContentFeed(ContentPulseBaseModel):
    items: list[ContentItem] = Field(default_factory=list, alias="data")
    meta: FeedMeta = Field(default_factory=FeedMeta)

    def has_more_pages(self) -> bool:
        return self.meta.current_page < self.meta.last_page


class PublishData(ContentPulseBaseModel):
    remote_url: str | None = None

    _normalize_remote_url = field_validator("remote_url", mode="before")(_blank_to_none)


class PublishResponse(ContentPulseBaseModel):
    message: str | None = None
    data: PublishData | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _ignore_non_mapping(cls, value: object) -> object:
        return value if isinstance(value, dict) else None


class ErrorResponse(ContentPulseBaseModel):
    message: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _ignore_non_string(cls, value: object) -> object:
        return value if isinstance(value, str) else None
