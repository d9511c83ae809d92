"""Normalization of the inbound JSON payload into a ``ContentPayload``."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from contentpulse_sync.domain.errors import ValidationError
from contentpulse_sync.domain.model import ContentPayload, TermRef
from contentpulse_sync.domain.reconciliation.seo import SEO_META_KEYS


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


def _positive_int_or_none(value: object) -> object:
    """Absent, blank, zero or negative ids mean "no id"."""

    value = _blank_to_none(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return value if value > 0 else None
    return value


def _parse_timestamp(value: object) -> object:
    value = _blank_to_none(value)
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def _term_refs(value: object) -> tuple[TermRef, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError("expected a list of names or {name} objects")
    refs: list[TermRef] = []
    for item in cast(Sequence[object], value):
        if isinstance(item, Mapping):
            name = cast(Mapping[str, object], item).get("name")
        else:
            name = item
        if isinstance(name, str | int) and str(name).strip():
            refs.append(TermRef(name=str(name).strip()))
    return tuple(refs)


class InboundBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class InboundPayload(InboundBaseModel):
    contentpulse_id: int | None = None
    title: str = ""
    body_html: str = Field(default="", validation_alias=AliasChoices("body_html", "content"))
    excerpt: str = ""
    slug: str = ""
    post_status: str | None = None
    post_author: int | None = None
    featured_image: str | None = None
    categories: tuple[TermRef, ...] = ()
    tags: tuple[TermRef, ...] = ()
    seo: dict[str, str | tuple[str, ...]] = Field(default_factory=dict)
    published_at: datetime | None = None
    scheduled_at: datetime | None = None

    _normalize_ids = field_validator("contentpulse_id", "post_author", mode="before")(
        _positive_int_or_none
    )
    _normalize_text = field_validator("title", "body_html", "excerpt", "slug", mode="before")(
        _none_to_empty
    )
    _normalize_optional = field_validator("post_status", "featured_image", mode="before")(
        _blank_to_none
    )
    _normalize_terms = field_validator("categories", "tags", mode="before")(_term_refs)
    _normalize_timestamps = field_validator("published_at", "scheduled_at", mode="before")(
        _parse_timestamp
    )

    @field_validator("seo", mode="before")
    @classmethod
    def _recognized_seo_fields(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        seo: dict[str, object] = {}
        for key, item in cast(Mapping[str, object], value).items():
            if key not in SEO_META_KEYS or item is None:
                continue
            if isinstance(item, list):
                seo[key] = tuple(str(part) for part in cast(list[object], item))
            else:
                seo[key] = str(item)
        return seo

    def to_content_payload(self, *, default_status: str) -> ContentPayload:
        return ContentPayload(
            title=self.title,
            external_id=self.contentpulse_id,
            body_html=self.body_html,
            excerpt=self.excerpt,
            slug=self.slug,
            status_label=self.post_status or default_status,
            author_id=self.post_author,
            featured_image_url=self.featured_image,
            categories=self.categories,
            tags=self.tags,
            seo=self.seo,
            published_at=self.published_at,
            scheduled_at=self.scheduled_at,
        )


def _describe(exc: PydanticValidationError) -> str:
    fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
    return f"Invalid payload fields: {', '.join(fields)}."


def normalize_payload(raw: object, *, default_status: str = "draft") -> ContentPayload:
    """Validate ``raw`` and build the engine payload, or raise ``ValidationError``."""

    if not isinstance(raw, Mapping):
        raise ValidationError("Request body must be a JSON object.")
    data = cast(Mapping[str, object], raw)

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required.", code="missing_title")

    try:
        inbound = InboundPayload.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc
    return inbound.to_content_payload(default_status=default_status)
