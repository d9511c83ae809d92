"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ExternalStatus(StrEnum):
    """Lifecycle labels used by the upstream content source."""

    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    DRAFT = "draft"
    REVIEW = "review"
    ARCHIVED = "archived"


class LifecycleStatus(StrEnum):
    """Lifecycle labels used by the local content store."""

    PUBLISH = "publish"
    FUTURE = "future"
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"


class SyncAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class Taxonomy(StrEnum):
    CATEGORY = "category"
    TAG = "post_tag"


class SeoExtension(StrEnum):
    """Third-party SEO extensions whose metadata keys the engine can mirror into."""

    YOAST = "yoast"
    RANK_MATH = "rankmath"


class UserRole(StrEnum):
    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    AUTHOR = "author"
