"""Reconciliation of upstream content with local records."""

from __future__ import annotations

from .authors import DEFAULT_AUTHOR_ID, resolve_author_id
from .dates import publish_dates, split_local_and_utc
from .engine import EXTERNAL_ID_META_KEY, ReconciliationEngine
from .seo import (
    ACTIVE_SEO_EXTENSIONS_OPTION,
    EXTENSION_META_KEYS,
    SEO_META_KEYS,
    apply_seo_meta,
)
from .taxonomy import apply_taxonomies, resolve_term_ids, term_names

__all__ = [
    "ACTIVE_SEO_EXTENSIONS_OPTION",
    "DEFAULT_AUTHOR_ID",
    "EXTENSION_META_KEYS",
    "EXTERNAL_ID_META_KEY",
    "SEO_META_KEYS",
    "ReconciliationEngine",
    "apply_seo_meta",
    "apply_taxonomies",
    "publish_dates",
    "resolve_author_id",
    "resolve_term_ids",
    "split_local_and_utc",
    "term_names",
]
