"""SEO metadata written alongside each synchronised record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from contentpulse_sync.domain.model import SeoExtension
from contentpulse_sync.domain.sanitize import sanitize_text

if TYPE_CHECKING:
    from collections.abc import Mapping

    from contentpulse_sync.domain.model import SeoValue
    from contentpulse_sync.domain.ports.store import RecordStore

# Option listing the SEO extensions active on the site, read in "auto" mode.
ACTIVE_SEO_EXTENSIONS_OPTION: Final[str] = "contentpulse_active_seo_extensions"

SEO_META_KEYS: Final[dict[str, str]] = {
    "meta_title": "_contentpulse_meta_title",
    "meta_description": "_contentpulse_meta_description",
    "meta_keywords": "_contentpulse_meta_keywords",
    "og_title": "_contentpulse_og_title",
    "og_description": "_contentpulse_og_description",
    "twitter_title": "_contentpulse_twitter_title",
    "twitter_description": "_contentpulse_twitter_description",
    "meta_robots": "_contentpulse_meta_robots",
}

# Title and description mirrored into extension-owned keys so the extension renders them.
EXTENSION_META_KEYS: Final[dict[SeoExtension, dict[str, str]]] = {
    SeoExtension.YOAST: {
        "meta_title": "_yoast_wpseo_title",
        "meta_description": "_yoast_wpseo_metadesc",
    },
    SeoExtension.RANK_MATH: {
        "meta_title": "rank_math_title",
        "meta_description": "rank_math_description",
    },
}


def coerce_seo_value(value: SeoValue) -> str:
    if isinstance(value, str):
        return sanitize_text(value)
    return sanitize_text(", ".join(value))


def apply_seo_meta(
    store: RecordStore,
    record_id: int,
    seo: Mapping[str, SeoValue],
    *,
    extensions: frozenset[SeoExtension] = frozenset(),
) -> None:
    if not seo:
        return

    for seo_key, meta_key in SEO_META_KEYS.items():
        if seo_key in seo:
            store.set_meta(record_id, meta_key, coerce_seo_value(seo[seo_key]))

    for extension in sorted(extensions):
        for seo_key, meta_key in EXTENSION_META_KEYS[extension].items():
            if seo_key in seo:
                store.set_meta(record_id, meta_key, coerce_seo_value(seo[seo_key]))
