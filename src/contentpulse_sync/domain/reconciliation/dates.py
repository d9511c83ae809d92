from __future__ import annotations

from datetime import UTC, datetime, tzinfo

from contentpulse_sync.domain.model import LifecycleStatus


def split_local_and_utc(value: datetime, site_tz: tzinfo) -> tuple[datetime, datetime]:
    """Return (naive site-local, aware UTC). Naive input is taken as site-local."""

    if value.tzinfo is None:
        local = value
        utc = value.replace(tzinfo=site_tz).astimezone(UTC)
    else:
        local = value.astimezone(site_tz).replace(tzinfo=None)
        utc = value.astimezone(UTC)
    return local, utc


def publish_dates(
    status: LifecycleStatus,
    *,
    scheduled_at: datetime | None,
    published_at: datetime | None,
    site_tz: tzinfo,
) -> tuple[datetime | None, datetime | None]:
    """Pick the publish timestamp matching ``status``; (None, None) keeps store defaults."""

    if scheduled_at is not None and status is LifecycleStatus.FUTURE:
        return split_local_and_utc(scheduled_at, site_tz)
    if published_at is not None and status is LifecycleStatus.PUBLISH:
        return split_local_and_utc(published_at, site_tz)
    return None, None
