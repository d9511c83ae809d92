"""Bounded, most-recent-first ledger of successful synchronisations.

The whole list lives under one option and is rewritten on every event, so two
concurrent writers can lose an update. The log is advisory only.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

from contentpulse_sync.domain.model import SyncCounters, SyncEvent

if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.history import OptionStore

log = getLogger(__name__)

HISTORY_OPTION: Final[str] = "contentpulse_recent_syncs"
LAST_SYNC_OPTION: Final[str] = "contentpulse_last_sync"
SYNC_COUNT_OPTION: Final[str] = "contentpulse_sync_count"
MAX_HISTORY_ITEMS: Final[int] = 10


@dataclass(slots=True)
class SyncHistoryLog:
    options: OptionStore
    max_items: int = MAX_HISTORY_ITEMS

    def record(self, event: SyncEvent) -> None:
        history = self._load()
        history.insert(0, event.to_dict())
        self.options.set_option(HISTORY_OPTION, history[: self.max_items])

    def latest(self, limit: int = MAX_HISTORY_ITEMS) -> list[SyncEvent]:
        return [SyncEvent.from_dict(entry) for entry in self._load()[: max(1, limit)]]

    def increment_counters(self, synced_at: str) -> None:
        self.options.set_option(LAST_SYNC_OPTION, synced_at)
        self.options.set_option(SYNC_COUNT_OPTION, self.counters().total_synced + 1)

    def counters(self) -> SyncCounters:
        last_sync = self.options.get_option(LAST_SYNC_OPTION)
        count = self.options.get_option(SYNC_COUNT_OPTION, 0)
        return SyncCounters(
            last_sync_at=last_sync if isinstance(last_sync, str) else None,
            total_synced=count if isinstance(count, int) else 0,
        )

    def _load(self) -> list[dict[str, object]]:
        stored = self.options.get_option(HISTORY_OPTION, [])
        if not isinstance(stored, list):
            log.warning("Discarding malformed sync history option")
            return []
        entries = cast(list[object], stored)
        return [cast(dict[str, object], entry) for entry in entries if isinstance(entry, dict)]


if TYPE_CHECKING:
    from contentpulse_sync.domain.ports.history import SyncTracker

    _tracker_check: SyncTracker = SyncHistoryLog(cast("OptionStore", object()))
