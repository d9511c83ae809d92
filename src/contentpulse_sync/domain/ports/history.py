"""Ports for option storage and sync tracking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contentpulse_sync.domain.model import SyncCounters, SyncEvent


@runtime_checkable
class OptionStore(Protocol):
    """Whole-value key/value storage; no transactional guarantees across calls."""

    def get_option(self, name: str, default: object = None) -> object: ...

    def set_option(self, name: str, value: object) -> None: ...


@runtime_checkable
class SyncTracker(Protocol):
    """Service the engine reports successful upserts to."""

    def record(self, event: SyncEvent) -> None: ...

    def latest(self, limit: int) -> list[SyncEvent]: ...

    def increment_counters(self, synced_at: str) -> None: ...

    def counters(self) -> SyncCounters: ...
