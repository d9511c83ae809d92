from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from contentpulse_sync.domain.errors import StoreWriteError
from contentpulse_sync.domain.model import (
    LifecycleStatus,
    MediaHandle,
    SeoExtension,
    SyncAction,
    Taxonomy,
    TermRef,
    UserAccount,
    UserRole,
)
from contentpulse_sync.domain.reconciliation import EXTERNAL_ID_META_KEY, ReconciliationEngine
from contentpulse_sync.domain.result import Err, Ok
from contentpulse_sync.domain.sync_history import SyncHistoryLog
from tests.helpers.fakes import (
    SITE_URL,
    FakeContentStore,
    FakeOptionStore,
    fixed_clock,
    make_payload,
)

BERLIN = ZoneInfo("Europe/Berlin")


def _engine(
    store: FakeContentStore | None = None, **kwargs: object
) -> tuple[ReconciliationEngine, FakeContentStore, SyncHistoryLog]:
    store = store or FakeContentStore()
    history = SyncHistoryLog(FakeOptionStore())
    engine = ReconciliationEngine(
        store=store,
        tracker=history,
        clock=fixed_clock,
        **kwargs,  # type: ignore[arg-type]
    )
    return engine, store, history


def _ok[T](result: Ok[T] | Err[StoreWriteError]) -> T:
    assert isinstance(result, Ok), result
    return result.value


def test_first_upsert_creates_and_links_record() -> None:
    engine, store, _ = _engine()

    outcome = _ok(engine.upsert(make_payload("Hello", external_id=42)))

    assert outcome.action is SyncAction.CREATED
    assert outcome.url == f"{SITE_URL}/?p={outcome.local_record_id}"
    assert store.get_meta(outcome.local_record_id, EXTERNAL_ID_META_KEY) == "42"
    assert store.find_by_external_id(42) == [outcome.local_record_id]


def test_repeated_upsert_updates_the_same_record() -> None:
    engine, store, history = _engine()

    created = _ok(engine.upsert(make_payload("Hello", external_id=42)))
    updated = _ok(engine.upsert(make_payload("Hello v2", external_id=42)))

    assert updated.action is SyncAction.UPDATED
    assert updated.local_record_id == created.local_record_id
    assert len(store.records) == 1
    assert store.records[created.local_record_id].title == "Hello v2"
    assert [event.action for event in history.latest(10)] == [
        SyncAction.UPDATED,
        SyncAction.CREATED,
    ]
    assert history.counters().total_synced == 2


def test_payload_without_external_id_always_creates() -> None:
    engine, store, _ = _engine()

    first = _ok(engine.upsert(make_payload("Loose", external_id=None)))
    second = _ok(engine.upsert(make_payload("Loose", external_id=None)))

    assert first.local_record_id != second.local_record_id
    assert store.get_meta(first.local_record_id, EXTERNAL_ID_META_KEY) is None
    assert len(store.records) == 2


def test_store_failure_is_returned_and_not_tracked() -> None:
    store = FakeContentStore()
    store.fail_writes = True
    engine, _, history = _engine(store)

    result = engine.upsert(make_payload("Broken"))

    assert isinstance(result, Err)
    assert isinstance(result.error, StoreWriteError)
    assert history.latest(10) == []
    assert history.counters().total_synced == 0
    assert store.meta_writes == []


def test_lowest_linked_record_wins_when_duplicates_exist() -> None:
    store = FakeContentStore()
    engine, _, _ = _engine(store)
    first = _ok(engine.upsert(make_payload("One", external_id=None)))
    second = _ok(engine.upsert(make_payload("Two", external_id=None)))
    store.link(second.local_record_id, 7)
    store.link(first.local_record_id, 7)

    outcome = _ok(engine.upsert(make_payload("Seven", external_id=7)))

    assert outcome.action is SyncAction.UPDATED
    assert outcome.local_record_id == first.local_record_id
    assert store.records[second.local_record_id].title == "Two"


class _StaleLookupStore(FakeContentStore):
    """Simulates two requests that both looked up the id before either linked it."""

    def find_by_external_id(self, external_id: int) -> list[int]:
        _ = external_id
        return []


def test_concurrent_upserts_of_unseen_id_can_create_duplicates() -> None:
    store = _StaleLookupStore()
    engine, _, _ = _engine(store)

    first = _ok(engine.upsert(make_payload("Race", external_id=9)))
    second = _ok(engine.upsert(make_payload("Race", external_id=9)))

    assert first.action is second.action is SyncAction.CREATED
    assert len(store.records) == 2
    assert FakeContentStore.find_by_external_id(store, 9) == [
        first.local_record_id,
        second.local_record_id,
    ]


def test_text_fields_are_sanitized() -> None:
    engine, store, _ = _engine()

    outcome = _ok(
        engine.upsert(
            make_payload(
                "<b>Bold</b> title",
                body_html="<p>Body</p><script>alert(1)</script>",
                excerpt="<em>Short</em>\nsummary",
                slug="My Custom Slug!",
            )
        )
    )

    record = store.records[outcome.local_record_id]
    assert record.title == "Bold title"
    assert record.body == "<p>Body</p>"
    assert record.excerpt == "Short\nsummary"
    assert record.slug == "my-custom-slug"


def test_published_status_uses_published_date_in_site_time() -> None:
    engine, store, _ = _engine(site_tz=BERLIN)

    outcome = _ok(
        engine.upsert(
            make_payload(
                "Live",
                status_label="published",
                published_at=datetime(2024, 5, 1, 10, 0, tzinfo=UTC),
            )
        )
    )

    record = store.records[outcome.local_record_id]
    assert record.status is LifecycleStatus.PUBLISH
    assert record.published_local == datetime(2024, 5, 1, 12, 0)  # noqa: DTZ001
    assert record.published_utc == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert outcome.url == f"{SITE_URL}/live/"


def test_scheduled_status_uses_scheduled_date() -> None:
    engine, store, _ = _engine(site_tz=BERLIN)

    outcome = _ok(
        engine.upsert(
            make_payload(
                "Later",
                status_label="scheduled",
                scheduled_at=datetime(2030, 1, 1, 9, 0),  # noqa: DTZ001
                published_at=datetime(2024, 5, 1, 10, 0, tzinfo=UTC),
            )
        )
    )

    record = store.records[outcome.local_record_id]
    assert record.status is LifecycleStatus.FUTURE
    assert record.published_local == datetime(2030, 1, 1, 9, 0)  # noqa: DTZ001
    assert record.published_utc == datetime(2030, 1, 1, 8, 0, tzinfo=UTC)


def test_draft_ignores_timestamps() -> None:
    engine, store, _ = _engine()

    outcome = _ok(
        engine.upsert(
            make_payload("Draft", published_at=datetime(2024, 5, 1, 10, 0, tzinfo=UTC))
        )
    )

    record = store.records[outcome.local_record_id]
    assert record.status is LifecycleStatus.DRAFT
    assert record.published_utc is None


def test_unknown_status_becomes_draft() -> None:
    engine, store, history = _engine()

    outcome = _ok(engine.upsert(make_payload("Odd", status_label="deleted")))

    assert store.records[outcome.local_record_id].status is LifecycleStatus.DRAFT
    assert history.latest(1)[0].status_label == "deleted"


def test_existing_author_is_kept() -> None:
    store = FakeContentStore(
        users=[
            UserAccount(id=1, login="admin", role=UserRole.ADMINISTRATOR),
            UserAccount(id=5, login="writer", role=UserRole.AUTHOR),
        ]
    )
    engine, _, _ = _engine(store)

    outcome = _ok(engine.upsert(make_payload("Byline", author_id=5)))

    assert store.records[outcome.local_record_id].author_id == 5


def test_missing_author_falls_back_to_administrator() -> None:
    store = FakeContentStore(
        users=[
            UserAccount(id=3, login="editor", role=UserRole.EDITOR),
            UserAccount(id=4, login="boss", role=UserRole.ADMINISTRATOR),
        ]
    )
    engine, _, _ = _engine(store)

    outcome = _ok(engine.upsert(make_payload("Byline", author_id=99)))

    assert store.records[outcome.local_record_id].author_id == 4


def test_author_resolution_can_be_disabled() -> None:
    engine, store, _ = _engine(resolve_authors=False)

    outcome = _ok(engine.upsert(make_payload("Byline", author_id=99)))

    assert store.records[outcome.local_record_id].author_id == 99


def test_featured_media_is_attached() -> None:
    engine, store, _ = _engine()

    outcome = _ok(engine.upsert(make_payload("Pic"), MediaHandle(id=11, file_name="pic.png")))

    assert store.records[outcome.local_record_id].featured_media_id == 11


def test_taxonomies_are_replaced_on_update() -> None:
    engine, store, _ = _engine()
    created = _ok(
        engine.upsert(
            make_payload("Tagged", categories=(TermRef("News"),), tags=(TermRef("a"), TermRef("b")))
        )
    )

    _ok(engine.upsert(make_payload("Tagged", categories=(TermRef("Tech"),), tags=())))

    record_id = created.local_record_id
    assert store.term_names(record_id, Taxonomy.CATEGORY) == ["Tech"]
    assert store.term_names(record_id, Taxonomy.TAG) == ["a", "b"]


def test_seo_fields_are_written_with_extension_mirrors() -> None:
    engine, store, _ = _engine(seo_extensions=frozenset({SeoExtension.YOAST}))

    outcome = _ok(
        engine.upsert(
            make_payload(
                "Seo",
                seo={"meta_title": "Title <b>here</b>", "meta_keywords": ("one", "two")},
            )
        )
    )

    meta = store.meta[outcome.local_record_id]
    assert meta["_contentpulse_meta_title"] == "Title here"
    assert meta["_contentpulse_meta_keywords"] == "one, two"
    assert meta["_yoast_wpseo_title"] == "Title here"
    assert "rank_math_title" not in meta


def test_history_timestamp_is_site_local() -> None:
    engine, _, history = _engine(site_tz=BERLIN)

    _ok(engine.upsert(make_payload("When", external_id=5)))

    event = history.latest(1)[0]
    assert event.timestamp == "2024-05-01 14:30:00"
    assert event.external_id == "5"
    assert history.counters().last_sync_at == "2024-05-01 14:30:00"
