from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from contentpulse_sync.boundary.schema import normalize_payload
from contentpulse_sync.domain.errors import ValidationError
from contentpulse_sync.domain.model import TermRef


def test_minimal_payload_uses_defaults() -> None:
    payload = normalize_payload({"title": "  Hello  "}, default_status="review")

    assert payload.title == "Hello"
    assert payload.external_id is None
    assert payload.status_label == "review"
    assert payload.categories == ()
    assert payload.seo == {}


@pytest.mark.parametrize("raw_id", [0, -1, "0", "", None, False])
def test_non_positive_ids_are_absent(raw_id: object) -> None:
    payload = normalize_payload({"title": "Hello", "contentpulse_id": raw_id})

    assert payload.external_id is None


def test_numeric_string_id_is_accepted() -> None:
    payload = normalize_payload({"title": "Hello", "contentpulse_id": " 12 ", "post_author": 3})

    assert payload.external_id == 12
    assert payload.author_id == 3


def test_body_accepts_either_field_name() -> None:
    assert normalize_payload({"title": "A", "content": "<p>x</p>"}).body_html == "<p>x</p>"
    assert normalize_payload({"title": "A", "body_html": "<p>y</p>"}).body_html == "<p>y</p>"


def test_null_text_fields_become_empty() -> None:
    payload = normalize_payload({"title": "A", "excerpt": None, "slug": None, "content": None})

    assert payload.excerpt == ""
    assert payload.slug == ""
    assert payload.body_html == ""


def test_terms_accept_names_and_objects() -> None:
    payload = normalize_payload(
        {
            "title": "A",
            "categories": ["News", {"name": " Tech "}, {"slug": "no-name"}, "", 2024],
            "tags": None,
        }
    )

    assert payload.categories == (TermRef("News"), TermRef("Tech"), TermRef("2024"))
    assert payload.tags == ()


def test_terms_must_be_a_list() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_payload({"title": "A", "tags": "news"})

    assert excinfo.value.message == "Invalid payload fields: tags."


def test_timestamps_are_parsed() -> None:
    payload = normalize_payload(
        {
            "title": "A",
            "published_at": "2024-05-01T10:00:00Z",
            "scheduled_at": "2024-06-01T09:00:00+02:00",
        }
    )

    assert payload.published_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert payload.scheduled_at == datetime(2024, 6, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))


def test_naive_timestamp_stays_naive() -> None:
    payload = normalize_payload({"title": "A", "published_at": "2024-05-01 10:00:00"})

    assert payload.published_at == datetime(2024, 5, 1, 10, 0)  # noqa: DTZ001


def test_blank_optional_fields_are_absent() -> None:
    payload = normalize_payload(
        {"title": "A", "post_status": "  ", "featured_image": "", "published_at": ""}
    )

    assert payload.status_label == "draft"
    assert payload.featured_image_url is None
    assert payload.published_at is None


def test_seo_keeps_recognised_fields_only() -> None:
    payload = normalize_payload(
        {
            "title": "A",
            "seo": {
                "meta_title": "Title",
                "meta_keywords": ["one", "two"],
                "meta_robots": None,
                "canonical": "https://elsewhere.test/",
            },
        }
    )

    assert payload.seo == {"meta_title": "Title", "meta_keywords": ("one", "two")}


def test_several_invalid_fields_are_listed() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_payload({"title": "A", "contentpulse_id": "abc", "scheduled_at": "soon"})

    assert excinfo.value.message == "Invalid payload fields: contentpulse_id, scheduled_at."
    assert excinfo.value.status == 422


@pytest.mark.parametrize("raw", [None, "title", [{"title": "A"}], 42])
def test_body_must_be_an_object(raw: object) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_payload(raw)

    assert excinfo.value.message == "Request body must be a JSON object."


@pytest.mark.parametrize("title", [None, 5, "", "  \n "])
def test_title_is_required(title: object) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_payload({"title": title})

    assert excinfo.value.code == "missing_title"
