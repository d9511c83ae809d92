from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from contentpulse_sync.boundary import (
    API_KEY_HEADER,
    ROUTE_NAMESPACE,
    IngestionBoundary,
    Request,
    Response,
)
from contentpulse_sync.domain.model import Taxonomy
from tests.helpers.fakes import API_KEY

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentpulse_sync.app import ContentPulseApp
    from tests.helpers.fakes import FakeContentStore, FakeContentUnitOfWork


def _request(
    method: str, route: str, body: object = None, *, key: str | None = API_KEY
) -> Request:
    headers = {} if key is None else {API_KEY_HEADER: key}
    return Request(method=method, path=f"{ROUTE_NAMESPACE}{route}", headers=headers, body=body)


def _body(response: Response) -> dict[str, object]:
    assert isinstance(response.body, dict)
    return response.body  # type: ignore[return-value]


def _store(uow: FakeContentUnitOfWork) -> FakeContentStore:
    return uow.repositories.store  # type: ignore[return-value]


def test_create_then_update_by_external_id(
    boundary: IngestionBoundary, uow: FakeContentUnitOfWork
) -> None:
    created = boundary.dispatch(
        _request("POST", "/posts", {"contentpulse_id": 42, "title": "Hello"})
    )
    updated = boundary.dispatch(
        _request("POST", "/posts", {"contentpulse_id": 42, "title": "Hello v2"})
    )

    assert created.status == 201
    assert _body(created)["action"] == "created"
    assert updated.status == 200
    assert _body(updated)["action"] == "updated"
    assert _body(updated)["post_id"] == _body(created)["post_id"]
    store = _store(uow)
    assert len(store.records) == 1
    assert next(iter(store.records.values())).title == "Hello v2"


def test_missing_key_is_rejected_before_any_write(
    boundary: IngestionBoundary, uow: FakeContentUnitOfWork
) -> None:
    response = boundary.dispatch(_request("POST", "/posts", {"title": "Hello"}, key=None))

    assert response.status == 401
    assert _body(response)["code"] == "rest_forbidden"
    assert _store(uow).records == {}


def test_wrong_key_is_rejected(boundary: IngestionBoundary) -> None:
    response = boundary.dispatch(_request("GET", "/ingestion/status", key="wrong"))

    assert response.status == 401


def test_key_accepted_from_lowercase_header_and_query(boundary: IngestionBoundary) -> None:
    by_header = boundary.dispatch(
        Request(
            method="GET",
            path=f"{ROUTE_NAMESPACE}/plugin-info",
            headers={API_KEY_HEADER.lower(): API_KEY},
        )
    )
    by_query = boundary.dispatch(
        Request(method="GET", path=f"{ROUTE_NAMESPACE}/plugin-info", query={"api_key": API_KEY})
    )

    assert by_header.status == 200
    assert by_query.status == 200


def test_unset_key_rejects_every_request(make_app: Callable[..., ContentPulseApp]) -> None:
    boundary = IngestionBoundary(make_app(api_key="").boot())

    assert boundary.dispatch(_request("GET", "/plugin-info", key="")).status == 401
    assert boundary.dispatch(_request("GET", "/plugin-info", key="anything")).status == 401


@pytest.mark.parametrize("title", [None, "", "   "])
def test_missing_title_is_rejected_without_side_effects(
    boundary: IngestionBoundary, uow: FakeContentUnitOfWork, title: str | None
) -> None:
    response = boundary.dispatch(_request("POST", "/posts", {"contentpulse_id": 1, "title": title}))

    assert response.status == 422
    assert _body(response) == {
        "code": "missing_title",
        "message": "Title is required.",
        "data": {"status": 422},
    }
    assert _store(uow).records == {}
    assert uow.repositories.options.get_option("contentpulse_recent_syncs") is None


def test_non_object_body_is_rejected(boundary: IngestionBoundary) -> None:
    response = boundary.dispatch(_request("POST", "/posts", ["not", "an", "object"]))

    assert response.status == 422
    assert _body(response)["code"] == "invalid_payload"


def test_invalid_field_is_reported(boundary: IngestionBoundary) -> None:
    response = boundary.dispatch(
        _request("POST", "/posts", {"title": "Hello", "published_at": "not a date"})
    )

    assert response.status == 422
    assert _body(response)["message"] == "Invalid payload fields: published_at."


def test_store_failure_is_a_server_error(
    boundary: IngestionBoundary, uow: FakeContentUnitOfWork
) -> None:
    _store(uow).fail_writes = True

    response = boundary.dispatch(_request("POST", "/posts", {"title": "Hello"}))

    assert response.status == 500
    assert _body(response)["code"] == "store_write_failed"
    assert uow.rollbacks == 1


def test_full_payload_is_applied(boundary: IngestionBoundary, uow: FakeContentUnitOfWork) -> None:
    response = boundary.dispatch(
        _request(
            "POST",
            "/posts",
            {
                "contentpulse_id": "7",
                "title": "Launch",
                "content": "<p>Body</p>",
                "excerpt": "Short",
                "post_status": "published",
                "published_at": "2024-05-01T10:00:00Z",
                "categories": ["News", {"name": "Tech"}],
                "tags": ["launch"],
                "seo": {"meta_title": "Launch day", "unknown": "dropped"},
            },
        )
    )

    assert response.status == 201
    record_id = _body(response)["post_id"]
    assert isinstance(record_id, int)
    assert _body(response)["url"] == "https://blog.example.test/launch/"
    store = _store(uow)
    assert store.records[record_id].body == "<p>Body</p>"
    assert store.term_names(record_id, Taxonomy.CATEGORY) == ["News", "Tech"]
    assert store.term_names(record_id, Taxonomy.TAG) == ["launch"]
    assert store.meta[record_id]["_contentpulse_meta_title"] == "Launch day"
    assert store.meta[record_id]["_contentpulse_id"] == "7"


def test_show_and_delete(boundary: IngestionBoundary) -> None:
    created = boundary.dispatch(_request("POST", "/posts", {"contentpulse_id": 3, "title": "Hi"}))
    record_id = _body(created)["post_id"]

    shown = boundary.dispatch(_request("GET", f"/posts/{record_id}"))
    deleted = boundary.dispatch(_request("DELETE", f"/posts/{record_id}"))
    missing = boundary.dispatch(_request("GET", f"/posts/{record_id}"))

    assert shown.status == 200
    assert _body(shown)["title"] == "Hi"
    assert _body(shown)["status"] == "draft"
    assert _body(shown)["contentpulse_id"] == "3"
    assert deleted.status == 200
    assert _body(deleted) == {"deleted": True, "id": record_id}
    assert missing.status == 404
    assert _body(missing)["message"] == "Post not found."


def test_delete_missing_record(boundary: IngestionBoundary) -> None:
    response = boundary.dispatch(_request("DELETE", "/posts/99"))

    assert response.status == 404


def test_zero_id_is_invalid(boundary: IngestionBoundary) -> None:
    response = boundary.dispatch(_request("GET", "/posts/0"))

    assert response.status == 400
    assert _body(response)["code"] == "rest_invalid_param"


def test_unknown_route(boundary: IngestionBoundary) -> None:
    wrong_path = boundary.dispatch(_request("GET", "/nothing-here", key=None))
    wrong_method = boundary.dispatch(_request("PUT", "/posts"))

    assert wrong_path.status == 404
    assert _body(wrong_path)["code"] == "rest_no_route"
    assert wrong_method.status == 404


def test_status_reports_recent_syncs(boundary: IngestionBoundary) -> None:
    for index in range(7):
        boundary.dispatch(
            _request("POST", "/posts", {"contentpulse_id": index + 1, "title": f"Post {index}"})
        )

    response = boundary.dispatch(_request("GET", "/ingestion/status/"))

    body = _body(response)
    assert response.status == 200
    assert body["status"] == "ready"
    assert body["total_synced"] == 7
    assert body["last_sync_at"] == "2024-05-01 12:30:00"
    recent = body["recent_syncs"]
    assert isinstance(recent, list)
    assert len(recent) == 5  # type: ignore[arg-type]
    assert recent[0]["title"] == "Post 6"  # type: ignore[index]


def test_plugin_info(boundary: IngestionBoundary) -> None:
    body = _body(boundary.dispatch(_request("GET", "/plugin-info")))

    assert body["platform_version"] == "6.5"
    assert body["supports_blocks"] is True
    assert body["rest_api_version"] == "v1"
    assert isinstance(body["plugin_version"], str)
