"""
Tests for the collection endpoints (add, delete, toggles, filter/sort/paginate).

Supabase is replaced by a chainable mock; every builder method returns the same mock so
assertions can inspect the calls made while building a query.
"""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api import deps
from api.main import app

MOVIE_ID = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"


def _response(data=None):
    resp = MagicMock()
    resp.data = data if data is not None else []
    resp.error = None
    return resp


def create_chainable_mock(*responses):
    """
    Build a fake Supabase client. Each `execute()` returns the next response in order;
    with a single response it is returned every time.
    """
    client = MagicMock()
    builder = MagicMock()
    for method in (
        "select",
        "insert",
        "update",
        "delete",
        "eq",
        "or_",
        "ilike",
        "contains",
        "order",
        "range",
        "limit",
    ):
        getattr(builder, method).return_value = builder
    if len(responses) == 1:
        builder.execute.return_value = responses[0]
    else:
        builder.execute.side_effect = list(responses)
    client.table.return_value = builder
    client.builder = builder
    return client


def _movie_row(**overrides):
    row = {
        "id": MOVIE_ID,
        "imdb_id": "tt0133093",
        "title": "The Matrix",
        "year": 1999,
        "image_url": "https://example.com/matrix.jpg",
        "watched_by": [],
        "runtime": "136 min",
        "director": "Lana Wachowski, Lilly Wachowski",
        "genre": "Action, Sci-Fi",
        "to_watch": True,
        "created_at": "2025-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_client():
    def _make(db):
        app.dependency_overrides[deps.get_supabase_client] = lambda: db
        app.dependency_overrides[deps.get_known_users] = lambda: ("kenny", "nicole")
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


class TestListMovies:
    def test_numeric_search_matches_title_or_year(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        response = client.get("/api/v1/movies", params={"search": "2001"})

        assert response.status_code == 200
        db.builder.or_.assert_called_once_with("title.ilike.%2001%,year.eq.2001")
        db.builder.ilike.assert_not_called()

    def test_text_search_matches_title_only(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        client.get("/api/v1/movies", params={"search": "matrix"})

        db.builder.ilike.assert_called_once_with("title", "%matrix%")
        db.builder.or_.assert_not_called()

    def test_default_sort_is_newest_first(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        client.get("/api/v1/movies")

        db.builder.order.assert_called_once_with("created_at", desc=True)
        db.builder.range.assert_called_once_with(0, 24)

    def test_sort_and_page(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        response = client.get("/api/v1/movies", params={"sort_by": "title", "order": "asc", "page": 2})

        assert response.status_code == 200
        assert response.json()["has_previous"] is True
        db.builder.order.assert_called_once_with("title", desc=False)
        db.builder.range.assert_called_once_with(25, 49)

    def test_full_page_reports_next(self, make_client):
        rows = [_movie_row(id=f"00000000-0000-0000-0000-{i:012d}", imdb_id=f"tt{i:07d}") for i in range(25)]
        db = create_chainable_mock(_response(rows))
        client = make_client(db)

        data = client.get("/api/v1/movies").json()

        assert len(data["items"]) == 25
        assert data["has_next"] is True

    def test_to_watch_and_watched_by_filters(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        client.get("/api/v1/movies", params={"to_watch": "true", "watched_by": "Kenny"})

        db.builder.eq.assert_called_once_with("to_watch", True)
        db.builder.contains.assert_called_once_with("watched_by", ["kenny"])

    def test_load_failure_surfaces_message(self, make_client):
        db = create_chainable_mock(_response([]))
        db.builder.execute.side_effect = RuntimeError("connection refused")
        client = make_client(db)

        response = client.get("/api/v1/movies")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to load movies"


class TestAddMovie:
    def test_add_from_search_inserts_mapped_row(self, make_client):
        inserted = _movie_row()
        db = create_chainable_mock(_response([]), _response([inserted]))
        client = make_client(db)

        response = client.post(
            "/api/v1/movies",
            json={
                "imdb_id": "tt0133093",
                "title": "The Matrix",
                "year": "1999",
                "type": "movie",
                "poster": "N/A",
                "runtime": "136 min",
            },
        )

        assert response.status_code == 201
        assert response.json()["imdb_id"] == "tt0133093"
        payload = db.builder.insert.call_args.args[0]
        assert payload["imdb_id"] == "tt0133093"
        assert payload["year"] == 1999
        assert payload["image_url"] == ""
        assert payload["watched_by"] == []
        assert payload["to_watch"] is True
        assert payload["runtime"] == "136 min"
        assert payload["director"] is None

    def test_duplicate_add_is_a_noop(self, make_client):
        existing = _movie_row(to_watch=False, watched_by=["kenny"])
        db = create_chainable_mock(_response([existing]))
        client = make_client(db)

        response = client.post(
            "/api/v1/movies",
            json={"imdb_id": "tt0133093", "title": "The Matrix", "year": "1999"},
        )

        assert response.status_code == 200
        assert response.json()["watched_by"] == ["kenny"]
        db.builder.insert.assert_not_called()

    def test_blank_imdb_id_is_rejected(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        response = client.post("/api/v1/movies", json={"imdb_id": " ", "title": "X"})

        assert response.status_code == 422
        db.builder.insert.assert_not_called()

    def test_insert_failure_surfaces_message(self, make_client):
        db = create_chainable_mock(_response([]))
        db.builder.execute.side_effect = [_response([]), RuntimeError("timeout")]
        client = make_client(db)

        response = client.post("/api/v1/movies", json={"imdb_id": "tt0133093", "title": "The Matrix"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to add movie"

    def test_add_by_imdb_id_fetches_details(self, make_client, monkeypatch: pytest.MonkeyPatch):
        from api.routers import movies as movies_router
        from movie_tracker.integrations.omdb.client import OmdbSearchResult

        calls: list[str] = []

        def fake_fetch(imdb_id, **_kwargs):  # noqa: ANN001, ANN003
            calls.append(imdb_id)
            return OmdbSearchResult(imdb_id=imdb_id, title="The Matrix", year="1999", poster="https://p/x.jpg")

        monkeypatch.setattr(movies_router, "fetch_search_result", fake_fetch)
        app.dependency_overrides[deps.get_omdb_api_key] = lambda: "test-key"
        db = create_chainable_mock(_response([]), _response([]), _response([_movie_row()]))
        client = make_client(db)

        response = client.post("/api/v1/movies/imdb/tt0133093")

        assert response.status_code == 201
        assert calls == ["tt0133093"]
        assert db.builder.insert.call_args.args[0]["image_url"] == "https://p/x.jpg"


class TestDeleteMovie:
    def test_delete_returns_204(self, make_client):
        db = create_chainable_mock(_response([_movie_row()]))
        client = make_client(db)

        response = client.delete(f"/api/v1/movies/{MOVIE_ID}")

        assert response.status_code == 204
        db.builder.eq.assert_called_once_with("id", MOVIE_ID)

    def test_delete_failure_surfaces_message(self, make_client):
        db = create_chainable_mock(_response([]))
        db.builder.execute.side_effect = RuntimeError("boom")
        client = make_client(db)

        response = client.delete(f"/api/v1/movies/{MOVIE_ID}")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to delete movie"


class TestToggles:
    def test_toggle_to_watch_flips_flag(self, make_client):
        db = create_chainable_mock(_response([_movie_row(to_watch=True)]), _response([_movie_row(to_watch=False)]))
        client = make_client(db)

        response = client.post(f"/api/v1/movies/{MOVIE_ID}/to-watch/toggle")

        assert response.status_code == 200
        assert response.json()["to_watch"] is False
        db.builder.update.assert_called_once_with({"to_watch": False})

    def test_toggle_watched_by_adds_user(self, make_client):
        db = create_chainable_mock(
            _response([_movie_row(watched_by=["nicole"])]),
            _response([_movie_row(watched_by=["kenny", "nicole"])]),
        )
        client = make_client(db)

        response = client.post(f"/api/v1/movies/{MOVIE_ID}/watched-by/kenny/toggle")

        assert response.status_code == 200
        db.builder.update.assert_called_once_with({"watched_by": ["kenny", "nicole"]})

    def test_toggle_watched_by_removes_user(self, make_client):
        db = create_chainable_mock(
            _response([_movie_row(watched_by=["kenny", "nicole"])]),
            _response([_movie_row(watched_by=["nicole"])]),
        )
        client = make_client(db)

        client.post(f"/api/v1/movies/{MOVIE_ID}/watched-by/kenny/toggle")

        db.builder.update.assert_called_once_with({"watched_by": ["nicole"]})

    def test_toggle_watched_by_unknown_user_returns_404(self, make_client):
        db = create_chainable_mock(_response([_movie_row()]))
        client = make_client(db)

        response = client.post(f"/api/v1/movies/{MOVIE_ID}/watched-by/stranger/toggle")

        assert response.status_code == 404
        db.builder.update.assert_not_called()

    def test_toggle_missing_movie_returns_404(self, make_client):
        db = create_chainable_mock(_response([]))
        client = make_client(db)

        response = client.post(f"/api/v1/movies/{MOVIE_ID}/to-watch/toggle")

        assert response.status_code == 404

    def test_set_watched_by_all(self, make_client):
        db = create_chainable_mock(_response([_movie_row(watched_by=["kenny", "nicole"])]))
        client = make_client(db)

        response = client.put(
            f"/api/v1/movies/{MOVIE_ID}/watched-by",
            json={"watched_by": ["nicole", "kenny", "nicole"]},
        )

        assert response.status_code == 200
        db.builder.update.assert_called_once_with({"watched_by": ["kenny", "nicole"]})

    def test_set_watched_by_none(self, make_client):
        db = create_chainable_mock(_response([_movie_row()]))
        client = make_client(db)

        response = client.put(f"/api/v1/movies/{MOVIE_ID}/watched-by", json={"watched_by": []})

        assert response.status_code == 200
        db.builder.update.assert_called_once_with({"watched_by": []})

    def test_set_watched_by_unknown_user_is_rejected(self, make_client):
        db = create_chainable_mock(_response([_movie_row()]))
        client = make_client(db)

        response = client.put(f"/api/v1/movies/{MOVIE_ID}/watched-by", json={"watched_by": ["bob"]})

        assert response.status_code == 422
        db.builder.update.assert_not_called()

    def test_update_failure_surfaces_message(self, make_client):
        db = create_chainable_mock(_response([]))
        db.builder.execute.side_effect = [_response([_movie_row()]), RuntimeError("boom")]
        client = make_client(db)

        response = client.post(f"/api/v1/movies/{MOVIE_ID}/to-watch/toggle")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to update to-watch status"


class TestWatchedView:
    def test_watched_view_filters_by_user(self, make_client):
        db = create_chainable_mock(_response([_movie_row(watched_by=["kenny"])]))
        client = make_client(db)

        response = client.get("/api/v1/users/Kenny/watched")

        assert response.status_code == 200
        assert [m["imdb_id"] for m in response.json()] == ["tt0133093"]
        db.builder.contains.assert_called_once_with("watched_by", ["kenny"])
        db.builder.order.assert_called_once_with("created_at", desc=True)
