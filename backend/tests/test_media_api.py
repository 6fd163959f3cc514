import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from app.db.session import get_db
from app.deps.auth import get_current_user_id
from app.main import create_app
from app.services.media_service import MediaNotFoundError, NotMediaOwnerError
from support import make_session_factory


def _fake_media_row(**overrides):
    base = {
        "id": uuid4(),
        "title": "Dune: Part Two",
        "description": None,
        "media_type": "movie",
        "release_year": 2024,
        "genres": "Science Fiction, Adventure",
        "age_restriction": "12",
        "creator_id": uuid4(),
        "created_at": datetime.now(timezone.utc),
    }
    base.update(overrides)
    return SimpleNamespace(**base)


def _fake_summary(**overrides) -> dict:
    summary = vars(_fake_media_row())
    summary.update({"creator_username": "alice", "average_rating": 4.5, "total_ratings": 2})
    summary.update(overrides)
    return summary


class TestMediaApi(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.app = create_app(session_factory=self.factory)
        self.client = TestClient(self.app)
        self.user_id = uuid4()
        self.app.dependency_overrides[get_db] = lambda: iter([object()])
        self.app.dependency_overrides[get_current_user_id] = lambda: self.user_id

    def tearDown(self) -> None:
        self.app.dependency_overrides.clear()
        self.factory.kw["bind"].dispose()

    def test_list_passes_filters_through(self) -> None:
        with patch("app.api.media.list_media", return_value=[_fake_summary()]) as list_media:
            response = self.client.get(
                "/api/media",
                params={"search": "dune", "type": "movie", "genre": "sci", "year": 2024, "sort": "rating"},
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["average_rating"], 4.5)
        filters = list_media.call_args.args[1]
        self.assertEqual(filters.search, "dune")
        self.assertEqual(filters.type, "movie")
        self.assertEqual(filters.year, 2024)
        self.assertEqual(filters.sort.value, "rating")

    def test_unknown_sort_reaches_service_as_title(self) -> None:
        with patch("app.api.media.list_media", return_value=[]) as list_media:
            self.client.get("/api/media", params={"sort": "popularity"})
        self.assertEqual(list_media.call_args.args[1].sort.value, "title")

    def test_get_media_item_returns_404_envelope(self) -> None:
        with patch("app.api.media.get_media_detail", side_effect=MediaNotFoundError()):
            response = self.client.get(f"/api/media/{uuid4()}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Media not found"})

    def test_get_media_item_passes_viewer(self) -> None:
        media_id = uuid4()
        with patch("app.api.media.get_media_detail", return_value=_fake_summary(id=media_id, ratings=[])) as detail:
            response = self.client.get(f"/api/media/{media_id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(detail.call_args.args[1:], (media_id, self.user_id))
        self.assertEqual(response.json()["ratings"], [])

    def test_create_requires_auth(self) -> None:
        del self.app.dependency_overrides[get_current_user_id]
        del self.app.dependency_overrides[get_db]
        response = self.client.post("/api/media", json={"title": "Hamilton", "media_type": "movie"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")

    def test_create_success(self) -> None:
        row = _fake_media_row(title="Hamilton", creator_id=self.user_id)
        with patch("app.api.media.create_media", return_value=row) as create_media:
            response = self.client.post(
                "/api/media",
                json={"title": "Hamilton", "media_type": "movie", "genres": ["Musical", "History"]},
            )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["title"], "Hamilton")
        payload = create_media.call_args.args[2]
        self.assertEqual(payload.genres, "Musical, History")

    def test_update_by_non_owner_is_403(self) -> None:
        with patch("app.api.media.update_media", side_effect=NotMediaOwnerError("Only the creator can update this media")):
            response = self.client.put(f"/api/media/{uuid4()}", json={"title": "X", "media_type": "movie"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "Only the creator can update this media"})


if __name__ == "__main__":
    unittest.main()
