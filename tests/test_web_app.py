"""
Tests for the IdeaVault Web Application.

Tests the Flask pages, form mutations, JSON API endpoints, template filters,
and error handling.
"""

import io
from datetime import datetime
from unittest.mock import Mock, patch

import pytest

from ideavault.auth import MockAuth, SupabaseAuth
from ideavault.errors import AuthError, StorageError, StoreUnavailable, Unauthenticated
from ideavault.models import Mood, Status
from ideavault.services import IdeaService, LoadResult
from tests.test_config import CONFIG, MESSAGES, TEST_DATA

from web.app import app, format_date, format_percent, mood_icon


OWNER = CONFIG["owner_a"]


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def client():
    """Flask test client."""
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def signed_in(client):
    """Test client with user-a in the session."""
    with client.session_transaction() as sess:
        sess["auth"] = {
            "user_id": OWNER,
            "email": TEST_DATA["users"]["email"],
            "access_token": "",
            "refresh_token": "",
        }
    return client


@pytest.fixture
def backend(seeded_store, image_store):
    """Route get_idea_service() to in-memory stores holding the sample rows."""
    def factory(auth_session):
        owner = auth_session.user_id if auth_session else None
        return IdeaService(seeded_store, image_store, owner)

    with patch("web.app.get_idea_service", side_effect=factory):
        yield seeded_store


@pytest.fixture
def mock_service():
    """Route get_idea_service() to a Mock service."""
    service = Mock(spec=IdeaService)
    with patch("web.app.get_idea_service", return_value=service):
        yield service


def _idea(store, idea_id):
    return next(i for i in store.list_ideas(OWNER) if i.id == idea_id)


# =============================================================================
# Test Template Filters
# =============================================================================

class TestTemplateFilters:
    """Tests for Jinja2 template filters."""

    def test_format_date_with_datetime(self):
        assert format_date(datetime(2024, 3, 10, 9, 15)) == "Mar 10, 2024"

    def test_format_date_with_none(self):
        assert format_date(None) == "Unknown"

    def test_format_date_with_string(self):
        assert format_date("2024-03-10") == "2024-03-10"

    def test_format_percent(self):
        assert format_percent(33.333) == "33%"
        assert format_percent(0.0) == "0%"
        assert format_percent(None) == "0%"

    def test_mood_icon(self):
        assert mood_icon("wild") == "🔥"
        assert mood_icon(Mood.HAPPY) == "😊"
        assert mood_icon("grumpy") == Mood.UNKNOWN.icon


# =============================================================================
# Test Auth Routes
# =============================================================================

@pytest.mark.web
class TestAuthRoutes:
    """Tests for sign in, sign up and sign out."""

    def test_pages_redirect_to_signin_when_signed_out(self, client):
        for path in ("/", "/calendar", "/dashboard"):
            response = client.get(path)
            assert response.status_code == 302
            assert "/signin" in response.headers["Location"]

    def test_signin_page(self, client):
        response = client.get("/signin")
        assert response.status_code == 200
        assert b"Sign in" in response.data

    def test_signin_stores_session(self, client):
        with patch("web.app.get_auth", return_value=MockAuth()):
            response = client.post("/signin", data={
                "email": TEST_DATA["users"]["email"],
                "password": TEST_DATA["users"]["password"],
            })

        assert response.status_code == 302
        with client.session_transaction() as sess:
            assert sess["auth"]["email"] == TEST_DATA["users"]["email"]

    def test_signin_rejected_shows_error(self, client):
        auth = Mock()
        auth.sign_in.side_effect = AuthError("Invalid login credentials")

        with patch("web.app.get_auth", return_value=auth):
            response = client.post("/signin", data={"email": "a@b.c", "password": "x"})

        assert response.status_code == 200
        assert b"Invalid login credentials" in response.data
        with client.session_transaction() as sess:
            assert "auth" not in sess

    def test_signin_garbled_auth_response_shows_error(self, client):
        """
        GIVEN: The auth service answers sign-in with a body that is not JSON
        WHEN: POST /signin
        THEN: The sign-in page is re-rendered with an error, not a 500
        """
        auth = SupabaseAuth(url=CONFIG["supabase_url"], api_key=CONFIG["supabase_key"])
        garbled = Mock(status_code=200, text="<html></html>")
        garbled.json.side_effect = ValueError("No JSON")

        with patch("web.app.get_auth", return_value=auth), \
             patch("ideavault.auth.supabase_auth.requests.post", return_value=garbled):
            response = client.post("/signin", data={"email": "a@b.c", "password": "x"})

        assert response.status_code == 200
        assert b"invalid JSON" in response.data

    def test_signup_confirmation_message(self, client):
        auth = Mock()
        auth.sign_up.return_value = True

        with patch("web.app.get_auth", return_value=auth):
            response = client.post(
                "/signup",
                data={"email": "a@b.c", "password": "secret1"},
                follow_redirects=True,
            )

        assert MESSAGES["signup_confirmation"].encode() in response.data

    def test_signout_clears_session(self, signed_in):
        with patch("web.app.get_auth", return_value=MockAuth()):
            response = signed_in.post("/signout")

        assert response.status_code == 302
        with signed_in.session_transaction() as sess:
            assert "auth" not in sess

    def test_signin_without_backend(self, client):
        with patch("web.app.get_auth", return_value=None):
            response = client.post("/signin", data={"email": "a@b.c", "password": "x"})
        assert MESSAGES["not_configured"].encode() in response.data


# =============================================================================
# Test Page Routes
# =============================================================================

@pytest.mark.web
class TestPages:
    """Tests for the list, calendar and dashboard pages."""

    def test_index_lists_ideas(self, signed_in, backend):
        response = signed_in.get("/")

        assert response.status_code == 200
        assert b"Build a kayak" in response.data
        assert b"Board game night" in response.data

    def test_index_status_filter(self, signed_in, backend):
        response = signed_in.get("/?status=completed")

        assert b"Write a song about rain" in response.data
        assert b"Build a kayak" not in response.data

    def test_index_favorite_filter(self, signed_in, backend):
        response = signed_in.get("/?favorite=1")

        assert b"Build a kayak" in response.data
        assert b"Plant a herb garden" in response.data
        assert b"Board game night" not in response.data

    def test_index_load_failure_shows_empty_state(self, signed_in, mock_service):
        mock_service.load.return_value = LoadResult(ideas=[], error="Data store unreachable")

        response = signed_in.get("/")

        assert response.status_code == 200
        assert b"Could not load your ideas" in response.data
        assert b"No ideas yet" in response.data

    def test_not_configured(self, signed_in):
        with patch("web.app.get_idea_service", return_value=None):
            response = signed_in.get("/")
        assert MESSAGES["not_configured"].encode() in response.data

    def test_calendar_month(self, signed_in, backend):
        response = signed_in.get("/calendar?year=2024&month=2")

        assert response.status_code == 200
        assert b"March 2024" in response.data
        assert b"Build a kayak" in response.data

    def test_calendar_bad_month_falls_back(self, signed_in, backend):
        response = signed_in.get("/calendar?year=2024&month=14")
        assert response.status_code == 200

    def test_dashboard(self, signed_in, backend):
        response = signed_in.get("/dashboard?period=month")

        assert response.status_code == 200
        assert b"2024-03" in response.data
        assert b"#diy" in response.data

    def test_expired_session_redirects_to_signin(self, signed_in, mock_service):
        mock_service.load.side_effect = Unauthenticated("JWT expired")

        response = signed_in.get("/")

        assert response.status_code == 302
        assert "/signin" in response.headers["Location"]
        with signed_in.session_transaction() as sess:
            assert "auth" not in sess


# =============================================================================
# Test Form Mutations
# =============================================================================

@pytest.mark.web
class TestMutations:
    """Tests for form posts; each redirects back for a full reload."""

    def test_create_idea(self, signed_in, backend):
        response = signed_in.post("/ideas", data={
            "text": "Learn to juggle",
            "tags": "skills, fun",
            "mood": "playful",
        })

        assert response.status_code == 302
        idea = backend.list_ideas(OWNER)[0]
        assert idea.text == "Learn to juggle"
        assert idea.tags == ["skills", "fun"]
        assert idea.status is Status.OPEN

    def test_create_idea_with_image(self, signed_in, backend, image_store):
        response = signed_in.post(
            "/ideas",
            data={
                "text": "Kayak sketch",
                "mood": "wild",
                "image": (io.BytesIO(TEST_DATA["png_bytes"]), "kayak.png", "image/png"),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 302
        assert image_store.count() == 1
        assert backend.list_ideas(OWNER)[0].image_url.startswith("/dev-images/")

    def test_create_invalid_flashes_retry(self, signed_in, backend):
        response = signed_in.post("/ideas", data={"text": "  "}, follow_redirects=True)

        assert MESSAGES["retry_hint"].encode() in response.data
        assert len(backend.list_ideas(OWNER)) == 4

    def test_create_store_failure_flashes_retry(self, signed_in, mock_service):
        mock_service.create.side_effect = StoreUnavailable("timeout")
        mock_service.load.return_value = LoadResult()

        response = signed_in.post("/ideas", data={"text": "x"}, follow_redirects=True)

        assert MESSAGES["retry_hint"].encode() in response.data

    def test_swipe_right_sets_favorite(self, signed_in, backend):
        signed_in.post("/ideas/idea-3/favorite", data={"direction": "right"})
        assert _idea(backend, "idea-3").favorite is True

    def test_swipe_left_clears_favorite(self, signed_in, backend):
        signed_in.post("/ideas/idea-1/favorite", data={"direction": "left"})
        assert _idea(backend, "idea-1").favorite is False

    def test_change_status(self, signed_in, backend):
        signed_in.post("/ideas/idea-1/status", data={"status": "completed"})
        assert _idea(backend, "idea-1").status is Status.COMPLETED

    def test_full_edit(self, signed_in, backend):
        signed_in.post("/ideas/idea-2", data={
            "text": "Write two songs",
            "tags": "music, rain",
            "mood": "happy",
            "favorite": "on",
            "remove_image": "on",
        })

        idea = _idea(backend, "idea-2")
        assert idea.text == "Write two songs"
        assert idea.tags == ["music", "rain"]
        assert idea.mood is Mood.HAPPY
        assert idea.favorite is True
        assert idea.image_url is None
        assert idea.status is Status.COMPLETED

    def test_delete(self, signed_in, backend):
        signed_in.post("/ideas/idea-1/delete")
        assert [i.id for i in backend.list_ideas(OWNER)] == ["idea-2", "idea-3", "idea-4"]

    def test_redirects_to_next(self, signed_in, backend):
        response = signed_in.post("/ideas/idea-1/delete", data={"next": "/?status=open"})
        assert response.headers["Location"].endswith("/?status=open")

    def test_external_next_is_ignored(self, signed_in, backend):
        response = signed_in.post("/ideas/idea-1/delete", data={"next": "//evil.example.com/"})
        assert "evil" not in response.headers["Location"]

    def test_other_owner_cannot_mutate(self, client, backend):
        with client.session_transaction() as sess:
            sess["auth"] = {"user_id": CONFIG["owner_b"], "email": "bob@example.com"}

        client.post("/ideas/idea-1/delete")
        client.post("/ideas/idea-3/favorite", data={"direction": "right"})

        assert backend.count() == 4
        assert _idea(backend, "idea-3").favorite is False


# =============================================================================
# Test JSON API
# =============================================================================

@pytest.mark.web
class TestApi:
    """Tests for the JSON endpoints."""

    def test_requires_session(self, client):
        response = client.get("/api/ideas")
        assert response.status_code == 401

    def test_list(self, signed_in, backend):
        response = signed_in.get("/api/ideas")

        assert response.status_code == 200
        assert [i["id"] for i in response.get_json()] == ["idea-2", "idea-1", "idea-3", "idea-4"]

    def test_list_filters(self, signed_in, backend):
        assert [i["id"] for i in signed_in.get("/api/ideas?tags=diy").get_json()] == ["idea-1", "idea-3"]
        assert [i["id"] for i in signed_in.get("/api/ideas?mood=dreamy").get_json()] == ["idea-2"]
        assert [i["id"] for i in signed_in.get("/api/ideas?favorite=true").get_json()] == ["idea-1", "idea-4"]
        assert [i["id"] for i in signed_in.get("/api/ideas?status=discarded").get_json()] == ["idea-3"]

    def test_create(self, signed_in, backend):
        response = signed_in.post("/api/ideas", json={
            "text": "Build a kayak",
            "tags": ["outdoors", "diy"],
            "mood": "wild",
        })

        assert response.status_code == 201
        body = response.get_json()
        assert body["idea"]["status"] == "open"
        assert body["idea"]["user_id"] == OWNER

    def test_create_invalid(self, signed_in, backend):
        response = signed_in.post("/api/ideas", json={"text": "", "mood": "wild"})
        assert response.status_code == 400

    def test_create_requires_json_object(self, signed_in, backend):
        response = signed_in.post("/api/ideas", data="not json")
        assert response.status_code == 400

    def test_update(self, signed_in, backend):
        response = signed_in.put("/api/ideas/idea-1", json={"status": "completed"})

        assert response.status_code == 200
        assert response.get_json()["idea"]["status"] == "completed"
        assert response.get_json()["idea"]["text"] == "Build a kayak"

    def test_update_immutable_field(self, signed_in, backend):
        response = signed_in.put("/api/ideas/idea-1", json={"user_id": CONFIG["owner_b"]})
        assert response.status_code == 400

    def test_update_missing(self, signed_in, backend):
        response = signed_in.put("/api/ideas/nope", json={"favorite": True})
        assert response.status_code == 404

    @pytest.mark.parametrize("payload", [
        {"text": 123},
        {"text": "ok", "tags": 5},
        {"text": "ok", "favorite": "false"},
    ])
    def test_create_wrong_types_are_400(self, signed_in, backend, payload):
        """
        GIVEN: A JSON body whose fields have the wrong types
        WHEN: POST /api/ideas
        THEN: 400 and nothing is stored
        """
        response = signed_in.post("/api/ideas", json=payload)

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert backend.count() == 4

    def test_update_wrong_tags_type_is_400(self, signed_in, backend):
        response = signed_in.put("/api/ideas/idea-1", json={"tags": 7})

        assert response.status_code == 400
        assert _idea(backend, "idea-1").tags == ["outdoors", "diy"]

    def test_update_string_favorite_is_rejected(self, signed_in, backend):
        """
        GIVEN: idea-2 is not a favorite
        WHEN: PUT with favorite as the string "false"
        THEN: 400 and the flag stays False
        """
        assert _idea(backend, "idea-2").favorite is False

        response = signed_in.put("/api/ideas/idea-2", json={"favorite": "false"})

        assert response.status_code == 400
        assert _idea(backend, "idea-2").favorite is False

    def test_update_bool_favorite(self, signed_in, backend):
        response = signed_in.put("/api/ideas/idea-2", json={"favorite": True})

        assert response.status_code == 200
        assert _idea(backend, "idea-2").favorite is True

    def test_delete(self, signed_in, backend):
        response = signed_in.delete("/api/ideas/idea-1")

        assert response.status_code == 200
        assert backend.count() == 3

    def test_stats(self, signed_in, backend):
        response = signed_in.get("/api/stats?period=month")
        data = response.get_json()

        assert response.status_code == 200
        assert data["total"] == 4
        assert data["timeline"] == [{"key": "2024-02", "count": 1}, {"key": "2024-03", "count": 3}]
        assert data["status"] == {"open": 2, "completed": 1, "discarded": 1}

    def test_stats_bad_period(self, signed_in, backend):
        assert signed_in.get("/api/stats?period=year").status_code == 400

    def test_store_unavailable_is_503(self, signed_in, mock_service):
        mock_service.list_ideas.side_effect = StoreUnavailable("timeout")
        assert signed_in.get("/api/ideas").status_code == 503

    def test_storage_error_is_502(self, signed_in, mock_service):
        mock_service.create.side_effect = StorageError("bucket missing")
        assert signed_in.post("/api/ideas", json={"text": "x"}).status_code == 502

    def test_rejected_token_is_401(self, signed_in, mock_service):
        mock_service.list_ideas.side_effect = Unauthenticated("JWT expired")
        assert signed_in.get("/api/ideas").status_code == 401


# =============================================================================
# Test Development Images
# =============================================================================

class TestDevImages:
    """Tests for serving in-memory uploads."""

    def test_serves_uploaded_image(self, client, image_store):
        url = image_store.upload_image(b"png-bytes", "a.png", "image/png")

        with patch("web.app._dev_images", image_store), \
             patch("web.app.is_backend_configured", return_value=False):
            response = client.get(url)

        assert response.status_code == 200
        assert response.data == b"png-bytes"
        assert response.mimetype == "image/png"

    def test_missing_image_404(self, client):
        with patch("web.app.is_backend_configured", return_value=False):
            assert client.get("/dev-images/nope.png").status_code == 404

    def test_disabled_with_backend(self, client):
        with patch("web.app.is_backend_configured", return_value=True):
            assert client.get("/dev-images/anything.png").status_code == 404
