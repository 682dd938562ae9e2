from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import make_post
from journal_api.api.deps import get_notification_email_backend
from journal_api.core.config import settings
from journal_api.core.security import create_access_token
from journal_api.db.database import get_db
from journal_api.main import app
from journal_api.models.base import utcnow

API = settings.API_V1_PREFIX


@pytest_asyncio.fixture
async def client(session_factory, email_backend):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_email_backend] = lambda: email_backend

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def open_thread(client, user, post):
    response = await client.post(
        f"{API}/threads",
        json={"post_id": str(post.id), "start_index": 0, "end_index": 3, "highlighted_content": "Hoy"},
        headers=auth(user),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_anonymous_requests_get_401(client, bobs_post):
    response = await client.get(f"{API}/notifications")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = await client.post(
        f"{API}/threads",
        json={"post_id": str(bobs_post.id), "start_index": 0, "end_index": 1, "highlighted_content": "H"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token_gets_401(client):
    response = await client.get(
        f"{API}/notifications/unread-count",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_comment_flow_over_http(client, email_backend, alice, bob, carol, bobs_post):
    thread = await open_thread(client, alice, bobs_post)

    response = await client.post(
        f"{API}/threads/{thread['id']}/comments",
        json={"body": "  ¿Por qué 'fui'?  "},
        headers=auth(alice),
    )
    assert response.status_code == 201
    comment = response.json()
    assert comment["body"] == "¿Por qué 'fui'?"
    assert comment["author"]["handle"] == "alice"
    assert comment["author_language_level"] == "beginner"
    assert {o["recipient_id"] for o in comment["delivery"]["outcomes"]} == {str(bob.id)}

    response = await client.get(f"{API}/notifications/unread-count", headers=auth(bob))
    assert response.json() == {"unread_count": 1}

    feed = (await client.get(f"{API}/notifications", headers=auth(bob))).json()
    assert feed[0]["translation_key"] == "threadComments"
    assert feed[0]["actors"][0]["handle"] == "alice"

    detail = await client.get(f"{API}/notifications/{feed[0]['id']}", headers=auth(bob))
    assert detail.status_code == 200
    assert detail.json()["thread_groups"][0]["comments"][0]["id"] == comment["id"]

    response = await client.post(f"{API}/notifications/{feed[0]['id']}/read", headers=auth(carol))
    assert response.status_code == 403

    response = await client.post(f"{API}/notifications/{feed[0]['id']}/read", headers=auth(bob))
    assert response.json()["read_status"] == "read"
    assert response.json()["changed"] is True

    response = await client.delete(f"{API}/notifications/{feed[0]['id']}", headers=auth(bob))
    assert response.status_code == 204
    assert (await client.get(f"{API}/notifications", headers=auth(bob))).json() == []


@pytest.mark.asyncio
async def test_error_statuses(client, alice, carol, bobs_post):
    thread = await open_thread(client, alice, bobs_post)
    comment = (await client.post(
        f"{API}/threads/{thread['id']}/comments", json={"body": "hola"}, headers=auth(alice)
    )).json()

    # Thread still has a comment
    response = await client.delete(f"{API}/threads/{thread['id']}", headers=auth(alice))
    assert response.status_code == 409

    response = await client.patch(f"{API}/comments/{comment['id']}", json={"body": "x"}, headers=auth(carol))
    assert response.status_code == 403

    response = await client.get(f"{API}/notifications/{bobs_post.id}", headers=auth(alice))
    assert response.status_code == 404
    assert response.json()["detail"] == "Notification not found"


@pytest.mark.asyncio
async def test_request_validation(client, alice, bobs_post):
    response = await client.post(
        f"{API}/threads",
        json={"post_id": str(bobs_post.id), "start_index": 5, "end_index": 2, "highlighted_content": "Hoy"},
        headers=auth(alice),
    )
    assert response.status_code == 422

    thread = await open_thread(client, alice, bobs_post)
    response = await client.post(
        f"{API}/threads/{thread['id']}/comments", json={"body": "   "}, headers=auth(alice)
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_social_endpoints(client, alice, bob, language, bobs_post):
    response = await client.post(f"{API}/users/{bob.id}/follow", headers=auth(alice))
    assert response.status_code == 201
    assert response.json()["following_id"] == str(bob.id)

    response = await client.post(f"{API}/users/{alice.id}/follow", headers=auth(alice))
    assert response.status_code == 409

    response = await client.post(f"{API}/posts/{bobs_post.id}/claps", headers=auth(alice))
    assert response.status_code == 201

    response = await client.post(
        f"{API}/posts",
        json={"language_id": str(language.id), "title": "Segundo día"},
        headers=auth(bob),
    )
    assert response.status_code == 201
    assert [o["recipient_id"] for o in response.json()["delivery"]["outcomes"]][0] == str(alice.id)

    mark_all = await client.post(f"{API}/notifications/mark-all-read", headers=auth(bob))
    assert mark_all.json() == {"marked": 2}


@pytest.mark.asyncio
async def test_profile_lists_posts_newest_first(client, db, alice, bob, language, bobs_post):
    older = await make_post(db, bob, language, title="Antes", created_at=utcnow() - timedelta(days=3))
    newer = await make_post(db, bob, language, title="Después", created_at=utcnow() + timedelta(minutes=1))
    await make_post(db, alice, language, title="De Alice")

    response = await client.get(f"{API}/users/{bob.id}/profile", headers=auth(alice))
    assert response.status_code == 200
    profile = response.json()
    assert profile["user"]["handle"] == "bob"
    assert profile["user"]["identifier"] == "bob"
    assert [p["id"] for p in profile["posts"]] == [str(newer.id), str(bobs_post.id), str(older.id)]
    assert profile["is_logged_in_user"] is False


@pytest.mark.asyncio
async def test_profile_knows_its_owner(client, alice, bob):
    own = (await client.get(f"{API}/users/{alice.id}/profile", headers=auth(alice))).json()
    assert own["is_logged_in_user"] is True
    assert own["user"]["identifier"] == "Alice"
    assert own["posts"] == []

    anonymous = await client.get(f"{API}/users/{alice.id}/profile")
    assert anonymous.status_code == 200
    assert anonymous.json()["is_logged_in_user"] is False

    response = await client.get(f"{API}/users/{uuid4()}/profile", headers=auth(bob))
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"
