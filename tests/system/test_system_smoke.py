"""
System smoke test: full API flow in-process with SQLite.
Verifies health, signup, publishing, forking, editing, deleting, feeds and forms.
"""

import uuid
from datetime import datetime
from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.database import get_db
from worldkernel.main import app


async def signup(client, api_prefix, username: str) -> dict:
    response = await client.post(
        f"{api_prefix}/auth/signup",
        json={
            "email": f"{username}@example.com",
            "password": "Password123",
            "username": username,
        },
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def publish(client, api_prefix, headers, **fields) -> dict:
    body = {"title": "Kernel", "description": "A small world.", "tags": "", "license": "open"}
    body.update(fields)
    response = await client.post(f"{api_prefix}/kernels", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


async def test_full_flow(client, api_prefix):
    """Signup, publish, fork, browse, edit and delete."""
    ursula = await signup(client, api_prefix, "ursula")
    vera = await signup(client, api_prefix, "vera")

    me = await client.get(f"{api_prefix}/auth/me", headers=ursula)
    assert me.json()["username"] == "ursula"

    root = await publish(
        client, api_prefix, ursula,
        title="The Drowned Library",
        tags="Fantasy, Cities, fantasy",
        license="attribution",
    )
    assert root["tags"] == ["fantasy", "cities", "fantasy"]
    assert root["license_label"] == "Attribution required"
    assert root["is_fork"] is False
    assert root["created_at"] == root["updated_at"]

    fork_response = await client.post(
        f"{api_prefix}/kernels/{root['id']}/fork",
        json={"title": "The Dry Library", "description": "Drained.", "tags": "cities"},
        headers=vera,
    )
    assert fork_response.status_code == 201
    fork = fork_response.json()
    assert fork["parent_id"] == root["id"]
    assert fork["is_fork"] is True

    feed = (await client.get(f"{api_prefix}/kernels")).json()
    assert [item["kernel"]["id"] for item in feed] == [fork["id"], root["id"]]
    assert feed[1]["fork_count"] == 1
    assert feed[1]["author"]["username"] == "ursula"

    detail = (await client.get(f"{api_prefix}/kernels/{fork['id']}", headers=vera)).json()
    assert detail["parent"]["id"] == root["id"]
    assert detail["is_author"] is True

    children = (await client.get(f"{api_prefix}/kernels/{root['id']}/children")).json()
    assert [child["id"] for child in children] == [fork["id"]]

    tag_page = (await client.get(f"{api_prefix}/tags/Cities")).json()
    assert tag_page["tag"] == "cities"
    assert len(tag_page["kernels"]) == 2

    profile_page = (await client.get(f"{api_prefix}/profiles/vera")).json()
    assert [item["kernel"]["id"] for item in profile_page["kernels"]] == [fork["id"]]

    edited = await client.patch(
        f"{api_prefix}/kernels/{root['id']}",
        json={"title": "The Sunken Library", "tags": "Sea"},
        headers=ursula,
    )
    assert edited.status_code == 200
    assert edited.json()["title"] == "The Sunken Library"
    assert edited.json()["tags"] == ["sea"]
    assert edited.json()["license"] == "attribution"

    deleted = await client.delete(f"{api_prefix}/kernels/{root['id']}", headers=ursula)
    assert deleted.status_code == 204

    gone = await client.get(f"{api_prefix}/kernels/{root['id']}")
    assert gone.status_code == 404
    orphan = (await client.get(f"{api_prefix}/kernels/{fork['id']}")).json()
    assert orphan["kernel"]["parent_id"] is None
    assert orphan["parent"] is None


async def test_login(client, api_prefix):
    await signup(client, api_prefix, "ursula")

    ok = await client.post(
        f"{api_prefix}/auth/login",
        json={"email": "ursula@example.com", "password": "Password123"},
    )
    bad = await client.post(
        f"{api_prefix}/auth/login",
        json={"email": "ursula@example.com", "password": "Wrong12345"},
    )

    assert ok.status_code == 200
    assert ok.json()["profile"]["username"] == "ursula"
    assert bad.status_code == 401


async def test_duplicate_signup_conflicts(client, api_prefix):
    await signup(client, api_prefix, "ursula")

    response = await client.post(
        f"{api_prefix}/auth/signup",
        json={"email": "ursula@example.com", "password": "Password123", "username": "other"},
    )

    assert response.status_code == 409


async def test_publish_requires_login(client, api_prefix):
    response = await client.post(
        f"{api_prefix}/kernels",
        json={"title": "T", "description": "D"},
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_validation_message_reaches_client(client, api_prefix, db_session, author, auth_headers):
    response = await client.post(
        f"{api_prefix}/kernels",
        json={"title": "x" * 201, "description": "D"},
        headers=auth_headers(author),
    )

    assert response.status_code == 422
    assert response.json() == {
        "detail": "Title must be 200 characters or less",
        "field": "title",
    }


async def test_blank_title_is_rejected(client, api_prefix, db_session, author, auth_headers):
    response = await client.post(
        f"{api_prefix}/kernels",
        json={"title": "", "description": "D"},
        headers=auth_headers(author),
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Validation error"


async def test_non_author_cannot_edit_or_delete(
    client, api_prefix, db_session, author, other_user, create_kernel, auth_headers
):
    kernel = await create_kernel(db_session, author, title="Mine")

    edit = await client.patch(
        f"{api_prefix}/kernels/{kernel.id}",
        json={"title": "Theirs"},
        headers=auth_headers(other_user),
    )
    delete = await client.delete(
        f"{api_prefix}/kernels/{kernel.id}",
        headers=auth_headers(other_user),
    )

    assert edit.status_code == 403
    assert delete.status_code == 403
    detail = (await client.get(f"{api_prefix}/kernels/{kernel.id}")).json()
    assert detail["kernel"]["title"] == "Mine"


async def test_fork_of_missing_kernel(client, api_prefix, db_session, author, auth_headers):
    response = await client.post(
        f"{api_prefix}/kernels/{uuid.uuid4()}/fork",
        json={"title": "T", "description": "D"},
        headers=auth_headers(author),
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Kernel not found"


async def test_unknown_profile(client, api_prefix):
    response = await client.get(f"{api_prefix}/profiles/nobody")

    assert response.status_code == 404


async def test_feed_limit(client, api_prefix, db_session, author, create_kernel):
    for minute in range(3):
        await create_kernel(db_session, author, minutes=minute)

    response = await client.get(f"{api_prefix}/kernels", params={"limit": 2})

    assert len(response.json()) == 2


class TestForms:
    """Form state endpoints."""

    async def test_anonymous_is_redirected_to_login(self, client, api_prefix):
        response = await client.get(f"{api_prefix}/forms/kernel/new")

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login?redirect=%2Fkernel%2Fnew"

    async def test_anonymous_fork_redirect_keeps_kernel(self, client, api_prefix):
        kernel_id = uuid.uuid4()

        response = await client.get(f"{api_prefix}/forms/kernel/{kernel_id}/fork")

        assert response.status_code == 303
        assert response.headers["location"].endswith(f"%2Fkernel%2F{kernel_id}%2Ffork")

    async def test_create_form(self, client, api_prefix, db_session, author, auth_headers):
        response = await client.get(
            f"{api_prefix}/forms/kernel/new", headers=auth_headers(author)
        )

        assert response.status_code == 200
        state = response.json()
        assert state["mode"] == "create"
        assert state["submit_path"] == f"{api_prefix}/kernels"

    async def test_fork_form_is_prefilled(
        self, client, api_prefix, db_session, author, other_user, create_kernel, auth_headers
    ):
        kernel = await create_kernel(db_session, author, title="Salt Roads", tags=["trade", "desert"])

        response = await client.get(
            f"{api_prefix}/forms/kernel/{kernel.id}/fork", headers=auth_headers(other_user)
        )

        state = response.json()
        assert state["heading"] == "Fork: Salt Roads"
        assert state["initial"]["tags_input"] == "trade, desert"
        assert state["parent"]["id"] == str(kernel.id)

    async def test_edit_form_is_for_author_only(
        self, client, api_prefix, db_session, author, other_user, create_kernel, auth_headers
    ):
        kernel = await create_kernel(db_session, author)

        mine = await client.get(
            f"{api_prefix}/forms/kernel/{kernel.id}/edit", headers=auth_headers(author)
        )
        theirs = await client.get(
            f"{api_prefix}/forms/kernel/{kernel.id}/edit", headers=auth_headers(other_user)
        )

        assert mine.status_code == 200
        assert mine.json()["submit_method"] == "PATCH"
        assert theirs.status_code == 403


class TestNavigation:
    """Navigation bar endpoint."""

    async def test_anonymous(self, client, api_prefix):
        response = await client.get(f"{api_prefix}/navigation", params={"path": "/kernel/new"})

        nav = response.json()
        assert nav["authenticated"] is False
        assert nav["redirect_to"] == "/auth/login?redirect=%2Fkernel%2Fnew"

    async def test_signed_in(self, client, api_prefix, db_session, author, auth_headers):
        response = await client.get(
            f"{api_prefix}/navigation",
            params={"path": "/auth/login"},
            headers=auth_headers(author),
        )

        nav = response.json()
        assert nav["authenticated"] is True
        assert nav["profile"]["username"] == "ursula"
        assert nav["redirect_to"] == "/"


async def test_unreachable_datastore_is_retryable(client, api_prefix):
    session = AsyncMock()
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def broken_db():
        yield session

    app.dependency_overrides[get_db] = broken_db
    try:
        response = await client.get(f"{api_prefix}/kernels")
    finally:
        app.dependency_overrides.pop(get_db, None)

    assert response.status_code == 503
    body = response.json()
    assert body["retryable"] is True
    assert body["request_id"] == response.headers["X-Request-ID"]


async def _connection_lost_on_commit(self):
    raise OperationalError("COMMIT", {}, Exception("connection lost"))


async def test_failed_commit_on_publish_is_retryable(
    client, api_prefix, db_session, author, auth_headers, monkeypatch
):
    headers = auth_headers(author)
    monkeypatch.setattr(AsyncSession, "commit", _connection_lost_on_commit)

    response = await client.post(
        f"{api_prefix}/kernels",
        json={"title": "T", "description": "D"},
        headers=headers,
    )
    monkeypatch.undo()

    assert response.status_code == 503
    assert response.json()["retryable"] is True
    feed = await client.get(f"{api_prefix}/kernels")
    assert feed.json() == []


async def test_failed_commit_on_edit_keeps_old_values(
    client, api_prefix, db_session, author, create_kernel, auth_headers, monkeypatch
):
    kernel = await create_kernel(db_session, author, title="Before")
    headers = auth_headers(author)
    monkeypatch.setattr(AsyncSession, "commit", _connection_lost_on_commit)

    response = await client.patch(
        f"{api_prefix}/kernels/{kernel.id}",
        json={"title": "After"},
        headers=headers,
    )
    monkeypatch.undo()

    assert response.status_code == 503
    detail = (await client.get(f"{api_prefix}/kernels/{kernel.id}")).json()
    assert detail["kernel"]["title"] == "Before"


async def test_failed_commit_on_delete_keeps_kernel(
    client, api_prefix, db_session, author, create_kernel, auth_headers, monkeypatch
):
    kernel = await create_kernel(db_session, author)
    headers = auth_headers(author)
    monkeypatch.setattr(AsyncSession, "commit", _connection_lost_on_commit)

    response = await client.delete(f"{api_prefix}/kernels/{kernel.id}", headers=headers)
    monkeypatch.undo()

    assert response.status_code == 503
    assert (await client.get(f"{api_prefix}/kernels/{kernel.id}")).status_code == 200


async def test_error_responses_echo_request_id(client, api_prefix):
    response = await client.get(
        f"{api_prefix}/kernels/{uuid.uuid4()}",
        headers={"X-Request-ID": "req-42"},
    )

    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "req-42"


async def test_timestamps_render_the_same_after_reload(
    client, api_prefix, db_session, author, auth_headers
):
    created = await publish(client, api_prefix, auth_headers(author))

    detail = (await client.get(f"{api_prefix}/kernels/{created['id']}")).json()

    assert detail["kernel"]["created_at"] == created["created_at"]
    assert detail["kernel"]["updated_at"] == created["updated_at"]
    stamp = datetime.fromisoformat(created["created_at"].replace("Z", "+00:00"))
    assert stamp.utcoffset().total_seconds() == 0
