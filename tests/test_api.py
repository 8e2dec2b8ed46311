# tests/test_api.py
from __future__ import annotations

import httpx
import pytest

from coastboard.core.database import get_db
from coastboard.main import app


@pytest.fixture()
async def client(db):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _login(client, email, password):
    response = await client.post("/auth/token", data={"username": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def test_root(client):
    response = await client.get("/")

    assert response.json() == {"message": "Coastboard API is running"}


async def test_register_login_and_me(client):
    registered = await client.post(
        "/auth/register",
        json={"name": "Founder", "email": "founder@example.com", "password": "longpassword"},
    )
    assert registered.json()["data"]["role"] == "admin"

    headers = await _login(client, "founder@example.com", "longpassword")
    me = await client.get("/auth/me", headers=headers)

    assert me.json()["data"]["email"] == "founder@example.com"


async def test_bad_password_is_401(client, member):
    response = await client.post("/auth/token", data={"username": member.email, "password": "nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


async def test_anonymous_calls_get_an_error_envelope(client):
    response = await client.get("/tasks/")

    assert response.status_code == 200
    assert response.json() == {"success": False, "error": "Unauthorized"}


async def test_member_status_update_over_http(client, member, make_task):
    task = await make_task(assignee_ids=[member.id], status="in_progress")
    headers = await _login(client, member.email, "password123")

    denied = await client.patch(f"/tasks/{task.id}", json={"title": "Nope"}, headers=headers)
    done = await client.patch(f"/tasks/{task.id}", json={"status": "done"}, headers=headers)

    assert denied.json() == {"success": False, "error": "Members can only update: status"}
    assert done.json()["data"]["status"] == "done"


async def test_cron_requires_shared_secret(client):
    rejected = await client.get("/cron/daily-cleanup", headers={"x-cron-secret": "guess"})
    accepted = await client.get("/cron/daily-cleanup", headers={"x-cron-secret": "cron-secret"})

    assert rejected.status_code == 401
    assert accepted.json() == {
        "success": True,
        "data": {"notifications": 0, "activities": 0, "stale_tasks": 0},
    }
