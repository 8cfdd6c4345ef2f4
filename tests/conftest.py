from __future__ import annotations

import pytest
from django.apps import apps
from rest_framework.test import APIClient


@pytest.fixture()
def offered_ids():
    """
    Drain the reminder queue the task views offer into.

    The dispatcher is not started under tests, so whatever the views offer stays
    queued until a test collects it.
    """
    queue = apps.get_app_config("api").reminders.queue

    def drain() -> list:
        ids = []
        while (task_id := queue.get(block=False)) is not None:
            ids.append(task_id)
        return ids

    drain()
    yield drain
    drain()


@pytest.fixture()
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture()
def make_user(db, api_client: APIClient):
    def _make_user(email: str = "ada@example.com", password: str = "secret123") -> dict:
        res = api_client.post("/auth/register", {"email": email, "password": password}, format="json")
        assert res.status_code == 201, res.content
        login = api_client.post("/auth/login", {"email": email, "password": password}, format="json")
        assert login.status_code == 200, login.content
        return {"id": res.json()["id"], "email": email, "token": login.json()["token"]}

    return _make_user


@pytest.fixture()
def user(make_user) -> dict:
    return make_user()


@pytest.fixture()
def auth_client(user) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {user['token']}")
    return client
