from __future__ import annotations

from datetime import datetime, timezone

import pytest
from rest_framework.test import APIClient

from taskflow.api.models import Task

DUE = "2030-05-01T09:00:00Z"


def create(client: APIClient, **payload):
    return client.post("/api/tasks", payload, format="json")


def test_create_without_due_time_does_not_notify(
    auth_client: APIClient, user, offered_ids, django_capture_on_commit_callbacks
) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        res = create(auth_client, title="buy milk")

    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "buy milk"
    assert body["done"] is False
    assert body["user_id"] == user["id"]
    assert "due_at" not in body
    assert "created_at" in body
    assert offered_ids() == []


def test_create_with_due_time_notifies_after_commit(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks
) -> None:
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        res = create(auth_client, title="pay rent", due_at=DUE)

    assert res.status_code == 201
    assert len(callbacks) == 1
    task_id = res.json()["id"]
    assert offered_ids() == [task_id]
    assert Task.objects.get(pk=task_id).due_at == datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("due_at", ["", "tomorrow", "2030-05-01T09:00:00", None])
def test_create_ignores_unusable_due_time(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks, due_at
) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        res = create(auth_client, title="x", due_at=due_at)

    assert res.status_code == 201
    assert "due_at" not in res.json()
    assert offered_ids() == []


def test_create_requires_title(auth_client: APIClient) -> None:
    res = create(auth_client, title="   ")

    assert res.status_code == 400
    assert res.json() == {"error": "title required"}


def test_list_returns_own_tasks_newest_first(
    auth_client: APIClient, make_user, offered_ids
) -> None:
    first = create(auth_client, title="first").json()
    second = create(auth_client, title="second").json()

    other = make_user("bob@example.com")
    other_client = APIClient()
    other_client.credentials(HTTP_AUTHORIZATION=f"Bearer {other['token']}")
    create(other_client, title="not yours")

    res = auth_client.get("/api/tasks/")

    assert res.status_code == 200
    assert [t["id"] for t in res.json()] == [second["id"], first["id"]]


def test_update_due_time_notifies(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks
) -> None:
    task = create(auth_client, title="dentist").json()

    with django_capture_on_commit_callbacks(execute=True):
        res = auth_client.patch(
            f"/api/tasks/{task['id']}", {"due_at": "2030-01-01T08:00:00+02:00"}, format="json"
        )

    assert res.status_code == 200
    assert res.json()["due_at"] == "2030-01-01T06:00:00+00:00"
    assert offered_ids() == [task["id"]]


def test_update_title_of_task_with_due_time_notifies_again(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks
) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        task = create(auth_client, title="gym", due_at=DUE).json()
        auth_client.patch(f"/api/tasks/{task['id']}", {"title": "gym!"}, format="json")

    # Same id twice; the queue does not deduplicate.
    assert offered_ids() == [task["id"], task["id"]]


def test_mark_done_does_not_notify(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks
) -> None:
    task = create(auth_client, title="gym", due_at=DUE).json()
    offered_ids()

    with django_capture_on_commit_callbacks(execute=True):
        res = auth_client.patch(f"/api/tasks/{task['id']}", {"done": True}, format="json")

    assert res.status_code == 200
    assert res.json()["done"] is True
    assert offered_ids() == []


def test_clear_due_time_with_empty_string(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks
) -> None:
    task = create(auth_client, title="gym", due_at=DUE).json()
    offered_ids()

    with django_capture_on_commit_callbacks(execute=True):
        res = auth_client.patch(f"/api/tasks/{task['id']}", {"due_at": ""}, format="json")

    assert res.status_code == 200
    assert "due_at" not in res.json()
    assert Task.objects.get(pk=task["id"]).due_at is None
    assert offered_ids() == []


def test_update_ignores_unparsable_due_time(auth_client: APIClient, offered_ids) -> None:
    task = create(auth_client, title="gym", due_at=DUE).json()

    res = auth_client.patch(f"/api/tasks/{task['id']}", {"due_at": "soon"}, format="json")

    assert res.status_code == 200
    assert res.json()["due_at"] == "2030-05-01T09:00:00+00:00"


def test_update_someone_elses_task_is_404(auth_client: APIClient, make_user) -> None:
    other = make_user("bob@example.com")
    other_client = APIClient()
    other_client.credentials(HTTP_AUTHORIZATION=f"Bearer {other['token']}")
    task = create(other_client, title="private").json()

    res = auth_client.patch(f"/api/tasks/{task['id']}", {"title": "mine"}, format="json")

    assert res.status_code == 404
    assert res.json() == {"error": "task not found"}
    assert Task.objects.get(pk=task["id"]).title == "private"


def test_delete(auth_client: APIClient, offered_ids) -> None:
    task = create(auth_client, title="old", due_at=DUE).json()

    res = auth_client.delete(f"/api/tasks/{task['id']}")
    assert res.status_code == 200
    assert res.json() == {"deleted": str(task["id"])}
    assert not Task.objects.filter(pk=task["id"]).exists()

    again = auth_client.delete(f"/api/tasks/{task['id']}")
    assert again.status_code == 404
    assert again.json() == {"error": "task not found"}


@pytest.mark.parametrize("done", ["false", "0", 1, "yes"])
def test_update_rejects_non_boolean_done(
    auth_client: APIClient, offered_ids, django_capture_on_commit_callbacks, done
) -> None:
    task = create(auth_client, title="gym", due_at=DUE).json()

    with django_capture_on_commit_callbacks(execute=True):
        res = auth_client.patch(
            f"/api/tasks/{task['id']}", {"done": done, "title": "renamed"}, format="json"
        )

    assert res.status_code == 400
    assert res.json() == {"error": "done must be a boolean"}
    stored = Task.objects.get(pk=task["id"])
    assert stored.done is False
    assert stored.title == "gym"
    assert offered_ids() == []
