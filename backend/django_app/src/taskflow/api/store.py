from django.db import connection

from taskflow.api.models import Task
from taskflow.reminders import TaskSnapshot


def fetch_task(task_id):
    """Current committed state of a task, or None if it no longer exists.

    Called from reminder threads, which each get their own DB connection; it is
    closed again unless the caller is inside a transaction.
    """
    try:
        row = (
            Task.objects.filter(pk=task_id)
            .values('id', 'user_id', 'title', 'done', 'due_at')
            .first()
        )
    finally:
        if not connection.in_atomic_block:
            connection.close()
    if row is None:
        return None
    return TaskSnapshot(
        id=row['id'],
        owner_id=row['user_id'],
        title=row['title'],
        done=row['done'],
        due_at=row['due_at'],
    )
