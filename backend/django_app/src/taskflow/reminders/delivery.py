from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict

logger = logging.getLogger("taskflow.reminders")


@dataclass(frozen=True)
class Reminder:
    """One reminder firing, as handed to a notifier."""

    task_id: Any
    owner_id: Any
    title: str
    due_at: datetime
    fired_at: datetime

    def as_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "owner_id": self.owner_id,
            "title": self.title,
            "due_at": self.due_at.isoformat(),
            "fired_at": self.fired_at.isoformat(),
        }


Notifier = Callable[[Reminder], None]


def log_reminder(reminder: Reminder) -> None:
    """Default notifier: a single parseable INFO line per firing."""
    logger.info(
        "[REMINDER] task_id=%s owner_id=%s title=%r due_at=%s fired_at=%s",
        reminder.task_id,
        reminder.owner_id,
        reminder.title,
        reminder.due_at.isoformat(),
        reminder.fired_at.isoformat(),
        extra={"reminder": reminder.as_dict()},
    )
