"""Best-effort, in-process reminders for tasks with a due time."""

from .delivery import Reminder, log_reminder
from .dispatcher import (
    AttemptOutcome,
    ReminderDispatcher,
    ReminderScheduler,
    TaskSnapshot,
    compute_delay,
    is_eligible,
)
from .notifications import OverflowPolicy, ReminderQueue
from .service import ReminderService

__all__ = [
    "AttemptOutcome",
    "OverflowPolicy",
    "Reminder",
    "ReminderDispatcher",
    "ReminderQueue",
    "ReminderScheduler",
    "ReminderService",
    "TaskSnapshot",
    "compute_delay",
    "is_eligible",
    "log_reminder",
]
