"""
Reminder scheduling.

A single dispatcher thread drains the ReminderQueue. Every task id it receives
starts an independent scheduling attempt which:
- re-reads the task through the injected fetch_task callable,
- discards the notification if the task is gone, done, or has no due time,
- arms a timer that emits the reminder once the due time is reached.

Timers are not re-validated against storage when they fire, and by default an
older timer is not cancelled when a newer notification for the same task
arrives, so a rescheduled task can be reminded more than once.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .delivery import Notifier, Reminder, log_reminder
from .notifications import ReminderQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskSnapshot:
    id: Any
    owner_id: Any
    title: str
    done: bool
    due_at: Optional[datetime]


FetchTask = Callable[[Any], Optional[TaskSnapshot]]
Clock = Callable[[], datetime]


class AttemptOutcome(str, Enum):
    NOT_FOUND = "not_found"
    NOT_ELIGIBLE = "not_eligible"
    ARMED = "armed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_eligible(task: TaskSnapshot) -> bool:
    return task.due_at is not None and not task.done


def compute_delay(due_at: datetime, now: datetime) -> float:
    """Seconds until due_at; past due times fire immediately."""
    delay = (_aware(due_at) - _aware(now)).total_seconds()
    return max(0.0, delay)


class _ArmedReminder:
    """A pending timer plus the payload captured when it was armed."""

    def __init__(self, scheduler: "ReminderScheduler", task: TaskSnapshot) -> None:
        self.scheduler = scheduler
        self.task_id = task.id
        self.owner_id = task.owner_id
        self.title = task.title
        self.due_at = _aware(task.due_at)
        self.cancelled = False
        self._timer: Optional[threading.Timer] = None

    def arm(self, delay: float) -> None:
        timer = threading.Timer(delay, self.fire)
        timer.name = f"reminder-{self.task_id}"
        timer.daemon = True
        self._timer = timer
        timer.start()

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()

    def fire(self) -> None:
        if self.cancelled:
            return
        now = _aware(self.scheduler.clock())
        if now < self.due_at:
            # Timer woke ahead of the wall clock; wait out the remainder.
            self.arm(compute_delay(self.due_at, now))
            return
        self.scheduler._emit(self, now)


class ReminderScheduler:
    """
    Runs scheduling attempts and owns the timers they arm.

    With replace_pending=True, arming a timer for a task cancels any timer still
    pending for the same task id, so only the latest attempt fires.
    """

    def __init__(
        self,
        fetch_task: FetchTask,
        *,
        notifier: Notifier = log_reminder,
        clock: Clock = utcnow,
        replace_pending: bool = False,
    ) -> None:
        self.fetch_task = fetch_task
        self.notifier = notifier
        self.clock = clock
        self.replace_pending = replace_pending
        self._pending: Dict[Any, _ArmedReminder] = {}
        self._lock = threading.Lock()

    def attempt(self, task_id) -> AttemptOutcome:
        try:
            task = self.fetch_task(task_id)
        except Exception:
            logger.warning("Reminder fetch failed task_id=%s; discarding", task_id, exc_info=True)
            return AttemptOutcome.NOT_FOUND

        if task is None:
            logger.debug("Reminder discarded task_id=%s: task not found", task_id)
            return AttemptOutcome.NOT_FOUND

        if not is_eligible(task):
            logger.debug(
                "Reminder discarded task_id=%s: done=%s due_at=%s", task_id, task.done, task.due_at
            )
            return AttemptOutcome.NOT_ELIGIBLE

        delay = compute_delay(task.due_at, self.clock())
        self._arm(task, delay)
        logger.debug("Reminder armed task_id=%s delay=%.3fs", task.id, delay)
        return AttemptOutcome.ARMED

    def _arm(self, task: TaskSnapshot, delay: float) -> None:
        armed = _ArmedReminder(self, task)
        if self.replace_pending:
            with self._lock:
                previous = self._pending.get(task.id)
                self._pending[task.id] = armed
            if previous is not None:
                previous.cancel()
                logger.debug("Reminder replaced pending timer task_id=%s", task.id)
        armed.arm(delay)

    def _emit(self, armed: _ArmedReminder, fired_at: datetime) -> None:
        if self.replace_pending:
            with self._lock:
                if self._pending.get(armed.task_id) is armed:
                    del self._pending[armed.task_id]

        reminder = Reminder(
            task_id=armed.task_id,
            owner_id=armed.owner_id,
            title=armed.title,
            due_at=armed.due_at,
            fired_at=fired_at,
        )
        try:
            self.notifier(reminder)
        except Exception:
            logger.exception("Reminder notifier failed task_id=%s", armed.task_id)

    @property
    def pending_count(self) -> int:
        """Timers tracked for replacement (always 0 unless replace_pending)."""
        with self._lock:
            return len(self._pending)


class ReminderDispatcher:
    """
    The single consumer of a ReminderQueue.

    Each task id is handed to the scheduler on its own thread (or on a bounded
    pool when max_concurrent_attempts is set) and the loop goes straight back to
    the queue. The loop ends when the queue is closed and drained; in-flight
    attempts and armed timers are left alone.
    """

    def __init__(
        self,
        queue: ReminderQueue,
        scheduler: ReminderScheduler,
        *,
        max_concurrent_attempts: Optional[int] = None,
    ) -> None:
        if max_concurrent_attempts is not None and max_concurrent_attempts < 1:
            raise ValueError("max_concurrent_attempts must be positive")
        self.queue = queue
        self.scheduler = scheduler
        self.max_concurrent_attempts = max_concurrent_attempts
        self._executor: Optional[ThreadPoolExecutor] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("Reminder dispatcher already running")
            return

        if self.max_concurrent_attempts is not None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_concurrent_attempts,
                thread_name_prefix="reminder-attempt",
            )

        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="reminder-dispatcher",
        )
        self._thread.start()
        logger.info(
            "Reminder dispatcher started capacity=%s overflow=%s max_concurrent_attempts=%s",
            self.queue.capacity,
            self.queue.overflow.value,
            self.max_concurrent_attempts,
        )

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        for task_id in self.queue:
            self._launch(task_id)

        if self._executor is not None:
            self._executor.shutdown(wait=False)
        logger.info("Reminder dispatcher stopped")

    def _launch(self, task_id) -> None:
        if self._executor is not None:
            self._executor.submit(self._run_attempt, task_id)
            return
        threading.Thread(
            target=self._run_attempt,
            args=(task_id,),
            daemon=True,
            name=f"reminder-attempt-{task_id}",
        ).start()

    def _run_attempt(self, task_id) -> None:
        try:
            self.scheduler.attempt(task_id)
        except Exception:
            logger.exception("Reminder attempt crashed task_id=%s", task_id)
