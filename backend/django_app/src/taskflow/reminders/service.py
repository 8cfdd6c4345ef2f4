from __future__ import annotations

from typing import Any, Mapping, Optional

from .delivery import Notifier, log_reminder
from .dispatcher import Clock, FetchTask, ReminderDispatcher, ReminderScheduler, utcnow
from .notifications import DEFAULT_CAPACITY, OverflowPolicy, ReminderQueue


class ReminderService:
    """Queue, scheduler and dispatcher wired together, with one lifecycle."""

    def __init__(
        self,
        fetch_task: FetchTask,
        *,
        capacity: int = DEFAULT_CAPACITY,
        overflow: OverflowPolicy = OverflowPolicy.DROP_NEWEST,
        block_timeout: Optional[float] = None,
        max_concurrent_attempts: Optional[int] = None,
        replace_pending: bool = False,
        notifier: Notifier = log_reminder,
        clock: Clock = utcnow,
    ) -> None:
        self.queue = ReminderQueue(capacity, overflow, block_timeout)
        self.scheduler = ReminderScheduler(
            fetch_task,
            notifier=notifier,
            clock=clock,
            replace_pending=replace_pending,
        )
        self.dispatcher = ReminderDispatcher(
            self.queue,
            self.scheduler,
            max_concurrent_attempts=max_concurrent_attempts,
        )

    @classmethod
    def from_settings(
        cls, config: Mapping[str, Any], fetch_task: FetchTask, **overrides: Any
    ) -> "ReminderService":
        """Build from the TASKFLOW_REMINDERS settings mapping."""
        kwargs = dict(
            capacity=int(config.get("QUEUE_CAPACITY", DEFAULT_CAPACITY)),
            overflow=OverflowPolicy.parse(config.get("OVERFLOW")),
            block_timeout=config.get("BLOCK_TIMEOUT"),
            max_concurrent_attempts=config.get("MAX_CONCURRENT_ATTEMPTS"),
            replace_pending=bool(config.get("REPLACE_PENDING", False)),
        )
        kwargs.update(overrides)
        return cls(fetch_task, **kwargs)

    @property
    def is_running(self) -> bool:
        return self.dispatcher.is_running

    def offer(self, task_id) -> bool:
        return self.queue.offer(task_id)

    def start(self) -> None:
        self.dispatcher.start()

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop accepting notifications and let the dispatcher drain and exit."""
        self.queue.close()
        if timeout is not None:
            self.dispatcher.join(timeout)
