"""
Bounded notification queue between the task API and the reminder dispatcher.

Producers offer bare task ids; the dispatcher consumes them in FIFO order.
There is no dedup: the same id may sit in the queue several times.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from enum import Enum
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100

# How often a blocked consumer or producer re-checks the closed flag.
_POLL_SECONDS = 0.25


class OverflowPolicy(str, Enum):
    DROP_NEWEST = "drop_newest"
    DROP_OLDEST = "drop_oldest"
    BLOCK = "block"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "OverflowPolicy":
        if not raw:
            return cls.DROP_NEWEST
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown reminder overflow policy: {raw!r}") from None


class ReminderQueue:
    """
    Multi-producer FIFO of task ids with a fixed capacity.

    offer() never raises into the caller. With the default drop_newest policy it
    never blocks either; the block policy waits for space the way the original
    channel send did, optionally giving up after block_timeout seconds.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        overflow: OverflowPolicy = OverflowPolicy.DROP_NEWEST,
        block_timeout: Optional[float] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.overflow = OverflowPolicy(overflow)
        self.block_timeout = block_timeout
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    def __len__(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, task_id) -> bool:
        """Queue task_id for re-evaluation. Returns False if it was not queued."""
        if task_id is None:
            # None marks "closed and drained" on the consumer side.
            logger.warning("Reminder queue rejected a None task_id")
            return False
        if self.closed:
            logger.warning("Reminder queue closed; dropping task_id=%s", task_id)
            return False

        try:
            self._queue.put_nowait(task_id)
            return True
        except queue.Full:
            pass

        if self.overflow is OverflowPolicy.BLOCK:
            return self._put_blocking(task_id)

        if self.overflow is OverflowPolicy.DROP_OLDEST:
            while True:
                try:
                    evicted = self._queue.get_nowait()
                except queue.Empty:
                    pass
                else:
                    logger.warning(
                        "Reminder queue full (capacity=%s); evicted task_id=%s for task_id=%s",
                        self.capacity,
                        evicted,
                        task_id,
                    )
                try:
                    self._queue.put_nowait(task_id)
                    return True
                except queue.Full:
                    continue

        logger.warning(
            "Reminder queue full (capacity=%s); dropping task_id=%s", self.capacity, task_id
        )
        return False

    def _put_blocking(self, task_id) -> bool:
        deadline = None
        if self.block_timeout is not None:
            deadline = time.monotonic() + self.block_timeout

        while not self.closed:
            wait = _POLL_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                wait = min(wait, remaining)
            try:
                self._queue.put(task_id, timeout=wait)
                return True
            except queue.Full:
                continue

        logger.warning(
            "Reminder queue still full after waiting (capacity=%s); dropping task_id=%s",
            self.capacity,
            task_id,
        )
        return False

    def get(self, block: bool = True, timeout: Optional[float] = None):
        """
        Next task id, or None on timeout or once the queue is closed and drained.

        Ids queued before close() are still handed out.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            try:
                return self._queue.get_nowait()
            except queue.Empty:
                pass
            if self.closed or not block:
                return None

            wait = _POLL_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                wait = min(wait, remaining)
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                continue

    def __iter__(self) -> Iterator:
        while True:
            task_id = self.get()
            if task_id is None:
                return
            yield task_id

    def close(self) -> None:
        if not self.closed:
            self._closed.set()
            logger.info("Reminder queue closed pending=%s", len(self))
