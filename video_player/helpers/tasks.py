"""Helper to track (and cancel) background tasks and timers on the event loop."""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

TaskTarget = Callable[..., Coroutine[Any, Any, Any]] | Coroutine[Any, Any, Any]


class TaskTracker:
    """
    Keep track of tasks and timers created on (and owned by) a single event loop.

    Tasks and timers are identified by a task_id, which is used for debouncing:
    a timer scheduled with the id of a pending timer replaces it, a task started
    with the id of a running task is not started twice (unless abort_existing).
    Everything still outstanding is cancelled by `cancel_all`.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, logger: logging.Logger) -> None:
        """Initialize the tracker (from within the thread running the loop)."""
        self.loop = loop
        self.logger = logger
        self.loop_thread_id = getattr(loop, "_thread_id", None) or threading.get_ident()
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._ids = itertools.count(1)

    @property
    def in_loop_thread(self) -> bool:
        """Return True if the caller runs in the thread of the owning event loop."""
        return threading.get_ident() == self.loop_thread_id

    def verify_event_loop_thread(self, what: str) -> None:
        """Raise if not called from the thread of the owning event loop."""
        if not self.in_loop_thread:
            msg = f"Non-Async operation detected: {what} may only be called from the event loop"
            raise RuntimeError(msg)

    def create_task(
        self,
        target: TaskTarget | Awaitable[Any],
        *args: Any,
        task_id: str | None = None,
        abort_existing: bool = False,
        **kwargs: Any,
    ) -> asyncio.Task[Any]:
        """
        Start a tracked task from a coroutine (function).

        :param target: Coroutine function (called with args/kwargs) or coroutine.
        :param task_id: Optional id, a running task with the same id is returned
            instead of starting a new one.
        :param abort_existing: Cancel a running task with the same id instead.
        """
        if task_id and (running := self._tasks.get(task_id)) and not running.done():
            if not abort_existing:
                return running
            running.cancel()
        self.verify_event_loop_thread("create_task")
        if asyncio.iscoroutine(target):
            coro = target
        elif asyncio.iscoroutinefunction(target):
            coro = target(*args, **kwargs)
        else:
            msg = f"Can not create a task for {target!r}: not a coroutine (function)"
            raise TypeError(msg)

        task_id = task_id or self._next_id("task")
        task = self.loop.create_task(coro)
        self._tasks[task_id] = task
        task.add_done_callback(lambda _task: self._on_task_done(task_id, _task))
        return task

    def call_later(
        self,
        delay: float,
        target: Callable[..., Any],
        *args: Any,
        task_id: str | None = None,
    ) -> asyncio.TimerHandle:
        """
        Run a callable or coroutine function after the given delay.

        Use task_id for debouncing: a pending timer with the same id is cancelled.
        """
        self.verify_event_loop_thread("call_later")
        timer_id = task_id or self._next_id("timer")
        self.cancel_timer(timer_id)

        def _fire() -> None:
            self._timers.pop(timer_id, None)
            if asyncio.iscoroutinefunction(target):
                self.create_task(target, *args, task_id=timer_id, abort_existing=True)
            else:
                target(*args)

        timer = self.loop.call_later(delay, _fire)
        self._timers[timer_id] = timer
        return timer

    def get_timer(self, task_id: str) -> asyncio.TimerHandle | None:
        """Return the pending timer for the given task_id, if any."""
        return self._timers.get(task_id)

    def cancel_task(self, task_id: str) -> None:
        """Cancel the tracked task with the given id (if any)."""
        if task := self._tasks.pop(task_id, None):
            task.cancel()

    def cancel_timer(self, task_id: str) -> None:
        """Cancel the pending timer with the given id (if any)."""
        if timer := self._timers.pop(task_id, None):
            timer.cancel()

    def cancel_all(self) -> None:
        """Cancel all tracked tasks and timers (safe to call multiple times)."""
        timers, self._timers = self._timers, {}
        for timer in timers.values():
            timer.cancel()
        tasks, self._tasks = self._tasks, {}
        for task in tasks.values():
            task.cancel()

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._ids)}"

    def _on_task_done(self, task_id: str, task: asyncio.Task[Any]) -> None:
        """Stop tracking a finished task and log its exception (if any)."""
        if self._tasks.get(task_id) is task:
            del self._tasks[task_id]
        if task.cancelled() or (err := task.exception()) is None:
            return
        self.logger.error(
            "Exception in task %s: %s",
            task_id,
            err,
            exc_info=err if self.logger.isEnabledFor(logging.DEBUG) else None,
        )
