"""Background tasks driven by dispatched actions.

:class:`TaskMiddleware` lets long-running coroutines observe and drive the
store: they dispatch actions, read state and wait for specific action types
to be dispatched by someone else.

Usage::

    async def watch_login(ctx: TaskContext) -> None:
        while True:
            action = await ctx.take("LOGIN")
            ctx.dispatch({"type": "SESSION_STARTED", "user": action["user"]})

    manager.run_task(watch_login)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

from pystatehub.actions import action_type
from pystatehub.exceptions import TaskNotBoundError
from pystatehub.query import Query, query_state
from pystatehub.store import Dispatch, MiddlewareAPI

_logger = logging.getLogger(__name__)

TaskFunction = Callable[..., Coroutine[Any, Any, Any]]


@dataclass(slots=True)
class _ActionTaker:
    """A pending ``take`` waiting for the next action of ``action_type``."""

    action_type: str
    future: asyncio.Future[Any]


@dataclass
class TaskContext:
    """Handle passed as the first argument to every background task."""

    _middleware: TaskMiddleware = field(repr=False)

    def dispatch(self, action: Any) -> Any:
        return self._middleware.api.dispatch(action)

    def select(self, query: Query = None) -> Any:
        """Query the current state synchronously."""
        return query_state(self._middleware.api.get_state(), query)

    def get_state(self, query: Query = None) -> asyncio.Future[Any]:
        """Update-aware read, see :meth:`pystatehub.manager.StoreManager.get_state`."""
        return self._middleware.read(query)

    async def take(self, action_type: str, timeout: float | None = None) -> Any:
        """Wait for the next dispatched action of *action_type*."""
        return await self._middleware.take(action_type, timeout=timeout)


class TaskMiddleware:
    """Middleware running background asyncio tasks against the store."""

    def __init__(
        self,
        *,
        read: Callable[[Query], asyncio.Future[Any]] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._api: MiddlewareAPI | None = None
        self._read = read
        self._loop = loop
        self._tasks: set[asyncio.Task[Any]] = set()
        self._takers: list[_ActionTaker] = []

    # ------------------------------------------------------------------
    # Middleware protocol
    # ------------------------------------------------------------------

    def __call__(self, api: MiddlewareAPI) -> Callable[[Dispatch], Dispatch]:
        self._api = api

        def wrap(next_dispatch: Dispatch) -> Dispatch:
            def dispatch(action: Any) -> Any:
                result = next_dispatch(action)
                self._resolve_takers(action)
                return result

            return dispatch

        return wrap

    # ------------------------------------------------------------------
    # Task API
    # ------------------------------------------------------------------

    @property
    def api(self) -> MiddlewareAPI:
        if self._api is None:
            raise TaskNotBoundError("Task middleware is not attached to a store yet")
        return self._api

    @property
    def running(self) -> int:
        return len(self._tasks)

    def read(self, query: Query = None) -> asyncio.Future[Any]:
        if self._read is not None:
            return self._read(query)
        loop = self._loop or asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        future.set_result(query_state(self.api.get_state(), query))
        return future

    def run(self, fn: TaskFunction, *args: Any) -> asyncio.Task[Any]:
        """Start ``fn(context, *args)`` as a background task."""
        if self._api is None:
            raise TaskNotBoundError("Build the store before starting tasks")
        coro = fn(TaskContext(self), *args)
        if not asyncio.iscoroutine(coro):
            raise TypeError(f"Task function {getattr(fn, '__name__', fn)!r} did not return a coroutine")

        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        _logger.debug("Started task %s", getattr(fn, "__name__", repr(fn)))
        return task

    async def take(self, action_type: str, timeout: float | None = None) -> Any:
        loop = self._loop or asyncio.get_running_loop()
        taker = _ActionTaker(action_type=action_type, future=loop.create_future())
        self._takers.append(taker)
        try:
            if timeout is None:
                return await taker.future
            return await asyncio.wait_for(taker.future, timeout)
        finally:
            if taker in self._takers:
                self._takers.remove(taker)

    def cancel_all(self) -> None:
        """Cancel running tasks and pending takes so nothing hangs."""
        for task in list(self._tasks):
            task.cancel()
        for taker in self._takers:
            if not taker.future.done():
                taker.future.cancel()
        self._takers.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_takers(self, action: Any) -> None:
        if not self._takers:
            return
        kind = action_type(action)
        matched: list[_ActionTaker] = []
        remaining: list[_ActionTaker] = []
        for taker in self._takers:
            if not taker.future.done() and taker.action_type == kind:
                matched.append(taker)
            else:
                remaining.append(taker)
        self._takers = remaining
        for taker in matched:
            taker.future.set_result(action)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Background task failed", exc_info=exc)
