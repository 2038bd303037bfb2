"""Read/update synchronization.

:class:`UpdateGate` wraps the root reducer so that state reads issued while a
reducer is running are deferred, then resolved with the state that reducer
produced.  Reads issued while idle resolve immediately with the current
snapshot.

Execution is single-threaded: deferred reads are resolved synchronously,
inside the dispatch that triggered the update and before it returns.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pystatehub.exceptions import UpdateFailedError
from pystatehub.query import Query, query_state, validate_query
from pystatehub.registry import Reducer

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _PendingRead:
    """A read queued while an update was in progress."""

    future: asyncio.Future[Any]
    query: Query

    def __call__(self, state: Any) -> None:
        # Awaiters may have cancelled in the meantime.
        if self.future.done():
            return
        self.future.set_result(query_state(state, self.query))

    def fail(self, exc: BaseException, action: Any) -> None:
        if self.future.done():
            return
        error = UpdateFailedError(f"State update failed: {exc!r}", action=action)
        error.__cause__ = exc
        self.future.set_exception(error)


class UpdateGate:
    """Update-in-progress flag plus the FIFO queue of pending reads."""

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._updating = False
        self._pending: deque[_PendingRead] = deque()

    @property
    def is_updating(self) -> bool:
        return self._updating

    @property
    def pending_reads(self) -> int:
        return len(self._pending)

    def wrap(self, root_reducer: Reducer) -> Reducer:
        """Return *root_reducer* guarded by the update protocol.

        On a reducer exception the flag is reset, every queued read is
        rejected with :class:`UpdateFailedError` and the exception is
        re-raised unchanged.
        """

        def guarded(state: Any, action: Any) -> Any:
            self._updating = True
            if self._pending:
                _logger.debug("Discarding %d stale pending reads", len(self._pending))
                self._pending.clear()

            try:
                new_state = root_reducer(state, action)
            except BaseException as exc:
                self._updating = False
                self._reject_pending(exc, action)
                raise

            self._updating = False
            if self._pending:
                _logger.debug("Resolving %d reads queued during update", len(self._pending))
            while self._pending:
                self._pending.popleft()(new_state)
            return new_state

        return guarded

    def read(self, query: Query, current_state: Callable[[], Any]) -> asyncio.Future[Any]:
        """Return a future resolving with *query* applied to the state.

        The query is validated before any future is created.  While idle the
        future is already resolved from ``current_state()``; while an update
        is running it resolves with the post-update state.
        """
        validate_query(query)
        loop = self._loop or asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        if self._updating:
            self._pending.append(_PendingRead(future=future, query=query))
        else:
            future.set_result(query_state(current_state(), query))
        return future

    def _reject_pending(self, exc: BaseException, action: Any) -> None:
        if self._pending:
            _logger.debug("Rejecting %d reads queued during failed update", len(self._pending))
        while self._pending:
            self._pending.popleft().fail(exc, action)
