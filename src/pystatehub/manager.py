"""Store manager: the single owner of the application store.

Create one :class:`StoreManager` at the composition root and hand it to the
feature modules that register reducers or read state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pystatehub._redact import redact_for_log
from pystatehub.config import StoreConfig
from pystatehub.exceptions import StoreNotBuiltError
from pystatehub.gate import UpdateGate
from pystatehub.middleware import logging_middleware
from pystatehub.query import Query, query_state
from pystatehub.registry import Reducer, ReducerRegistry
from pystatehub.store import Enhancer, Listener, Middleware, Store, apply_middleware, compose, create_store
from pystatehub.tasks import TaskFunction, TaskMiddleware

_logger = logging.getLogger(__name__)


class StoreManager:
    """Owns the reducer registry, the update gate and the lazily built store.

    Usage::

        manager = StoreManager(StoreConfig())
        manager.add_reducer("counter", counter)
        manager.dispatch({"type": "INC"})
        value = await manager.get_state("counter")
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config or StoreConfig()
        self._registry = ReducerRegistry()
        self._gate = UpdateGate(loop=loop)
        self._tasks = TaskMiddleware(read=self.get_state, loop=loop)
        self._store: Store | None = None

        middlewares: list[Middleware] = [self._tasks]
        if self._config.log_actions:
            middlewares.append(logging_middleware(self._config))
        self._enhancers: list[Enhancer] = [apply_middleware(*middlewares)]

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def registry(self) -> ReducerRegistry:
        return self._registry

    @property
    def is_updating(self) -> bool:
        return self._gate.is_updating

    @property
    def is_built(self) -> bool:
        return self._store is not None

    # ------------------------------------------------------------------
    # Reducer registration
    # ------------------------------------------------------------------

    def add_reducer(self, name: str, reducer: Reducer) -> None:
        """Register a reducer and rebuild the store's root reducer."""
        self._registry.add(name, reducer)
        _logger.debug("Added reducer %r", name)
        if self._store is not None:
            self.update()

    def remove_reducer(self, name: str) -> None:
        """Unregister a reducer. Call :meth:`update` afterwards."""
        self._registry.remove(name)

    def remove_all_reducers(self) -> None:
        """Unregister every reducer. Call :meth:`update` afterwards."""
        self._registry.remove_all()

    def get_root_reducer(self) -> Reducer:
        """Gated root reducer combining the registry's current contents."""
        return self._gate.wrap(self._registry.root_reducer(test_mode=self._config.test_mode))

    # ------------------------------------------------------------------
    # Store lifecycle
    # ------------------------------------------------------------------

    def get_instance(self) -> Store:
        """Return the store, building it on first use."""
        if self._store is None:
            self.build_instance()
        assert self._store is not None  # noqa: S101
        return self._store

    def build_instance(self) -> Store:
        """Create a new store from the current registry and enhancers."""
        self._store = create_store(self.get_root_reducer(), enhancer=compose(*self._enhancers))
        self._log_state("Built store")
        return self._store

    def update(self) -> None:
        """Replace the store's root reducer after reducers were added or removed."""
        if self._store is None:
            raise StoreNotBuiltError("Store has not been built; call get_instance() first")
        self._store.replace_reducer(self.get_root_reducer())
        self._log_state("Replaced root reducer")

    def _log_state(self, event: str) -> None:
        if not _logger.isEnabledFor(logging.DEBUG) or self._store is None:
            return
        _logger.debug(
            "%s; reducers: %s; state: %s",
            event,
            ", ".join(self._registry.names()) or "<none>",
            redact_for_log(
                self._store.get_state(),
                redact_keys=self._config.redact_keys,
                max_string=self._config.log_max_string,
            ),
        )

    def use_middleware(self, *middlewares: Middleware) -> None:
        """Add middleware ahead of the existing ones.

        Only stores built afterwards pick it up.
        """
        if self._store is not None:
            _logger.warning("use_middleware() called after the store was built; it has no effect on it")
        self._enhancers.insert(0, apply_middleware(*middlewares))

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def get_state(self, query: Query = None) -> asyncio.Future[Any]:
        """Read the state, or part of it, once no update is in progress.

        Returns a future.  Reads issued while a reducer runs resolve with the
        state that reducer produces.  Malformed queries raise
        :class:`~pystatehub.exceptions.InvalidQueryError` immediately.
        """
        return self._gate.read(query, lambda: self.get_instance().get_state())

    @staticmethod
    def query_state(query: Query, state: Any) -> Any:
        return query_state(state, query)

    def dispatch(self, action: Any) -> Any:
        return self.get_instance().dispatch(action)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.get_instance().subscribe(listener)

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    def run_task(self, fn: TaskFunction, *args: Any) -> asyncio.Task[Any]:
        """Start a background task; see :class:`~pystatehub.tasks.TaskMiddleware`."""
        self.get_instance()
        return self._tasks.run(fn, *args)

    def shutdown(self) -> None:
        """Cancel background tasks and pending takes."""
        self._tasks.cancel_all()
