"""In-memory state store.

The store holds the current state snapshot and applies its reducer to every
dispatched action.  It is deliberately small: registry management and read
synchronization live in :mod:`pystatehub.manager` and :mod:`pystatehub.gate`.

Enhancers wrap store construction (``enhancer(create_store) -> create_store``);
:func:`apply_middleware` is the enhancer that threads dispatch through a
middleware chain ``middleware(api)(next_dispatch)(action)``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import reduce
from typing import Any

from pystatehub.actions import INIT, REPLACE, action_type
from pystatehub.exceptions import ReentrantDispatchError, StoreError
from pystatehub.registry import Reducer

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Dispatch = Callable[[Any], Any]
StoreFactory = Callable[..., "Store"]
Enhancer = Callable[[StoreFactory], StoreFactory]
Middleware = Callable[["MiddlewareAPI"], Callable[[Dispatch], Dispatch]]


class Store:
    """Holds state, applies the reducer and notifies listeners.

    Usage::

        store = create_store(reducer)
        store.dispatch({"type": "INC"})
        store.get_state()
    """

    def __init__(self, reducer: Reducer, preloaded_state: Any = None) -> None:
        if not callable(reducer):
            raise StoreError("Reducer must be callable")
        self._reducer = reducer
        self._state = preloaded_state
        self._listeners: list[Listener] = []
        self._dispatching = False
        self.dispatch: Dispatch = self._dispatch
        self._dispatch({"type": INIT})

    def get_state(self) -> Any:
        return self._state

    def _dispatch(self, action: Any) -> Any:
        action_type(action)
        if self._dispatching:
            raise ReentrantDispatchError("Reducers may not dispatch actions")

        self._dispatching = True
        try:
            self._state = self._reducer(self._state, action)
        finally:
            self._dispatching = False

        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _logger.warning("Store listener failed", exc_info=True)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns an idempotent unsubscribe function."""
        if not callable(listener):
            raise StoreError("Listener must be callable")
        if self._dispatching:
            raise ReentrantDispatchError("Cannot subscribe while reducing")
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            self._listeners.remove(listener)

        return unsubscribe

    def replace_reducer(self, reducer: Reducer) -> None:
        """Swap the reducer and let every slice initialise via ``REPLACE``."""
        if not callable(reducer):
            raise StoreError("Reducer must be callable")
        self._reducer = reducer
        self._dispatch({"type": REPLACE})


def create_store(reducer: Reducer, preloaded_state: Any = None, enhancer: Enhancer | None = None) -> Store:
    """Create a store, optionally through an *enhancer*."""
    if enhancer is not None:
        if not callable(enhancer):
            raise StoreError("Enhancer must be callable")
        return enhancer(create_store)(reducer, preloaded_state)
    return Store(reducer, preloaded_state)


def compose(*funcs: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose single-argument functions right to left."""
    if not funcs:
        return lambda arg: arg
    if len(funcs) == 1:
        return funcs[0]
    return reduce(lambda f, g: lambda arg: f(g(arg)), funcs)


@dataclass(frozen=True)
class MiddlewareAPI:
    """What a middleware sees of the store."""

    get_state: Callable[[], Any]
    dispatch: Dispatch


def apply_middleware(*middlewares: Middleware) -> Enhancer:
    """Enhancer routing ``dispatch`` through *middlewares*, first one outermost."""

    def enhancer(next_factory: StoreFactory) -> StoreFactory:
        def factory(reducer: Reducer, preloaded_state: Any = None) -> Store:
            store = next_factory(reducer, preloaded_state)

            def dispatch_during_setup(action: Any) -> Any:
                raise StoreError("Dispatching while constructing middleware is not allowed")

            chain_dispatch: Dispatch = dispatch_during_setup
            api = MiddlewareAPI(
                get_state=store.get_state,
                dispatch=lambda action: chain_dispatch(action),
            )
            chain = [middleware(api) for middleware in middlewares]
            chain_dispatch = compose(*chain)(store.dispatch)
            store.dispatch = chain_dispatch
            return store

        return factory

    return enhancer
