"""Dynamic reducer registry.

Feature modules register named reducers at runtime.  Each reducer owns the
slice of the state tree stored under its name; :func:`combine_reducers` folds
the registry into one root reducer producing the whole tree.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from pystatehub.exceptions import ReducerRegistrationError

_logger = logging.getLogger(__name__)

Reducer = Callable[[Any, Any], Any]

#: Name of the inert entry injected into empty (or test-mode) registries.
PLACEHOLDER_REDUCER_NAME = "$_placeholder"


def placeholder_reducer(state: Any, action: Any) -> Any:
    """Inert reducer: returns its input unchanged."""
    return state


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer:
    """Fold named reducers into a single root reducer.

    ``next[name] = reducer(prev.get(name), action)`` for every entry, in
    registration order.  The placeholder reducer owns no slice.  Keys of the
    prior state without a reducer are dropped, so with no real entries the
    result is always empty.  When no slice changed identity and the key set
    is the same, the prior state object is returned.
    """
    entries = tuple((name, fn) for name, fn in reducers.items() if fn is not placeholder_reducer)
    names = frozenset(name for name, _ in entries)
    warned: set[str] = set()

    if not entries:

        def empty_root(state: Any, action: Any) -> Any:
            if isinstance(state, Mapping) and not state:
                return state
            if isinstance(state, Mapping):
                _logger.debug("Dropping state keys without a reducer: %s", ", ".join(sorted(map(str, state))))
            return {}

        return empty_root

    def root(state: Any, action: Any) -> Any:
        prev: Mapping[str, Any] = state if isinstance(state, Mapping) else {}

        unexpected = [key for key in prev if key not in names and key not in warned]
        if unexpected:
            warned.update(unexpected)
            _logger.debug("Dropping state keys without a reducer: %s", ", ".join(sorted(unexpected)))

        changed = state is None or len(prev) != len(entries)
        next_state: dict[str, Any] = {}
        for name, fn in entries:
            prev_slice = prev.get(name)
            next_slice = fn(prev_slice, action)
            next_state[name] = next_slice
            changed = changed or next_slice is not prev_slice or name not in prev

        return next_state if changed else state

    return root


class ReducerRegistry:
    """Mutable mapping of reducer name to reducer function.

    Last registration wins for a given name.  Removing reducers never rebuilds
    anything by itself; callers rebuild once after a batch of removals.
    """

    def __init__(self) -> None:
        self._reducers: dict[str, Reducer] = {}

    def add(self, name: str, reducer: Reducer) -> None:
        """Register *reducer* under *name*, replacing any previous entry."""
        if not isinstance(name, str) or not name:
            raise ReducerRegistrationError(f"Reducer name must be a non-empty string, got {name!r}")
        if name == PLACEHOLDER_REDUCER_NAME:
            raise ReducerRegistrationError(f"Reducer name {name!r} is reserved")
        if not callable(reducer):
            raise ReducerRegistrationError(f"Reducer for {name!r} is not callable")
        if name in self._reducers:
            _logger.debug("Replacing reducer %r", name)
        self._reducers[name] = reducer

    def remove(self, name: str) -> None:
        """Unregister *name*; no-op when absent."""
        if self._reducers.pop(name, None) is not None:
            _logger.debug("Removed reducer %r", name)

    def remove_all(self) -> None:
        """Unregister every reducer, one at a time."""
        for name in list(self._reducers):
            self.remove(name)

    def get(self, name: str) -> Reducer | None:
        return self._reducers.get(name)

    def names(self) -> list[str]:
        return list(self._reducers)

    def __contains__(self, name: object) -> bool:
        return name in self._reducers

    def __len__(self) -> int:
        return len(self._reducers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._reducers))

    def root_reducer(self, *, test_mode: bool = False) -> Reducer:
        """Combine a snapshot of the current entries into a root reducer.

        The placeholder entry is injected when the registry is empty or
        *test_mode* is set, so the combination always sees at least one entry.
        """
        reducers = dict(self._reducers)
        if not reducers or test_mode:
            reducers[PLACEHOLDER_REDUCER_NAME] = placeholder_reducer
        return combine_reducers(reducers)
