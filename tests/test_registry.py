from __future__ import annotations

from typing import Any

import pytest

from pystatehub.exceptions import ReducerRegistrationError
from pystatehub.registry import (
    PLACEHOLDER_REDUCER_NAME,
    ReducerRegistry,
    combine_reducers,
    placeholder_reducer,
)


def counter(state: Any, action: Any) -> Any:
    state = 0 if state is None else state
    if action["type"] == "INC":
        return state + 1
    return state


def todos(state: Any, action: Any) -> Any:
    state = [] if state is None else state
    if action["type"] == "ADD":
        return [*state, action["text"]]
    return state


class TestReducerRegistry:
    def test_add_and_lookup(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)

        assert "counter" in registry
        assert len(registry) == 1
        assert registry.get("counter") is counter
        assert registry.names() == ["counter"]

    def test_last_registration_wins(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)
        registry.add("counter", todos)

        assert len(registry) == 1
        assert registry.get("counter") is todos

    def test_remove_is_idempotent(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)
        registry.add("todos", todos)

        registry.remove("counter")
        registry.remove("counter")

        assert registry.names() == ["todos"]

    def test_remove_unknown_is_noop(self) -> None:
        registry = ReducerRegistry()
        registry.remove("nope")
        assert len(registry) == 0

    def test_remove_all(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)
        registry.add("todos", todos)

        registry.remove_all()

        assert len(registry) == 0
        assert list(registry) == []

    @pytest.mark.parametrize("name", ["", None, 3])
    def test_invalid_names_rejected(self, name: Any) -> None:
        with pytest.raises(ReducerRegistrationError):
            ReducerRegistry().add(name, counter)

    def test_placeholder_name_reserved(self) -> None:
        with pytest.raises(ReducerRegistrationError):
            ReducerRegistry().add(PLACEHOLDER_REDUCER_NAME, counter)

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ReducerRegistrationError):
            ReducerRegistry().add("counter", "not a function")  # type: ignore[arg-type]


class TestRootReducer:
    def test_empty_registry_is_identity(self) -> None:
        root = ReducerRegistry().root_reducer()
        state = root(None, {"type": "INIT"})

        assert root(state, {"type": "INC"}) is state
        assert root(state, {"type": "OTHER"}) is state

    def test_empty_registry_drops_orphaned_slices(self) -> None:
        root = ReducerRegistry().root_reducer()

        assert root({"counter": 1, "user": {"name": "Ann"}}, {"type": "REPLACE"}) == {}

    def test_empty_registry_initial_state(self) -> None:
        root = ReducerRegistry().root_reducer()
        assert root(None, {"type": "INIT"}) == {}

    def test_test_mode_keeps_placeholder_inert(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)

        root = registry.root_reducer(test_mode=True)

        assert root(None, {"type": "INC"}) == {"counter": 1}

    def test_slices_are_routed_by_name(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)
        registry.add("todos", todos)
        root = registry.root_reducer()

        state = root(None, {"type": "INIT"})
        state = root(state, {"type": "INC"})
        state = root(state, {"type": "ADD", "text": "write tests"})

        assert state == {"counter": 1, "todos": ["write tests"]}

    def test_root_reducer_is_a_snapshot(self) -> None:
        registry = ReducerRegistry()
        registry.add("counter", counter)
        root = registry.root_reducer()

        registry.add("todos", todos)

        assert root(None, {"type": "INIT"}) == {"counter": 0}


class TestCombineReducers:
    def test_unchanged_state_keeps_identity(self) -> None:
        root = combine_reducers({"counter": counter})
        state = root(None, {"type": "INIT"})

        assert root(state, {"type": "NOOP"}) is state

    def test_changed_slice_builds_new_state(self) -> None:
        root = combine_reducers({"counter": counter})
        state = root(None, {"type": "INIT"})

        new_state = root(state, {"type": "INC"})

        assert new_state is not state
        assert state == {"counter": 0}
        assert new_state == {"counter": 1}

    def test_keys_without_reducer_are_dropped(self) -> None:
        root = combine_reducers({"counter": counter})

        assert root({"counter": 2, "stale": True}, {"type": "NOOP"}) == {"counter": 2}

    def test_new_reducer_initialises_its_slice(self) -> None:
        root = combine_reducers({"counter": counter, "todos": todos})

        assert root({"counter": 2}, {"type": "NOOP"}) == {"counter": 2, "todos": []}

    def test_placeholder_owns_no_slice(self) -> None:
        root = combine_reducers({"counter": counter, PLACEHOLDER_REDUCER_NAME: placeholder_reducer})

        assert root(None, {"type": "INIT"}) == {"counter": 0}

    def test_reducer_errors_propagate(self) -> None:
        def broken(state: Any, action: Any) -> Any:
            raise RuntimeError("boom")

        root = combine_reducers({"broken": broken})
        with pytest.raises(RuntimeError, match="boom"):
            root(None, {"type": "INIT"})
