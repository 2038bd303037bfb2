from __future__ import annotations

import pytest
from pydantic import ValidationError

from pystatehub.actions import INIT, REPLACE, Action, action_type, is_internal
from pystatehub.exceptions import InvalidActionError


class TestAction:
    def test_type_is_stripped(self) -> None:
        assert Action(type="  INC ").type == "INC"

    def test_empty_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Action(type="   ")

    def test_frozen(self) -> None:
        action = Action(type="INC")
        with pytest.raises(ValidationError):
            action.type = "DEC"  # type: ignore[misc]

    def test_extra_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Action(type="INC", amount=1)  # type: ignore[call-arg]


class TestActionType:
    def test_mapping(self) -> None:
        assert action_type({"type": "INC", "by": 2}) == "INC"

    def test_model(self) -> None:
        assert action_type(Action(type="INC", payload=2)) == "INC"

    def test_invalid(self) -> None:
        with pytest.raises(InvalidActionError):
            action_type({"kind": "INC"})
        with pytest.raises(InvalidActionError):
            action_type(["INC"])

    def test_internal_actions(self) -> None:
        assert is_internal({"type": INIT})
        assert is_internal({"type": REPLACE})
        assert not is_internal({"type": "INC"})
