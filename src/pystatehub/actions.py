"""Action messages.

An action is an opaque tagged message describing an intended state
transition.  Plain mappings with a ``"type"`` key are accepted everywhere; the
:class:`Action` model is the typed alternative.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pystatehub.exceptions import InvalidActionError

ACTION_PREFIX = "@@pystatehub/"

#: Dispatched once when a store is created.
INIT = f"{ACTION_PREFIX}INIT"
#: Dispatched every time the store's reducer is replaced.
REPLACE = f"{ACTION_PREFIX}REPLACE"


class Action(BaseModel):
    """A typed action message."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str = Field(..., description="Action type tag")
    payload: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)
    error: bool = False

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        action_type = value.strip()
        if not action_type:
            raise ValueError("type must be non-empty")
        return action_type


def action_type(action: Any) -> str:
    """Return the type tag of *action*.

    Raises :class:`InvalidActionError` when *action* is neither an
    :class:`Action` nor a mapping with a non-empty string ``"type"``.
    """
    if isinstance(action, Action):
        return action.type
    if isinstance(action, Mapping):
        value = action.get("type")
        if isinstance(value, str) and value:
            return value
        raise InvalidActionError(f"Action mapping needs a non-empty string 'type', got {value!r}")
    raise InvalidActionError(f"Actions must be mappings or Action models, got {type(action).__name__}")


def is_internal(action: Any) -> bool:
    """Whether *action* is one of the store's own lifecycle actions."""
    return action_type(action).startswith(ACTION_PREFIX)
