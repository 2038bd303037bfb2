"""Custom exception hierarchy for pystatehub."""

from __future__ import annotations

from typing import Any


class StateHubError(Exception):
    """Base exception for all pystatehub errors."""


class StateHubConfigError(StateHubError):
    """Invalid or missing configuration."""


class InvalidQueryError(StateHubError):
    """Malformed state query (unsupported shape, empty path or empty segment)."""

    def __init__(self, message: str, *, query: Any = None) -> None:
        self.query = query
        super().__init__(message)


class ReducerRegistrationError(StateHubError):
    """Reducer name or function rejected by the registry."""


class StoreError(StateHubError):
    """Store-level misuse."""


class InvalidActionError(StoreError):
    """Dispatched action has no usable ``type``."""


class ReentrantDispatchError(StoreError):
    """A reducer tried to dispatch while the store was reducing."""


class StoreNotBuiltError(StoreError):
    """The store instance was requested implicitly before it was built."""


class UpdateFailedError(StateHubError):
    """Delivered to reads queued during an update whose reducer raised.

    The reducer's exception is available as ``__cause__``; the action that
    triggered the failed update is kept on ``action``.
    """

    def __init__(self, message: str, *, action: Any = None) -> None:
        self.action = action
        super().__init__(message)


class TaskNotBoundError(StateHubError):
    """A background task was started before the store was built."""
