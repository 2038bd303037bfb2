"""pystatehub - Dynamic reducer registry and update-aware state store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pystatehub")
except PackageNotFoundError:
    __version__ = "0+local"
from pystatehub.actions import INIT, REPLACE, Action, action_type
from pystatehub.config import StoreConfig
from pystatehub.exceptions import (
    InvalidActionError,
    InvalidQueryError,
    ReducerRegistrationError,
    ReentrantDispatchError,
    StateHubConfigError,
    StateHubError,
    StoreError,
    StoreNotBuiltError,
    TaskNotBoundError,
    UpdateFailedError,
)
from pystatehub.gate import UpdateGate
from pystatehub.manager import StoreManager
from pystatehub.middleware import logging_middleware
from pystatehub.query import query_state, resolve_path
from pystatehub.registry import PLACEHOLDER_REDUCER_NAME, ReducerRegistry, combine_reducers
from pystatehub.store import MiddlewareAPI, Store, apply_middleware, compose, create_store
from pystatehub.tasks import TaskContext, TaskMiddleware

__all__ = [
    "__version__",
    "INIT",
    "PLACEHOLDER_REDUCER_NAME",
    "REPLACE",
    "Action",
    "InvalidActionError",
    "InvalidQueryError",
    "MiddlewareAPI",
    "ReducerRegistrationError",
    "ReducerRegistry",
    "ReentrantDispatchError",
    "StateHubConfigError",
    "StateHubError",
    "Store",
    "StoreConfig",
    "StoreError",
    "StoreManager",
    "StoreNotBuiltError",
    "TaskContext",
    "TaskMiddleware",
    "TaskNotBoundError",
    "UpdateFailedError",
    "UpdateGate",
    "action_type",
    "apply_middleware",
    "combine_reducers",
    "compose",
    "create_store",
    "logging_middleware",
    "query_state",
    "resolve_path",
]
