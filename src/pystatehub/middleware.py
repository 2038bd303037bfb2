"""Built-in middleware."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pystatehub._redact import redact_for_log
from pystatehub.actions import action_type, is_internal
from pystatehub.config import StoreConfig
from pystatehub.store import Dispatch, Middleware, MiddlewareAPI

_logger = logging.getLogger(__name__)


def logging_middleware(config: StoreConfig | None = None, *, logger: logging.Logger | None = None) -> Middleware:
    """Log every dispatched action (redacted) at DEBUG level.

    The store's own lifecycle actions are not logged.
    """
    config = config or StoreConfig()
    log = logger or _logger

    def middleware(api: MiddlewareAPI) -> Callable[[Dispatch], Dispatch]:
        def wrap(next_dispatch: Dispatch) -> Dispatch:
            def dispatch(action: Any) -> Any:
                if log.isEnabledFor(logging.DEBUG) and not is_internal(action):
                    log.debug(
                        "Dispatching %s: %s",
                        action_type(action),
                        redact_for_log(action, redact_keys=config.redact_keys, max_string=config.log_max_string),
                    )
                return next_dispatch(action)

            return dispatch

        return wrap

    return middleware