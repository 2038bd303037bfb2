"""Store manager configuration for pystatehub."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pystatehub.exceptions import StateHubConfigError

DEFAULT_REDACT_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "accesstoken",
        "refreshtoken",
        "apikey",
        "authorization",
        "cookie",
    }
)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Store manager configuration.

    Parameters
    ----------
    test_mode : bool
        Always inject the inert placeholder reducer into the root reducer,
        even when real reducers are registered.  Mirrors the behaviour test
        suites rely on when they build stores with partial registries.
    log_actions : bool
        Install a middleware that logs every dispatched action at DEBUG level.
    log_max_string : int
        Strings longer than this are truncated in action/state debug logs.
    redact_keys : frozenset[str]
        Lower-cased mapping keys whose values are replaced by ``<redacted>``
        in debug logs.
    """

    test_mode: bool = False
    log_actions: bool = False
    log_max_string: int = 512
    redact_keys: frozenset[str] = DEFAULT_REDACT_KEYS

    def __post_init__(self) -> None:
        if self.log_max_string <= 0:
            raise StateHubConfigError("log_max_string must be positive")
        object.__setattr__(self, "redact_keys", frozenset(k.lower() for k in self.redact_keys))

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``STATEHUB_TEST_MODE``, ``STATEHUB_LOG_ACTIONS`` and
        ``STATEHUB_LOG_MAX_STRING``. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        StoreConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "test_mode" not in overrides:
            config_kwargs["test_mode"] = _env_bool(env.get("STATEHUB_TEST_MODE"), False)

        if "log_actions" not in overrides:
            config_kwargs["log_actions"] = _env_bool(env.get("STATEHUB_LOG_ACTIONS"), False)

        max_string_env = env.get("STATEHUB_LOG_MAX_STRING")
        if max_string_env is not None and "log_max_string" not in overrides:
            try:
                config_kwargs["log_max_string"] = int(max_string_env)
            except ValueError as exc:
                raise StateHubConfigError(f"STATEHUB_LOG_MAX_STRING is not an integer: {max_string_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
