from __future__ import annotations

from pystatehub._redact import redact_for_log
from pystatehub.actions import Action


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "type": "LOGIN",
        "password": "pw",
        "user": {"name": "ann", "Token": "SIG"},
        "history": [{"apiKey": "k"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["type"] == "LOGIN"
    assert redacted["password"] == "<redacted>"
    assert redacted["user"] == {"name": "ann", "Token": "<redacted>"}
    assert redacted["history"] == [{"apiKey": "<redacted>"}]


def test_redact_for_log_custom_keys() -> None:
    redacted = redact_for_log({"ssn": "123", "password": "pw"}, redact_keys=frozenset({"ssn"}))
    assert redacted == {"ssn": "<redacted>", "password": "pw"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_dumps_models() -> None:
    action = Action(type="LOGIN", payload={"secret": "s", "user": "ann"})

    redacted = redact_for_log(action)
    assert redacted["type"] == "LOGIN"
    assert redacted["payload"] == {"secret": "<redacted>", "user": "ann"}


def test_redact_for_log_bytes_and_objects() -> None:
    assert redact_for_log(b"abc") == "<bytes:3b>"
    assert redact_for_log(object()).startswith("<object object")
