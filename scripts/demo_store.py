#!/usr/bin/env python3
"""Walk through the store manager lifecycle from the command line.

Registers two reducers, dispatches a few actions, reads state while an
update is in progress, then removes a reducer and shows the slice disappear.
Pass ``--verbose`` to see the library's DEBUG logs (actions are redacted).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pystatehub import StoreConfig, StoreManager  # noqa: E402


def counter(state: Any, action: Any) -> Any:
    state = 0 if state is None else state
    return state + 1 if action["type"] == "INC" else state


def user(state: Any, action: Any) -> Any:
    state = {"profile": {"name": "Ann"}} if state is None else state
    if action["type"] == "LOGIN":
        return {"profile": {"name": action["name"]}, "password": action.get("password")}
    return state


async def _run(args: argparse.Namespace) -> int:
    manager = StoreManager(StoreConfig(log_actions=args.verbose))
    manager.add_reducer("counter", counter)
    manager.add_reducer("user", user)

    in_flight: list[asyncio.Future[Any]] = []

    def probe(state: Any, action: Any) -> Any:
        if action["type"] == "INC":
            in_flight.append(manager.get_state("counter"))
        return state

    manager.add_reducer("probe", probe)

    for _ in range(args.increments):
        manager.dispatch({"type": "INC"})
    manager.dispatch({"type": "LOGIN", "name": args.name, "password": "not-for-logs"})

    print("reads issued during updates:", [await f for f in in_flight])
    print("state:", json.dumps(await manager.get_state(), default=str))
    print("query:", await manager.get_state({"who": "user.profile.name", "age": "user.profile.age"}))

    manager.remove_reducer("counter")
    manager.remove_reducer("probe")
    manager.update()
    print("after removing counter:", await manager.get_state("counter"))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--increments", type=int, default=3)
    parser.add_argument("--name", default="Ann")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
