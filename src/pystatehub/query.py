"""State queries.

A query selects part of a state snapshot.  Three shapes are accepted:

* ``None``: the whole snapshot.
* ``"user.profile.name"``: a dotted path, resolved segment by segment.
* ``{"name": "user.profile.name", "age": "user.profile.age"}``: a mapping of
  output keys to dotted paths, resolved into a new dict with the same keys.

Missing paths resolve to ``None``; malformed queries raise
:class:`~pystatehub.exceptions.InvalidQueryError`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pystatehub.exceptions import InvalidQueryError

PATH_SEPARATOR = "."

Query = str | Mapping[str, str] | None


def split_path(path: str) -> tuple[str, ...]:
    """Split a dotted path into its segments.

    Raises :class:`InvalidQueryError` for non-strings, empty paths and paths
    with an empty segment (``"a..b"``, ``".a"``, ``"a."``).
    """
    if not isinstance(path, str):
        raise InvalidQueryError(f"Query path must be a string, got {type(path).__name__}", query=path)
    if not path:
        raise InvalidQueryError("Query path must be non-empty", query=path)
    segments = tuple(path.split(PATH_SEPARATOR))
    if any(not segment for segment in segments):
        raise InvalidQueryError(f"Query path has an empty segment: {path!r}", query=path)
    return segments


def _step(node: Any, segment: str) -> tuple[bool, Any]:
    if isinstance(node, Mapping):
        if segment in node:
            return True, node[segment]
        return False, None

    if isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray)):
        try:
            index = int(segment)
        except ValueError:
            return False, None
        if -len(node) <= index < len(node):
            return True, node[index]
        return False, None

    return False, None


def resolve_path(root: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted *path* against a nested mapping.

    Mappings are indexed by key, sequences by integer segment.  Returns
    *default* as soon as a segment is missing or the current node cannot be
    indexed.
    """
    node = root
    for segment in split_path(path):
        found, node = _step(node, segment)
        if not found:
            return default
    return node


def validate_query(query: Any) -> None:
    """Check the shape of *query* without resolving it."""
    if query is None:
        return
    if isinstance(query, str):
        split_path(query)
        return
    if isinstance(query, Mapping):
        for key, path in query.items():
            if not isinstance(path, str):
                raise InvalidQueryError(
                    f"Query mapping value for {key!r} must be a path string, got {type(path).__name__}",
                    query=query,
                )
            split_path(path)
        return
    raise InvalidQueryError(f"Unsupported query type: {type(query).__name__}", query=query)


def query_state(state: Any, query: Query = None) -> Any:
    """Resolve *query* against a state snapshot."""
    validate_query(query)

    if query is None:
        return state

    if isinstance(query, str):
        return resolve_path(state, query)

    return {key: resolve_path(state, path) for key, path in query.items()}
