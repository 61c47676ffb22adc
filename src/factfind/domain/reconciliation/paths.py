"""Dot/bracket path addressing over nested records.

Paths look like ``employment.monthlyGrossIncome`` or ``pensions[2].provider``.
Both ``a[0].b`` and ``a.0.b`` normalise to the segments ``("a", 0, "b")``;
a segment made only of digits is a list index.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, cast

from factfind.domain.errors import InvalidPathError, PathConflictError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

type Segment = str | int
type Path = tuple[Segment, ...]

_BRACKET = re.compile(r"\[(\d+)\]")
_MISSING = object()


def parse_path(path: str) -> Path:
    """Split a path into key and index segments.

    Raises :class:`InvalidPathError` for empty paths, empty segments or
    malformed brackets.
    """

    if not path or not path.strip():
        raise InvalidPathError(path, "path is empty")
    normalised = _BRACKET.sub(r".\1", path.strip())
    if "[" in normalised or "]" in normalised:
        raise InvalidPathError(path, "brackets must enclose a non-negative integer")
    segments: list[Segment] = []
    for raw in normalised.split("."):
        if not raw:
            raise InvalidPathError(path, "empty segment")
        segments.append(int(raw) if raw.isdigit() else raw)
    return tuple(segments)


def format_path(segments: Sequence[Segment]) -> str:
    """Render segments back to bracket form (``a[0].b``)."""

    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(segment)
    return "".join(parts)


def resolve_path(root: object, path: str | Path, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` if any segment is missing.

    Never raises on traversal. An unparsable path also yields ``default``.
    """

    try:
        segments = parse_path(path) if isinstance(path, str) else path
    except InvalidPathError:
        return default
    current: object = root
    for segment in segments:
        current = _child(current, segment)
        if current is _MISSING:
            return default
    return current


def _child(container: object, segment: Segment) -> object:
    if isinstance(container, dict):
        mapping = cast(dict[str, object], container)
        return mapping.get(str(segment), _MISSING)
    if isinstance(container, list) and isinstance(segment, int):
        items = cast(list[object], container)
        return items[segment] if segment < len(items) else _MISSING
    return _MISSING


def set_path(root: dict[str, Any], path: str | Path, value: object) -> None:
    """Write ``value`` at ``path``, creating missing containers on the way.

    A missing (or ``None``) intermediate becomes a list when the following
    segment is an index, otherwise a dict. Lists are padded with ``None`` up to
    the requested index. Traversing through an existing scalar, or through a
    container of the wrong kind, raises :class:`PathConflictError` and leaves
    the record untouched at that point.
    """

    segments = parse_path(path) if isinstance(path, str) else path
    if not segments:
        raise InvalidPathError("", "path is empty")
    text = path if isinstance(path, str) else format_path(path)
    if isinstance(segments[0], int):
        raise PathConflictError(text, segments[0], root)

    current: object = root
    for position, segment in enumerate(segments[:-1]):
        next_segment = segments[position + 1]
        existing = _child(current, segment)
        if existing is _MISSING or existing is None:
            created: object = [] if isinstance(next_segment, int) else {}
            _assign(current, segment, created, text)
            current = created
            continue
        if not _fits(existing, next_segment):
            raise PathConflictError(text, segment, existing)
        current = existing
    _assign(current, segments[-1], value, text)


def _fits(container: object, next_segment: Segment) -> bool:
    if isinstance(next_segment, int):
        return isinstance(container, list)
    return isinstance(container, dict)


def _assign(container: object, segment: Segment, value: object, path: str) -> None:
    if isinstance(container, dict):
        cast(dict[str, object], container)[str(segment)] = value
        return
    if isinstance(container, list) and isinstance(segment, int):
        items = cast(list[object], container)
        if segment >= len(items):
            items.extend([None] * (segment + 1 - len(items)))
        items[segment] = value
        return
    raise PathConflictError(path, segment, container)


def iter_leaf_paths(root: object, *, prefix: Path = ()) -> Iterator[tuple[str, object]]:
    """Yield ``(path, value)`` for every non-container value under ``root``."""

    if isinstance(root, dict):
        for key, child in cast(dict[str, object], root).items():
            yield from iter_leaf_paths(child, prefix=(*prefix, key))
        return
    if isinstance(root, list):
        for index, child in enumerate(cast(list[object], root)):
            yield from iter_leaf_paths(child, prefix=(*prefix, index))
        return
    if prefix:
        yield format_path(prefix), root
