"""Confidence-annotated extraction trees.

The text extractor returns loosely-typed JSON. It is converted exactly once,
by :func:`build_extraction_tree`, into a tree of three node kinds:

- :class:`Leaf` wraps one :class:`ConfidenceValue` (or ``None`` for unknown)
- :class:`Node` maps field names to subtrees
- :class:`ArrayNode` holds one subtree per detected array item

Walkers downstream dispatch on the node type and never inspect raw keys.
Keys that cannot be written as a path segment are dropped with a warning.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)

type Scalar = str | int | float | bool


@dataclass(frozen=True, slots=True)
class ConfidenceValue:
    """One extracted value with the model-reported certainty in ``[0, 1]``.

    ``value`` may be ``None`` with a nonzero confidence: the model is stating
    the field is explicitly unknown. Such values are never written.
    """

    value: Scalar | None
    confidence: float

    def __post_init__(self) -> None:
        if math.isnan(self.confidence) or not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1]: {self.confidence}")

    @property
    def is_known(self) -> bool:
        return self.value is not None


@dataclass(frozen=True, slots=True)
class Leaf:
    item: ConfidenceValue | None = None

    @property
    def value(self) -> Scalar | None:
        return None if self.item is None else self.item.value

    @property
    def confidence(self) -> float:
        return 0.0 if self.item is None else self.item.confidence


@dataclass(frozen=True, slots=True)
class Node:
    children: Mapping[str, ExtractionTree] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, path: str) -> ExtractionTree | None:
        """Return the subtree at a dot/bracket path, or ``None`` when absent."""

        from factfind.domain.reconciliation.paths import parse_path  # noqa: PLC0415

        current: ExtractionTree = self
        for segment in parse_path(path):
            match current, segment:
                case Node(children=children), str() | int():
                    child = children.get(str(segment))
                case ArrayNode(items=items), int() if segment < len(items):
                    child = items[segment]
                case _:
                    return None
            if child is None:
                return None
            current = child
        return current


@dataclass(frozen=True, slots=True)
class ArrayNode:
    items: tuple[ExtractionTree, ...] = ()


type ExtractionTree = Leaf | Node | ArrayNode


@dataclass(frozen=True, slots=True)
class LeafRef:
    """A leaf together with its location in the tree."""

    path: str
    leaf: Leaf
    in_array: bool


def build_extraction_tree(payload: Mapping[str, object] | None) -> Node:
    """Convert extractor JSON into an immutable :class:`Node` tree."""

    if payload is None:
        return Node()
    return _build_node(payload, path="")


def _build(value: object, *, path: str) -> ExtractionTree | None:
    if value is None:
        return Leaf()
    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, object], value)
        if "value" in mapping and "confidence" in mapping:
            return _build_leaf(mapping, path=path)
        return _build_node(mapping, path=path)
    if isinstance(value, list):
        items: list[ExtractionTree] = []
        for index, item in enumerate(cast(list[object], value)):
            if not isinstance(item, Mapping):
                log.debug("Ignoring non-object array item at %s[%d]", path, index)
                continue
            child = _build(item, path=f"{path}[{index}]")
            if child is not None:
                items.append(child)
        return ArrayNode(items=tuple(items))
    log.debug("Ignoring bare value without confidence at %s", path)
    return None


def _is_addressable(key: object) -> bool:
    """Whether ``key`` can be written as one segment of a dot/bracket path."""

    return (
        isinstance(key, str)
        and bool(key)
        and key == key.strip()
        and not key.isdigit()
        and not any(char in key for char in ".[]")
    )


def _build_node(mapping: Mapping[str, object], *, path: str) -> Node:
    children: dict[str, ExtractionTree] = {}
    for key, raw in mapping.items():
        if not _is_addressable(key):
            log.warning("Dropping unaddressable field %r under %s", key, path or "<root>")
            continue
        child = _build(raw, path=f"{path}.{key}" if path else key)
        if child is not None:
            children[key] = child
    return Node(children=MappingProxyType(children))


def _build_leaf(mapping: Mapping[str, object], *, path: str) -> Leaf:
    raw_value = mapping.get("value")
    confidence = _coerce_confidence(mapping.get("confidence"))
    if raw_value is not None and not isinstance(raw_value, str | int | float | bool):
        log.debug("Dropping non-scalar value at %s", path)
        raw_value = None
    return Leaf(ConfidenceValue(value=raw_value, confidence=confidence))


def _coerce_confidence(raw: object) -> float:
    if isinstance(raw, bool) or not isinstance(raw, int | float | str):
        return 0.0
    try:
        number = float(raw)
    except ValueError:
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(max(number, 0.0), 1.0)


def iter_leaves(tree: ExtractionTree, *, prefix: str = "") -> Iterator[LeafRef]:
    """Yield every leaf with its bracket-form path, depth first, in input order."""

    yield from _iter_leaves(tree, prefix=prefix, in_array=False)


def _iter_leaves(tree: ExtractionTree, *, prefix: str, in_array: bool) -> Iterator[LeafRef]:
    match tree:
        case Leaf():
            yield LeafRef(path=prefix, leaf=tree, in_array=in_array)
        case Node(children=children):
            for key, child in children.items():
                path = f"{prefix}.{key}" if prefix else key
                yield from _iter_leaves(child, prefix=path, in_array=in_array)
        case ArrayNode(items=items):
            for index, item in enumerate(items):
                yield from _iter_leaves(item, prefix=f"{prefix}[{index}]", in_array=True)


def tree_to_payload(tree: ExtractionTree) -> object:
    """Render a tree back to extractor-style JSON."""

    match tree:
        case Leaf(item=None):
            return None
        case Leaf(item=ConfidenceValue(value=value, confidence=confidence)):
            return {"value": value, "confidence": confidence}
        case Node(children=children):
            return {key: tree_to_payload(child) for key, child in children.items()}
        case ArrayNode(items=items):
            return [tree_to_payload(item) for item in items]
