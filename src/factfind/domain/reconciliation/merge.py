"""Apply extracted fields onto client records.

Two modes share :func:`apply_field`:

- interactive: the caller names the approved paths, optionally with values
  edited in a form (strings, coerced back with :func:`coerce_form_value`)
- batch: every known leaf at or above the confidence threshold is written,
  with no conflict gating

Both modes work on a deep copy, so the record passed in is never modified.
After writing they bump ``version``, stamp ``updatedAt``, append a
``dataSources`` entry and recompute ``dataCompleteness``.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, cast

from factfind.domain.errors import PathConflictError
from factfind.domain.model.enums import DataSourceType, OverwritePolicy
from factfind.domain.model.extraction import ArrayNode, Leaf, iter_leaves
from factfind.domain.model.record import sub_entity_factory, timestamp

from .completeness import score_completeness
from .conflicts import is_empty
from .paths import format_path, parse_path, resolve_path, set_path

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from factfind.domain.model.extraction import Node
    from factfind.domain.model.record import ClientRecord

    from .paths import Path

log = getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD: Final[float] = 0.6

SYSTEM_FIELDS: Final[frozenset[str]] = frozenset(
    {"id", "createdAt", "updatedAt", "version", "dataCompleteness", "dataSources", "history"}
)


@dataclass(frozen=True, slots=True)
class ApprovedField:
    """A path the reviewer accepted, with the form value if they edited it."""

    path: str
    edited_value: str | None = None


@dataclass(frozen=True, slots=True)
class MergeResult:
    record: ClientRecord
    fields_written: tuple[str, ...] = field(default_factory=tuple)

    @property
    def fields_updated(self) -> int:
        return len(self.fields_written)


def coerce_form_value(raw: str) -> str | int | float | bool:
    """Turn a form string back into a number or boolean where it looks like one."""

    text = raw.strip()
    if text and "_" not in text:
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            pass
        else:
            if math.isfinite(number):
                return number
    if raw == "true":
        return True
    if raw == "false":
        return False
    return raw


def apply_field(record: ClientRecord, path: str | Path, value: object) -> None:
    """Write one value into ``record`` in place.

    Sub-entity arrays are first padded with fully-initialised default entries
    up to the requested index.
    """

    segments = parse_path(path) if isinstance(path, str) else path
    _grow_sub_entities(record, segments)
    set_path(record, segments, value)


def _grow_sub_entities(record: ClientRecord, segments: Path) -> None:
    for position in range(1, len(segments)):
        index = segments[position]
        key = segments[position - 1]
        if not isinstance(index, int) or not isinstance(key, str):
            continue
        factory = sub_entity_factory(key)
        if factory is None:
            continue
        prefix = segments[:position]
        items = resolve_path(record, prefix)
        if items is None:
            items = []
            set_path(record, prefix, items)
        if not isinstance(items, list):
            raise PathConflictError(format_path(segments), key, items)
        entries = cast(list[Any], items)
        while len(entries) <= index:
            entries.append(factory())
        if entries[index] is None:
            entries[index] = factory()


def extend_sub_entities(record: ClientRecord, extraction: Node) -> None:
    """Grow each sub-entity array to at least the extracted item count.

    Existing items beyond the extracted count are kept.
    """

    for key, child in extraction.children.items():
        if not isinstance(child, ArrayNode) or not child.items:
            continue
        if sub_entity_factory(key) is None:
            continue
        _grow_sub_entities(record, (key, len(child.items) - 1))


def merge_interactive(
    record: ClientRecord,
    extraction: Node,
    approved: Iterable[ApprovedField],
    *,
    file_name: str | None = None,
    now: datetime | None = None,
) -> MergeResult:
    """Write only the reviewer-approved paths, preferring edited form values."""

    updated = copy.deepcopy(record)
    written: list[str] = []
    edited: list[str] = []
    for choice in approved:
        if _is_system_field(choice.path):
            log.warning("Ignoring approval for system field %s", choice.path)
            continue
        if choice.edited_value is not None:
            value: object = coerce_form_value(choice.edited_value)
            edited.append(choice.path)
        else:
            leaf = extraction.get(choice.path)
            if not isinstance(leaf, Leaf) or leaf.value is None:
                log.debug("Approved path %s has no extracted value", choice.path)
                continue
            value = leaf.value
        apply_field(updated, choice.path, value)
        written.append(choice.path)

    source: dict[str, Any] = {
        "type": DataSourceType.TRANSCRIPT.value,
        "humanReviewed": True,
        "editedFields": edited,
    }
    if file_name:
        source["fileName"] = file_name
    _finalise(updated, source, written, now)
    return MergeResult(record=updated, fields_written=tuple(written))


def merge_batch(
    record: ClientRecord,
    extraction: Node,
    *,
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    policy: OverwritePolicy = OverwritePolicy.ALWAYS,
    file_name: str | None = None,
    now: datetime | None = None,
) -> MergeResult:
    """Write every known leaf whose confidence reaches ``threshold``.

    Conflicts are not consulted. With :attr:`OverwritePolicy.FILL_EMPTY` a
    non-empty existing value is left alone.
    """

    updated = copy.deepcopy(record)
    extend_sub_entities(updated, extraction)
    written: list[str] = []
    for ref in iter_leaves(extraction):
        if ref.leaf.value is None or ref.leaf.confidence < threshold:
            continue
        if _is_system_field(ref.path):
            continue
        if policy is OverwritePolicy.FILL_EMPTY and not is_empty(resolve_path(updated, ref.path)):
            continue
        apply_field(updated, ref.path, ref.leaf.value)
        written.append(ref.path)

    source: dict[str, Any] = {"type": DataSourceType.BATCH_TRANSCRIPT.value}
    if file_name:
        source["fileName"] = file_name
    _finalise(updated, source, written, now)
    return MergeResult(record=updated, fields_written=tuple(written))


def _is_system_field(path: str) -> bool:
    segments = parse_path(path)
    if segments[0] in SYSTEM_FIELDS:
        return True
    # Sub-entity ids are generated on creation, never extracted.
    return len(segments) > 2 and segments[-1] == "id" and isinstance(segments[-2], int)


def _finalise(
    record: ClientRecord,
    source: dict[str, Any],
    written: list[str],
    now: datetime | None,
) -> None:
    stamp = timestamp(now)
    record["version"] = int(record.get("version") or 0) + 1
    record["updatedAt"] = stamp
    source["date"] = stamp
    source["fieldsUpdated"] = len(written)
    sources = record.get("dataSources")
    if not isinstance(sources, list):
        sources = []
        record["dataSources"] = sources
    cast(list[dict[str, Any]], sources).append(source)
    record["dataCompleteness"] = score_completeness(record)
