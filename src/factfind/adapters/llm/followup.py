"""Second-pass extraction of financial assets the first pass missed."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Final, cast

if TYPE_CHECKING:
    from collections.abc import Mapping

FINANCIAL_FIELDS: Final[tuple[str, ...]] = ("bankAccounts", "investments", "pensions", "properties")


def missing_financials(data: Mapping[str, Any] | None) -> list[str]:
    """Return the financial array fields that are absent or empty."""

    if not data:
        return list(FINANCIAL_FIELDS)
    missing: list[str] = []
    for name in FINANCIAL_FIELDS:
        value = data.get(name)
        if not isinstance(value, list) or not value:
            missing.append(name)
    return missing


def merge_extraction_payloads(
    base: Mapping[str, Any] | None, extra: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Overlay ``extra`` onto a copy of ``base``.

    Non-empty arrays replace, nested objects merge recursively, scalars
    overwrite. An empty array never clears existing items.
    """

    result: dict[str, Any] = copy.deepcopy(dict(base or {}))
    if extra:
        _merge_into(result, extra)
    return result


def _merge_into(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, list):
            if not isinstance(target.get(key), list):
                target[key] = []
            if value:
                target[key] = copy.deepcopy(value)
        elif isinstance(value, dict):
            nested = target.get(key)
            if not isinstance(nested, dict):
                nested = {}
                target[key] = nested
            _merge_into(cast(dict[str, Any], nested), cast(dict[str, Any], value))
        else:
            target[key] = copy.deepcopy(value)
