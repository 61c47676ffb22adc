from __future__ import annotations

from typing import Any

import pytest

from factfind.domain.errors import InvalidPathError, PathConflictError
from factfind.domain.reconciliation.paths import (
    format_path,
    iter_leaf_paths,
    parse_path,
    resolve_path,
    set_path,
)


def test_parse_path_normalises_brackets_and_dots() -> None:
    assert parse_path("pensions[2].provider") == ("pensions", 2, "provider")
    assert parse_path("pensions.2.provider") == ("pensions", 2, "provider")
    assert parse_path("employment.monthlyGrossIncome") == ("employment", "monthlyGrossIncome")


@pytest.mark.parametrize("path", ["", "   ", "a..b", "a[x].b", "a[1", "a.b."])
def test_parse_path_rejects_malformed(path: str) -> None:
    with pytest.raises(InvalidPathError):
        parse_path(path)


def test_format_path_renders_bracket_form() -> None:
    assert format_path(("pensions", 0, "address", "city")) == "pensions[0].address.city"


def test_set_then_resolve_creates_containers() -> None:
    root: dict[str, Any] = {}

    set_path(root, "children[1].firstName", "Leo")
    set_path(root, "employment.jobTitle", "Engineer")

    assert root == {
        "children": [None, {"firstName": "Leo"}],
        "employment": {"jobTitle": "Engineer"},
    }
    assert resolve_path(root, "children[1].firstName") == "Leo"
    assert resolve_path(root, "children.1.firstName") == "Leo"


def test_set_path_replaces_none_intermediates() -> None:
    root: dict[str, Any] = {"spouse": None}

    set_path(root, "spouse.firstName", "Ana")

    assert root == {"spouse": {"firstName": "Ana"}}


def test_resolve_path_never_raises() -> None:
    root = {"personal": {"firstName": "Maria"}, "pensions": []}

    assert resolve_path(root, "personal.firstName.length") is None
    assert resolve_path(root, "pensions[3].provider", default="n/a") == "n/a"
    assert resolve_path(root, "a..b", default="bad") == "bad"


def test_set_path_through_scalar_raises_path_conflict() -> None:
    root: dict[str, Any] = {"personal": {"firstName": "Maria"}}

    with pytest.raises(PathConflictError) as exc:
        set_path(root, "personal.firstName.initial", "M")

    assert exc.value.segment == "firstName"
    assert root == {"personal": {"firstName": "Maria"}}


def test_set_path_with_mismatched_container_raises() -> None:
    root: dict[str, Any] = {"pensions": {"provider": "Aviva"}}

    with pytest.raises(PathConflictError):
        set_path(root, "pensions[0].provider", "Aviva")


def test_iter_leaf_paths_lists_scalars() -> None:
    root = {"personal": {"firstName": "Maria"}, "pensions": [{"provider": "Aviva"}]}

    assert list(iter_leaf_paths(root)) == [
        ("personal.firstName", "Maria"),
        ("pensions[0].provider", "Aviva"),
    ]
