from __future__ import annotations

import re

import pytest

from detector.filters import PathFilter, matches_pattern, should_report


@pytest.mark.parametrize(
    ("accessor", "pattern", "expected"),
    [
        ("public", "public", True),
        ("public.id", "public", True),
        ("public[0]", "public", True),
        ("publicity", "public", False),
        ("x.public", "public", False),
        ("user.name", re.compile(r"\.name$"), True),
        ("user.named", re.compile(r"\.name$"), False),
        ("user", 42, False),
    ],
)
def test_matches_pattern(accessor: str, pattern: object, expected: bool) -> None:
    assert matches_pattern(accessor, pattern) is expected


def test_no_patterns_reports_everything() -> None:
    assert should_report("anything.at.all") is True


def test_empty_include_reports_nothing() -> None:
    assert should_report("public", include=[]) is False


def test_include_limits_to_subtree() -> None:
    assert should_report("public.id", include=["public"]) is True
    assert should_report("private.key", include=["public"]) is False


def test_exclude_wins_over_include() -> None:
    include = ["public"]
    exclude = ["public.secretField"]

    assert should_report("public.secretField", include, exclude) is False
    assert should_report("public.secretField.inner", include, exclude) is False
    assert should_report("public.id", include, exclude) is True


def test_regex_exclude() -> None:
    assert should_report("token", exclude=[re.compile("^tok")]) is False
    assert should_report("stoke", exclude=[re.compile("^tok")]) is True


def test_path_filter_is_callable_and_snapshots_patterns() -> None:
    include = ["a"]
    f = PathFilter(include=include, exclude=None)
    include.append("b")

    assert f("a.x") is True
    assert f("b") is False
    assert f.include == ("a",)
    assert f.exclude is None
