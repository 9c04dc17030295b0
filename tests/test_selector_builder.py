import pytest

from actorops.cli.common.selector_builder import build_selector
from actorops.core.selectors import (
    AllSelector,
    AndSelector,
    NameRegexSelector,
    OrSelector,
    SearchSelector,
)


def test_build_selector_without_criteria_matches_all():
    assert isinstance(build_selector(), AllSelector)


def test_build_selector_single_criterion():
    assert isinstance(build_selector(name="daily"), NameRegexSelector)
    assert isinstance(build_selector(search=" crawl "), SearchSelector)


def test_build_selector_combined_and_or():
    and_selector = build_selector(name="daily", owner="john")
    or_selector = build_selector(name="daily", search="x", use_or=True)

    assert isinstance(and_selector, AndSelector)
    assert isinstance(or_selector, OrSelector)


def test_build_selector_invalid_regex():
    with pytest.raises(ValueError, match="Invalid regex"):
        build_selector(name="(")
