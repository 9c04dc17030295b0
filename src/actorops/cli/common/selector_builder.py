"""Selector construction utilities.

This module provides a small factory function that translates user intent
(such as CLI arguments) into concrete JobSelector instances. It centralizes
validation and composition logic for selectors, so the rest of the
application can work with a single selector abstraction.
"""

from actorops.core.selectors import (
    AllSelector,
    AndSelector,
    JobSelector,
    NameRegexSelector,
    OrSelector,
    OwnerSelector,
    SearchSelector,
)


def build_selector(
    *,
    name: str | None = None,
    search: str | None = None,
    owner: str | None = None,
    use_or: bool = False,
) -> JobSelector:
    """
    Build a composite JobSelector from user-provided criteria.

    Args:
        name: Optional regular expression used to match job names.
        search: Optional free-text term matched against name, title and
                description.
        owner: Optional owner username.
        use_or: If True, combine multiple selectors using logical OR.
                If False, combine them using logical AND.

    Returns:
        A JobSelector instance. Without criteria every job matches.

    Raises:
        ValueError: If the name regex is invalid.
    """
    selectors: list[JobSelector] = []

    if name:
        selectors.append(NameRegexSelector(name))
    if search and search.strip():
        selectors.append(SearchSelector(search.strip()))
    if owner and owner.strip():
        selectors.append(OwnerSelector(owner.strip()))

    if not selectors:
        return AllSelector()

    if len(selectors) == 1:
        return selectors[0]

    return OrSelector(selectors) if use_or else AndSelector(selectors)
