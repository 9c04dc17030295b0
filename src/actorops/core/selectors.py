"""Predicates for picking jobs out of a listing.

Every selector answers ``matches(job)``. Leaf selectors test a single
attribute of a :class:`~actorops.core.jobs.Job`; ``AndSelector`` and
``OrSelector`` combine other selectors so that the CLI filter flags
(``--name``, ``--search``, ``--owner``, ``--or``) can be expressed as one
object and evaluated without touching the network.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from actorops.core.jobs import Job


class JobSelector(ABC):
    """Base class: a yes/no decision about one job."""

    @abstractmethod
    def matches(self, job: Job) -> bool:
        ...


class AllSelector(JobSelector):
    """Accepts every job; used when no filter flag was given."""

    def matches(self, job: Job) -> bool:
        return True


class NameRegexSelector(JobSelector):
    """
    Searches the job's technical name with a regular expression.

    The pattern is compiled eagerly so a typo surfaces before any job is
    fetched. ``re.search`` semantics apply: anchor with ``^``/``$`` for a
    full match.
    """

    def __init__(self, pattern: str):
        try:
            self.regex = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid regex expression: {exc}") from exc

    def matches(self, job: Job) -> bool:
        return self.regex.search(job.name) is not None


class SearchSelector(JobSelector):
    """Case-insensitive substring over name, title and description."""

    def __init__(self, term: str):
        self.term = term.lower()

    def matches(self, job: Job) -> bool:
        haystack = (job.name, job.title, job.description)
        return any(self.term in (value or "").lower() for value in haystack)


class OwnerSelector(JobSelector):
    """Exact owner username, ignoring case."""

    def __init__(self, owner: str):
        self.owner = owner.lower()

    def matches(self, job: Job) -> bool:
        return (job.owner or "").lower() == self.owner


class _CompositeSelector(JobSelector):
    def __init__(self, selectors: Iterable[JobSelector]):
        self.selectors = list(selectors)


class AndSelector(_CompositeSelector):
    """Every child must match. An empty list matches everything."""

    def matches(self, job: Job) -> bool:
        return all(child.matches(job) for child in self.selectors)


class OrSelector(_CompositeSelector):
    """At least one child must match. An empty list matches nothing."""

    def matches(self, job: Job) -> bool:
        return any(child.matches(job) for child in self.selectors)
