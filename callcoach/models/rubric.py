"""Rubric value types: criteria, sections and auto-fail rules.

These are immutable building blocks; the catalog that assembles and
validates them lives in ``callcoach.services.qa.rubric``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from callcoach.core.exceptions import RubricConfigurationError

if TYPE_CHECKING:
    from callcoach.models.context import CallContext


class SectionId(str, Enum):
    """Rubric sections in scoring order."""

    START = "START"
    SOLVE = "SOLVE"
    SELL = "SELL"
    SUMMARIZE = "SUMMARIZE"
    BEHAVIORS = "BEHAVIORS"


class AutoFailCategory(str, Enum):
    """Disqualifying behavior families."""

    RUDENESS = "rudeness"
    CALL_AVOIDANCE = "call_avoidance"
    INAPPROPRIATE_TRANSFER = "inappropriate_transfer"


@dataclass(frozen=True)
class Criterion:
    """A single scored item within a rubric section."""

    name: str
    max_score: int
    description: str
    keywords: tuple[str, ...] = ()
    failure_conditions: tuple[str, ...] = ()
    indicators: tuple[str, ...] = ()
    not_applicable_note: str | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        if self.max_score < 0:
            msg = f"Criterion {self.name!r} has negative max_score {self.max_score}"
            raise RubricConfigurationError(msg)


@dataclass(frozen=True)
class RubricSection:
    """A weighted group of criteria.

    ``applicability`` is only set for sections that can be skipped for a
    turn (SELL); ``None`` means the section always applies.
    """

    id: SectionId
    name: str
    max_points: int
    description: str
    criteria: tuple[Criterion, ...]
    applicability: Callable[[CallContext], bool] | None = field(default=None, compare=False)
    applicability_conditions: tuple[str, ...] = ()

    def is_applicable(self, context: CallContext) -> bool:
        """Return whether this section counts for a turn in ``context``."""
        if self.applicability is None:
            return True
        return self.applicability(context)

    @property
    def criteria_total(self) -> int:
        """Sum of criterion maxima."""
        return sum(c.max_score for c in self.criteria)


@dataclass(frozen=True)
class AutoFailRule:
    """A pattern family that zeroes a turn when it matches.

    With ``match_all`` every pattern must match (combined phrase rules);
    otherwise any single pattern is enough.
    """

    category: AutoFailCategory
    patterns: tuple[re.Pattern[str], ...]
    reason: str
    match_all: bool = False

    def matches(self, text: str) -> bool:
        """Check the rule against normalized agent text."""
        hits = (p.search(text) is not None for p in self.patterns)
        return all(hits) if self.match_all else any(hits)


__all__ = [
    "AutoFailCategory",
    "AutoFailRule",
    "Criterion",
    "RubricSection",
    "SectionId",
]
