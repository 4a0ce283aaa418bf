"""Keyword-density scoring for a single rubric criterion.

Scoring is a fixed, explainable heuristic rather than language
understanding: every result names the rule that produced it.

1. A failure condition fires when the text literally mentions it, or
   when a heuristic predicate registered under its name returns true.
   Any failure scores 0.
2. Otherwise keyword hits decide: ratio >= 0.5 or >= 2 hits earns full
   marks, a single hit earns ``ceil(0.6 * max_score)``, none earns 0.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from callcoach.models.analysis import CriterionResult
from callcoach.models.context import CallContext
from callcoach.models.rubric import Criterion

PARTIAL_CREDIT = 0.6
FULL_CREDIT_RATIO = 0.5
FULL_CREDIT_MATCHES = 2

RUSHED_MAX_LENGTH = 20
VAGUE_MAX_LENGTH = 30

FailurePredicate = Callable[[str, CallContext], bool]


def _incomplete_greeting(text: str, _context: CallContext) -> bool:
    return "comcast" not in text or "help" not in text


def _rushed(text: str, _context: CallContext) -> bool:
    return len(text) < RUSHED_MAX_LENGTH


def _no_company_name(text: str, _context: CallContext) -> bool:
    return "comcast" not in text


def _vague_response(text: str, _context: CallContext) -> bool:
    return len(text) < VAGUE_MAX_LENGTH and "understand" not in text


def _no_ownership(text: str, _context: CallContext) -> bool:
    return not any(phrase in text for phrase in ("i will", "let me", "i can"))


def _assumptions(text: str, _context: CallContext) -> bool:
    return any(phrase in text for phrase in ("probably", "maybe", "i think"))


def _no_probing(text: str, _context: CallContext) -> bool:
    return "?" not in text and "tell me" not in text and "what" not in text


FAILURE_PREDICATES: dict[str, FailurePredicate] = {
    "incomplete greeting": _incomplete_greeting,
    "rushed": _rushed,
    "no company name": _no_company_name,
    "vague response": _vague_response,
    "no ownership": _no_ownership,
    "assumptions": _assumptions,
    "no probing": _no_probing,
}


def failed_condition(criterion: Criterion, text: str, context: CallContext) -> str | None:
    """Return the first failure condition that fires, if any."""
    for condition in criterion.failure_conditions:
        if condition in text:
            return condition
        predicate = FAILURE_PREDICATES.get(condition)
        if predicate is not None and predicate(text, context):
            return condition
    return None


def count_keyword_matches(criterion: Criterion, text: str) -> int:
    """Count distinct criterion keywords contained in ``text``."""
    return sum(1 for keyword in criterion.keywords if keyword in text)


def evaluate_criterion(criterion: Criterion, text: str, context: CallContext) -> CriterionResult:
    """Score one criterion against normalized agent text.

    Args:
        criterion: Criterion to score.
        text: Normalized (lowercase) agent utterance.
        context: Context snapshot for the turn.

    Returns:
        CriterionResult with score, justification and strength or
        improvement text.
    """
    label = criterion.name.lower()

    condition = failed_condition(criterion, text, context)
    if condition is not None:
        return CriterionResult(
            name=criterion.name,
            score=0,
            max_score=criterion.max_score,
            justification=f"Failed: {condition}",
            improvement=f"Improve {label}: {criterion.description}",
        )

    matches = count_keyword_matches(criterion, text)
    if matches > 0:
        ratio = matches / (len(criterion.keywords) or 1)
        if ratio >= FULL_CREDIT_RATIO or matches >= FULL_CREDIT_MATCHES:
            return CriterionResult(
                name=criterion.name,
                score=criterion.max_score,
                max_score=criterion.max_score,
                justification=f"Excellent: Demonstrated {label} effectively",
                strength=f"Strong {label}",
            )
        return CriterionResult(
            name=criterion.name,
            score=math.ceil(criterion.max_score * PARTIAL_CREDIT),
            max_score=criterion.max_score,
            justification=f"Good: Some evidence of {label}",
            strength=f"Adequate {label}",
        )

    return CriterionResult(
        name=criterion.name,
        score=0,
        max_score=criterion.max_score,
        justification=f"Missing: No clear evidence of {label}",
        improvement=f"Add {label}: {criterion.description}",
    )


__all__ = [
    "FAILURE_PREDICATES",
    "count_keyword_matches",
    "evaluate_criterion",
    "failed_condition",
]
