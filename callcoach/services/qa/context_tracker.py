"""Call context tracking across turns.

The stage here is a coarse estimate from the turn count alone, used for
coaching hints and display. Section scoring does not read it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from callcoach.models.context import CallContext, CallStage, Sentiment
from callcoach.services.qa.text import contains_any, normalize_text

logger = structlog.get_logger()

# Last turn number of each stage
START_LAST_TURN = 2
SOLVE_LAST_TURN = 6
SELL_LAST_TURN = 8

IRATE_INDICATORS = ("angry", "furious", "terrible", "awful", "hate", "worst")
SATISFIED_INDICATORS = ("thank", "great", "good")
AUTHENTICATION_INDICATORS = ("verify", "authenticate")

# Derived from the turn sequence; never taken from overrides
DERIVED_FIELDS = frozenset({"turn_count", "stage"})


def derive_stage(turn_count: int) -> CallStage:
    """Map a turn count to its conversational stage."""
    if turn_count <= START_LAST_TURN:
        return CallStage.START
    if turn_count <= SOLVE_LAST_TURN:
        return CallStage.SOLVE
    if turn_count <= SELL_LAST_TURN:
        return CallStage.SELL
    return CallStage.SUMMARIZE


def detect_sentiment(customer_text: Any, current: Sentiment) -> Sentiment:
    """Update sentiment from a customer utterance.

    Irate words win over satisfied words; text with neither keeps the
    current sentiment.
    """
    text = normalize_text(customer_text)
    if contains_any(text, IRATE_INDICATORS):
        return Sentiment.IRATE
    if contains_any(text, SATISFIED_INDICATORS):
        return Sentiment.SATISFIED
    return current


def advance_context(
    context: CallContext,
    agent_text: Any,
    customer_text: Any,
    overrides: Mapping[str, Any] | None = None,
) -> CallContext:
    """Produce the context snapshot for the next turn.

    Args:
        context: Snapshot from the previous turn.
        agent_text: Agent utterance of the new turn.
        customer_text: Customer utterance of the new turn.
        overrides: Explicit field values merged on top, e.g.
            ``{"opted_out_of_sales": True}``. Unknown keys and the derived
            ``turn_count`` and ``stage`` fields are ignored.

    Returns:
        A new CallContext; ``context`` is left untouched.

    Raises:
        pydantic.ValidationError: If an override has an invalid value.
    """
    turn_count = context.turn_count + 1
    authenticated = context.authenticated or contains_any(
        normalize_text(agent_text), AUTHENTICATION_INDICATORS
    )

    values: dict[str, Any] = {
        **context.model_dump(),
        "turn_count": turn_count,
        "stage": derive_stage(turn_count),
        "customer_sentiment": detect_sentiment(customer_text, context.customer_sentiment),
        "authenticated": authenticated,
    }

    if overrides:
        known = set(CallContext.model_fields) - DERIVED_FIELDS
        unknown = sorted(k for k in overrides if k not in known)
        if unknown:
            logger.warning("context_overrides_ignored", keys=unknown)
        values.update({k: v for k, v in overrides.items() if k in known})

    updated = CallContext.model_validate(values)
    if updated.customer_sentiment != context.customer_sentiment:
        logger.debug(
            "customer_sentiment_changed",
            turn=turn_count,
            previous=context.customer_sentiment.value,
            current=updated.customer_sentiment.value,
        )
    return updated


__all__ = [
    "AUTHENTICATION_INDICATORS",
    "DERIVED_FIELDS",
    "IRATE_INDICATORS",
    "SATISFIED_INDICATORS",
    "advance_context",
    "derive_stage",
    "detect_sentiment",
]
