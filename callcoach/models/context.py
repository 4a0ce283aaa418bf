"""Per-call conversational context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class CallStage(str, Enum):
    """Coarse conversational phase derived from the turn count."""

    START = "START"
    SOLVE = "SOLVE"
    SELL = "SELL"
    SUMMARIZE = "SUMMARIZE"


class Sentiment(str, Enum):
    """Detected customer sentiment."""

    NEUTRAL = "neutral"
    IRATE = "irate"
    SATISFIED = "satisfied"


class CallContext(BaseModel):
    """Immutable snapshot of the call state a turn is scored against.

    A new snapshot is produced for every turn, so any stored turn can be
    re-scored from the context it carries.
    """

    model_config = {"frozen": True}

    stage: CallStage = CallStage.START
    turn_count: int = Field(default=0, ge=0)
    customer_sentiment: Sentiment = Sentiment.NEUTRAL
    authenticated: bool = False
    opted_out_of_sales: bool = False


__all__ = ["CallContext", "CallStage", "Sentiment"]
