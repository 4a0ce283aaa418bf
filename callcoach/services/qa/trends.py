"""Score-history trend classification.

There are three comparators, one per granularity:

* ``classify_trend``: first vs last of the three most recent turn
  scores, +-5 points. Drives the in-call trend message.
* ``live_coaching``: first-half vs second-half average, +-1 point.
  Drives the in-call coaching recommendations.
* ``section_trend``: mean of the first three vs the last three section
  scores, +-2 points. Used in the session report.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from callcoach.models.report import TrendDirection
from callcoach.services.qa.coaching import round_half_up

RECENT_WINDOW = 3
TREND_THRESHOLD = 5
LIVE_TREND_THRESHOLD = 1
SECTION_TREND_THRESHOLD = 2

# Live recommendation bands on the 100-point turn score
LIVE_LOW_SCORE = 50
LIVE_HIGH_SCORE = 70

TREND_MESSAGES: dict[TrendDirection, str] = {
    TrendDirection.INSUFFICIENT_DATA: "Need more interactions for trend analysis",
    TrendDirection.IMPROVING: "Quality is improving! Keep up the good work.",
    TrendDirection.DECLINING: "Quality is declining. Focus on S4 fundamentals.",
    TrendDirection.STABLE: "Quality is stable. Look for opportunities to excel.",
}


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _compare(current: float, baseline: float, threshold: float) -> TrendDirection:
    if current > baseline + threshold:
        return TrendDirection.IMPROVING
    if current < baseline - threshold:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def classify_trend(scores: Sequence[float]) -> TrendDirection:
    """Classify the most recent movement of a score history.

    Args:
        scores: Turn scores in call order.

    Returns:
        ``insufficient_data`` for fewer than two scores, otherwise the
        direction from the first to the last of the last three scores.
    """
    if len(scores) < 2:  # noqa: PLR2004
        return TrendDirection.INSUFFICIENT_DATA
    recent = list(scores)[-RECENT_WINDOW:]
    return _compare(recent[-1], recent[0], TREND_THRESHOLD)


def quality_trend(scores: Sequence[float]) -> dict[str, Any]:
    """Trend plus the message shown to the agent."""
    trend = classify_trend(scores)
    return {"trend": trend, "message": TREND_MESSAGES[trend]}


def section_trend(scores: Sequence[float]) -> TrendDirection:
    """Compare the early and recent averages of one section's scores."""
    if len(scores) < 2:  # noqa: PLR2004
        return TrendDirection.STABLE
    early = list(scores)[:RECENT_WINDOW]
    recent = list(scores)[-RECENT_WINDOW:]
    return _compare(_mean(recent), _mean(early), SECTION_TREND_THRESHOLD)


def live_coaching(scores: Sequence[float]) -> dict[str, Any]:
    """Half-vs-half trend and coaching recommendations during a call.

    Args:
        scores: Turn scores in call order.

    Returns:
        Dict with ``overall_trend``, ``recommendations`` and
        ``average_score`` rounded to one decimal.
    """
    if not scores:
        return {
            "overall_trend": None,
            "recommendations": ["Start the conversation to receive quality feedback"],
            "average_score": 0.0,
        }

    average = _mean(scores)
    trend = TrendDirection.STABLE
    if len(scores) > 1:
        middle = len(scores) // 2
        trend = _compare(_mean(scores[middle:]), _mean(scores[:middle]), LIVE_TREND_THRESHOLD)

    recommendations = []
    if average < LIVE_LOW_SCORE:
        recommendations.append("Focus on empathy and active listening")
        recommendations.append("Ask more probing questions to understand customer needs")
    if trend == TrendDirection.DECLINING:
        recommendations.append("Maintain energy and engagement throughout the call")
    if average >= LIVE_HIGH_SCORE:
        recommendations.append("Great job! Continue with current approach")
    else:
        recommendations.append("Practice S4 methodology: Start, Solve, Sell, Summarize")

    return {
        "overall_trend": trend,
        "recommendations": recommendations,
        "average_score": round_half_up(average * 10) / 10,
    }


__all__ = [
    "TREND_MESSAGES",
    "classify_trend",
    "live_coaching",
    "quality_trend",
    "section_trend",
]
