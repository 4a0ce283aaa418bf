"""Prometheus metrics for call quality scoring.

Provides counters, histograms, and gauges for scored turns and call
sessions. Feature-flagged via ENABLE_PROMETHEUS_METRICS.
"""

from __future__ import annotations

import structlog
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from callcoach.core.config import settings

logger = structlog.get_logger()

# Create custom registry to avoid conflicts
REGISTRY = CollectorRegistry(auto_describe=True)

# Counters
TURNS_ANALYZED = Counter(
    "callcoach_turns_analyzed_total",
    "Total number of agent turns scored",
    ["auto_fail"],
    registry=REGISTRY,
)

AUTO_FAILS = Counter(
    "callcoach_auto_fails_total",
    "Total number of turns zeroed by an auto-fail rule",
    ["category"],
    registry=REGISTRY,
)

SESSIONS_STARTED = Counter(
    "callcoach_sessions_started_total",
    "Total number of call sessions started",
    registry=REGISTRY,
)

SESSIONS_ENDED = Counter(
    "callcoach_sessions_ended_total",
    "Total number of call sessions ended",
    ["reason"],
    registry=REGISTRY,
)

# Histograms
TURN_SCORE = Histogram(
    "callcoach_turn_score",
    "Total rubric score per turn",
    buckets=(0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
    registry=REGISTRY,
)

SESSION_DURATION = Histogram(
    "callcoach_session_duration_seconds",
    "Call session duration in seconds",
    buckets=(15, 30, 60, 120, 300, 600, 1200, 1800),
    registry=REGISTRY,
)

# Gauges
ACTIVE_SESSIONS = Gauge(
    "callcoach_active_sessions",
    "Current number of active call sessions",
    registry=REGISTRY,
)


def record_session_started() -> bool:
    """Record a call session start.

    Returns:
        True if the session was counted in ACTIVE_SESSIONS.
    """
    if not settings.ENABLE_PROMETHEUS_METRICS:
        return False

    SESSIONS_STARTED.inc()
    ACTIVE_SESSIONS.inc()
    logger.debug("metric_session_started")
    return True


def record_turn_analyzed(total_score: int, auto_fail_category: str | None = None) -> None:
    """Record a scored turn.

    Args:
        total_score: Turn total score.
        auto_fail_category: Category of the auto-fail rule that fired, if any.
    """
    if not settings.ENABLE_PROMETHEUS_METRICS:
        return

    TURNS_ANALYZED.labels(auto_fail="true" if auto_fail_category else "false").inc()
    TURN_SCORE.observe(total_score)
    if auto_fail_category:
        AUTO_FAILS.labels(category=auto_fail_category).inc()
    logger.debug(
        "metric_turn_analyzed",
        total_score=total_score,
        auto_fail_category=auto_fail_category,
    )


def record_session_ended(
    reason: str, duration_seconds: float, counted_active: bool | None = None
) -> None:
    """Record a call session end.

    Args:
        reason: End reason value.
        duration_seconds: Session duration in seconds.
        counted_active: Whether the session's start was counted in
            ACTIVE_SESSIONS. When given, it alone decides whether the gauge
            is released, whatever the flag says now. Defaults to the current
            flag.
    """
    if counted_active is None:
        counted_active = settings.ENABLE_PROMETHEUS_METRICS
    if counted_active:
        ACTIVE_SESSIONS.dec()

    if not settings.ENABLE_PROMETHEUS_METRICS:
        return

    SESSIONS_ENDED.labels(reason=reason).inc()
    SESSION_DURATION.observe(duration_seconds)
    logger.debug(
        "metric_session_ended",
        reason=reason,
        duration=duration_seconds,
    )


def render_metrics() -> tuple[bytes, str]:
    """Render the registry in Prometheus exposition format.

    Returns:
        Tuple of payload and content type, for whatever HTTP layer
        exposes it.
    """
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = [
    "ACTIVE_SESSIONS",
    "AUTO_FAILS",
    "REGISTRY",
    "SESSIONS_ENDED",
    "SESSIONS_STARTED",
    "SESSION_DURATION",
    "TURNS_ANALYZED",
    "TURN_SCORE",
    "record_session_ended",
    "record_session_started",
    "record_turn_analyzed",
    "render_metrics",
]
