"""Call session state machine.

Tracks one simulated call from start to end: advances the call context,
scores every turn, stops the call on the interaction cap or a natural
closing exchange, and builds the final report.

    idle --start--> active --end / auto end--> ended --start--> active
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from callcoach.core.config import settings
from callcoach.core.exceptions import InvalidSessionStateError
from callcoach.models.analysis import TurnRecord
from callcoach.models.context import CallContext
from callcoach.models.report import SessionReport
from callcoach.models.session import EndReason, SessionStatus
from callcoach.monitoring.metrics import (
    record_session_ended,
    record_session_started,
    record_turn_analyzed,
)
from callcoach.services.qa.aggregator import aggregate_session
from callcoach.services.qa.context_tracker import advance_context
from callcoach.services.qa.evaluator import TurnEvaluator
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.text import clean_text, contains_any, normalize_text
from callcoach.services.qa.trends import live_coaching, quality_trend

logger = structlog.get_logger()

AGENT_CLOSING_PHRASES = (
    "anything else i can help",
    "anything else i can assist",
    "have a great day",
    "have a lovely day",
    "thank you for calling",
    "thank you for choosing comcast",
    "is there anything else",
    "anything else today",
)

CUSTOMER_ENDING_PHRASES = (
    "no thank you",
    "no thanks",
    "that's all",
    "nothing else",
    "no that's it",
    "no i'm good",
    "that's everything",
)

SCENARIO_LABEL_KEYS = ("customer_name", "customerName", "name")
UNKNOWN_SCENARIO = "Unknown"


def resolve_scenario_label(scenario: Any) -> str:
    """Read a display label from an opaque scenario reference."""
    if scenario is None:
        return UNKNOWN_SCENARIO
    if isinstance(scenario, str):
        return scenario or UNKNOWN_SCENARIO
    for key in SCENARIO_LABEL_KEYS:
        if isinstance(scenario, Mapping):
            value = scenario.get(key)
        else:
            value = getattr(scenario, key, None)
        if value:
            return str(value)
    return UNKNOWN_SCENARIO


def is_natural_ending(agent_text: Any, customer_text: Any) -> bool:
    """Detect a closing exchange.

    True when the customer gives an ending response, or when the agent
    offers a closing and the customer says nothing.
    """
    agent = normalize_text(agent_text, truncate=False)
    customer = normalize_text(customer_text, truncate=False)
    customer_ends = contains_any(customer, CUSTOMER_ENDING_PHRASES)
    agent_closes = contains_any(agent, AGENT_CLOSING_PHRASES)
    return (agent_closes and (customer_ends or not customer)) or customer_ends


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CallSession:
    """One call's lifecycle, turn history and report.

    Not thread-safe; each call must use its own session and feed turns in
    order. A session dropped while active stays counted in the
    active-sessions gauge until it is ended.
    """

    def __init__(
        self,
        catalog: RubricCatalog | None = None,
        max_interactions: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize an idle session.

        Args:
            catalog: Rubric catalog; defaults to the shared S4 catalog.
            max_interactions: Turn cap; defaults to CALL_MAX_INTERACTIONS.
            clock: Returns the current time; injectable for tests.

        Raises:
            ValueError: If max_interactions is less than 1.
        """
        if max_interactions is None:
            max_interactions = settings.CALL_MAX_INTERACTIONS
        if max_interactions < 1:
            msg = f"max_interactions must be at least 1, got {max_interactions}"
            raise ValueError(msg)

        self.catalog = catalog or get_default_catalog()
        self.max_interactions = max_interactions
        self._counted_active = False
        self._clock = clock or _utcnow
        self._evaluator = TurnEvaluator(self.catalog)
        self.session_id = uuid.uuid4().hex
        self.logger = logger.bind(component="call_session", session_id=self.session_id)
        self._reset(None)
        self.status = SessionStatus.IDLE

    def _reset(self, scenario: Any) -> None:
        self.scenario = scenario
        self.context = CallContext()
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.end_reason: EndReason | None = None
        self.report: SessionReport | None = None
        self._turns: list[TurnRecord] = []

    @property
    def turns(self) -> tuple[TurnRecord, ...]:
        """Turn records in call order."""
        return tuple(self._turns)

    @property
    def scenario_label(self) -> str:
        return resolve_scenario_label(self.scenario)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def start(self, scenario: Any = None) -> None:
        """Start a call, discarding any previous call's data.

        Args:
            scenario: Opaque scenario reference supplied by the caller.

        Raises:
            InvalidSessionStateError: If a call is already active.
        """
        if self.status == SessionStatus.ACTIVE:
            raise InvalidSessionStateError("start", self.status.value)

        if self.status == SessionStatus.ENDED:
            self.session_id = uuid.uuid4().hex
            self.logger = logger.bind(component="call_session", session_id=self.session_id)

        self._reset(scenario)
        self.start_time = self._clock()
        self.status = SessionStatus.ACTIVE
        self._counted_active = record_session_started()
        self.logger.info(
            "call_started",
            scenario=self.scenario_label,
            max_interactions=self.max_interactions,
        )

    def process_interaction(
        self,
        agent_text: Any,
        customer_text: Any = "",
        context_overrides: Mapping[str, Any] | None = None,
    ) -> TurnRecord:
        """Score one exchange and check whether the call is over.

        Args:
            agent_text: Agent utterance.
            customer_text: Customer response; empty when the customer
                stayed silent.
            context_overrides: Explicit context values such as
                ``{"opted_out_of_sales": True}``.

        Returns:
            The stored TurnRecord.

        Raises:
            InvalidSessionStateError: If the session is not active.
        """
        if self.status != SessionStatus.ACTIVE:
            raise InvalidSessionStateError("process an interaction on", self.status.value)

        number = len(self._turns) + 1
        context = advance_context(self.context, agent_text, customer_text, context_overrides)
        analysis = self._evaluator.analyze(agent_text, customer_text, context)

        record = TurnRecord(
            number=number,
            agent_text=clean_text(agent_text),
            customer_text=clean_text(customer_text),
            timestamp=self._clock(),
            context=context,
            analysis=analysis,
        )
        self.context = context
        self._turns.append(record)

        category = analysis.auto_fail_category.value if analysis.auto_fail_category else None
        record_turn_analyzed(analysis.total_score, category)
        if analysis.auto_fail_detected:
            self.logger.warning(
                "auto_fail_detected",
                turn=record.number,
                category=category,
                reason=analysis.auto_fail_reason,
            )
        self.logger.info(
            "turn_processed",
            turn=record.number,
            stage=self.context.stage.value,
            total_score=analysis.total_score,
        )

        if number >= self.max_interactions:
            self.end(EndReason.INTERACTION_LIMIT)
        elif is_natural_ending(agent_text, customer_text):
            self.end(EndReason.NATURAL_ENDING)

        return record

    def end(self, reason: EndReason | str = EndReason.MANUAL) -> SessionReport:
        """End the call and build its report.

        Args:
            reason: Why the call ended.

        Returns:
            The session report.

        Raises:
            InvalidSessionStateError: If the session is not active.
        """
        if self.status != SessionStatus.ACTIVE:
            raise InvalidSessionStateError("end", self.status.value)

        end_reason = EndReason(reason)
        self.end_time = self._clock()
        self.end_reason = end_reason
        self.status = SessionStatus.ENDED

        self.report = aggregate_session(
            self._turns,
            scenario=self.scenario_label,
            start_time=self.start_time,
            end_time=self.end_time,
            end_reason=end_reason,
            catalog=self.catalog,
        )

        duration = self.report.call_summary.duration_seconds
        record_session_ended(end_reason.value, duration, counted_active=self._counted_active)
        self._counted_active = False
        self.logger.info(
            "call_ended",
            reason=end_reason.value,
            turns=len(self._turns),
            duration_seconds=duration,
            percentage=self.report.quality_metrics.percentage,
        )
        return self.report

    def quality_trend(self) -> dict[str, Any]:
        """Recent score trend with its coaching message."""
        return quality_trend([t.analysis.total_score for t in self._turns])

    def live_coaching(self) -> dict[str, Any]:
        """Half-vs-half trend and in-call recommendations."""
        return live_coaching([t.analysis.total_score for t in self._turns])


__all__ = [
    "AGENT_CLOSING_PHRASES",
    "CUSTOMER_ENDING_PHRASES",
    "CallSession",
    "is_natural_ending",
    "resolve_scenario_label",
]
