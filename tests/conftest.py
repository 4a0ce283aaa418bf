"""Pytest configuration and fixtures for engine tests."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import patch

import pytest

from callcoach.models import CallContext
from callcoach.monitoring import metrics
from callcoach.services.call_session import CallSession
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog

CALL_START = datetime(2024, 5, 1, 9, 0, 0, tzinfo=UTC)

GOOD_OPENING = (
    "Hello, this is John from Comcast. I understand your concern and I'm here to "
    "help resolve this for you. Let me verify your account."
)
NEUTRAL_AGENT = "Okay."


class StepClock:
    """Deterministic clock that advances a fixed step per reading."""

    def __init__(self, start: datetime = CALL_START, step_seconds: int = 5) -> None:
        self.current = start
        self.step = timedelta(seconds=step_seconds)

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture(autouse=True)
def metrics_off_by_default() -> Any:
    """Keep the shared Prometheus registry untouched unless a test opts in."""
    with patch.object(metrics.settings, "ENABLE_PROMETHEUS_METRICS", False):
        yield


@pytest.fixture
def catalog() -> RubricCatalog:
    """Shared S4 rubric catalog."""
    return get_default_catalog()


@pytest.fixture
def context() -> CallContext:
    """Fresh context at the start of a call."""
    return CallContext()


@pytest.fixture
def sell_context() -> CallContext:
    """Context in which the SELL section applies."""
    return CallContext(authenticated=True)


@pytest.fixture
def clock() -> StepClock:
    """Clock advancing five seconds per reading."""
    return StepClock()


@pytest.fixture
def session_factory(clock: StepClock) -> Callable[..., CallSession]:
    """Build sessions sharing the deterministic clock."""

    def _make(**kwargs: Any) -> CallSession:
        kwargs.setdefault("clock", clock)
        return CallSession(**kwargs)

    return _make


@pytest.fixture
def active_session(session_factory: Callable[..., CallSession]) -> CallSession:
    """A started call session."""
    session = session_factory()
    session.start({"customer_name": "Maria Garcia"})
    return session
