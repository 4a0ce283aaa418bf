"""CallCoach: S4 call-quality analysis engine.

Scores customer-service dialogue turn by turn against the S4 rubric
(START, SOLVE, SELL, SUMMARIZE, BEHAVIORS) and aggregates a call into a
coaching report.
"""

from callcoach.core.exceptions import (
    CallCoachError,
    InvalidSessionStateError,
    RubricConfigurationError,
)
from callcoach.models import CallContext, SessionReport, TurnAnalysis, TurnRecord
from callcoach.services.call_session import CallSession
from callcoach.services.qa import RubricCatalog, analyze_turn, get_default_catalog

__version__ = "0.1.0"

__all__ = [
    "CallCoachError",
    "CallContext",
    "CallSession",
    "InvalidSessionStateError",
    "RubricCatalog",
    "RubricConfigurationError",
    "SessionReport",
    "TurnAnalysis",
    "TurnRecord",
    "__version__",
    "analyze_turn",
    "get_default_catalog",
]
