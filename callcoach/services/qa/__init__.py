"""S4 quality analysis services."""

from callcoach.services.qa.aggregator import aggregate_session
from callcoach.services.qa.auto_fail import check_auto_fail
from callcoach.services.qa.coaching import (
    promoter_checklist,
    score_indicator,
    section_insights,
)
from callcoach.services.qa.context_tracker import advance_context, derive_stage
from callcoach.services.qa.criteria import evaluate_criterion
from callcoach.services.qa.evaluator import TurnEvaluator, analyze_turn
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.sections import analyze_section
from callcoach.services.qa.text import normalize_text
from callcoach.services.qa.trends import classify_trend, live_coaching, quality_trend

__all__ = [
    "RubricCatalog",
    "TurnEvaluator",
    "advance_context",
    "aggregate_session",
    "analyze_section",
    "analyze_turn",
    "check_auto_fail",
    "classify_trend",
    "derive_stage",
    "evaluate_criterion",
    "get_default_catalog",
    "live_coaching",
    "normalize_text",
    "promoter_checklist",
    "quality_trend",
    "score_indicator",
    "section_insights",
]
