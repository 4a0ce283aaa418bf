"""Value types and result documents."""

from callcoach.models.analysis import (
    AutoFailResult,
    CriterionResult,
    Impact,
    Insight,
    InsightType,
    NextStepHint,
    Opportunity,
    PerformanceTier,
    Priority,
    ScoreBreakdown,
    SectionBreakdown,
    SectionResult,
    TurnAnalysis,
    TurnRecord,
)
from callcoach.models.context import CallContext, CallStage, Sentiment
from callcoach.models.report import (
    ActionPlan,
    BusinessMetrics,
    CallSummary,
    CoachingPlan,
    FocusArea,
    QualityMetrics,
    SatisfactionTier,
    SectionPerformance,
    SessionReport,
    StrengthArea,
    TrendDirection,
)
from callcoach.models.rubric import (
    AutoFailCategory,
    AutoFailRule,
    Criterion,
    RubricSection,
    SectionId,
)
from callcoach.models.session import EndReason, SessionStatus

__all__ = [
    "ActionPlan",
    "AutoFailCategory",
    "AutoFailResult",
    "AutoFailRule",
    "BusinessMetrics",
    "CallContext",
    "CallStage",
    "CallSummary",
    "CoachingPlan",
    "Criterion",
    "CriterionResult",
    "EndReason",
    "FocusArea",
    "Impact",
    "Insight",
    "InsightType",
    "NextStepHint",
    "Opportunity",
    "PerformanceTier",
    "Priority",
    "QualityMetrics",
    "RubricSection",
    "SatisfactionTier",
    "ScoreBreakdown",
    "SectionBreakdown",
    "SectionId",
    "SectionPerformance",
    "SectionResult",
    "Sentiment",
    "SessionReport",
    "SessionStatus",
    "StrengthArea",
    "TrendDirection",
    "TurnAnalysis",
    "TurnRecord",
]
