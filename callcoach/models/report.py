"""Session report: the exported artifact of a finished call."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from callcoach.models.analysis import PerformanceTier, Priority
from callcoach.models.rubric import SectionId
from callcoach.models.session import EndReason


class TrendDirection(str, Enum):
    """Direction of a score history."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class SatisfactionTier(str, Enum):
    """Predicted customer satisfaction."""

    HIGHLY_SATISFIED = "Highly Satisfied"
    SATISFIED = "Satisfied"
    NEUTRAL = "Neutral"
    DISSATISFIED = "Dissatisfied"
    UNKNOWN = "Unknown"


class CallSummary(BaseModel):
    """Duration, size and outcome of the call."""

    model_config = {"frozen": True}

    duration_seconds: int = Field(ge=0)
    turn_count: int = Field(ge=0)
    scenario: str
    start_time: datetime
    end_time: datetime
    end_reason: EndReason


class SectionPerformance(BaseModel):
    """Aggregated performance of one section across the call."""

    model_config = {"frozen": True}

    section_id: SectionId
    name: str
    average_score: float
    max_score: int
    percentage: int
    applicable_turns: int
    trend: TrendDirection
    strengths: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()


class QualityMetrics(BaseModel):
    """Overall call quality."""

    model_config = {"frozen": True}

    average_score: float
    max_score: int = 100
    percentage: int
    performance_tier: PerformanceTier
    section_breakdown: dict[SectionId, SectionPerformance] = Field(default_factory=dict)


class BusinessMetrics(BaseModel):
    """Business outcome estimates derived from section performance."""

    model_config = {"frozen": True}

    promoter_probability: int = Field(ge=0, le=100)
    resolution_rate: int = Field(ge=0, le=100)
    sales_opportunity: bool
    first_call_resolution: bool
    satisfaction_tier: SatisfactionTier


class FocusArea(BaseModel):
    """A weak section the agent should work on."""

    model_config = {"frozen": True}

    section_id: SectionId
    section: str
    current_performance: int
    target_improvement: int
    specific_actions: tuple[str, ...]


class StrengthArea(BaseModel):
    """A section the agent already performs well in."""

    model_config = {"frozen": True}

    section_id: SectionId
    section: str
    performance: int
    maintain_actions: tuple[str, ...]


class ActionPlan(BaseModel):
    """Preparation plan for the next call."""

    model_config = {"frozen": True}

    title: str
    immediate_actions: tuple[str, ...]
    weekly_goals: tuple[str, ...]
    monthly_target: str
    practice_scenarios: tuple[str, ...]
    key_phrases: dict[str, str]


class CoachingPlan(BaseModel):
    """Prioritized coaching derived from section performance."""

    model_config = {"frozen": True}

    priority: Priority
    focus_areas: tuple[FocusArea, ...] = ()
    strengths: tuple[StrengthArea, ...] = ()
    recommendation: str
    action_plan: ActionPlan


class SessionReport(BaseModel):
    """Final, immutable report for an ended call session."""

    model_config = {"frozen": True}

    call_summary: CallSummary
    quality_metrics: QualityMetrics
    business_metrics: BusinessMetrics
    coaching_plan: CoachingPlan

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize the report to a JSON document."""
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> SessionReport:
        """Load a report previously produced by :meth:`to_json`."""
        return cls.model_validate_json(data)


__all__ = [
    "ActionPlan",
    "BusinessMetrics",
    "CallSummary",
    "CoachingPlan",
    "FocusArea",
    "QualityMetrics",
    "SatisfactionTier",
    "SectionPerformance",
    "SessionReport",
    "StrengthArea",
    "TrendDirection",
]
