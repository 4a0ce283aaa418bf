"""Turn-level analysis results.

Every model here is frozen and JSON-serializable; the presentation layer
reads them as-is.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from callcoach.models.context import CallContext, CallStage
from callcoach.models.rubric import AutoFailCategory, SectionId


class InsightType(str, Enum):
    """Severity of a coaching insight."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Priority(str, Enum):
    """Priority attached to insights, hints and coaching plans."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Impact(str, Enum):
    """Expected score impact of acting on an opportunity."""

    HIGH = "high"
    MEDIUM = "medium"


class PerformanceTier(str, Enum):
    """Performance band for a turn or a whole call."""

    HIGHLY_EFFECTIVE = "Highly Effective"
    MEETS_EXPECTATIONS = "Meets Expectations"
    BELOW_EXPECTATIONS = "Below Expectations"
    NO_ANALYSIS = "No Analysis Available"


class AutoFailResult(BaseModel):
    """Outcome of the auto-fail scan."""

    model_config = {"frozen": True}

    detected: bool = False
    category: AutoFailCategory | None = None
    reason: str = ""


class CriterionResult(BaseModel):
    """Score and explanation for one criterion."""

    model_config = {"frozen": True}

    name: str
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    justification: str
    strength: str = ""
    improvement: str = ""


class SectionResult(BaseModel):
    """Score for one rubric section within a turn."""

    model_config = {"frozen": True}

    section_id: SectionId
    name: str
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    applicable: bool = True
    criteria: tuple[CriterionResult, ...] = ()
    strengths: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()


class Insight(BaseModel):
    """A short coaching message."""

    model_config = {"frozen": True}

    type: InsightType
    message: str
    priority: Priority
    section: SectionId | None = None


class Opportunity(BaseModel):
    """A criterion that scored below its maximum, with a suggestion."""

    model_config = {"frozen": True}

    section: str
    criterion: str
    description: str
    suggestion: str
    impact: Impact
    keywords: tuple[str, ...] = ()


class NextStepHint(BaseModel):
    """The single most useful thing to do next."""

    model_config = {"frozen": True}

    stage: CallStage
    hint: str
    priority: Priority


class SectionBreakdown(BaseModel):
    """Percentage view of a section result."""

    model_config = {"frozen": True}

    name: str
    score: int
    max_score: int
    percentage: int
    applicable: bool


class ScoreBreakdown(BaseModel):
    """Per-section percentages and the turn's performance tier."""

    model_config = {"frozen": True}

    total_score: int
    max_total_score: int
    sections: dict[SectionId, SectionBreakdown]
    performance_tier: PerformanceTier


class TurnAnalysis(BaseModel):
    """Complete scoring result for one agent turn."""

    model_config = {"frozen": True}

    total_score: int = Field(ge=0)
    max_total_score: int = 100
    sections: dict[SectionId, SectionResult] = Field(default_factory=dict)
    insights: tuple[Insight, ...] = ()
    opportunities: tuple[Opportunity, ...] = ()
    next_step_hints: tuple[NextStepHint, ...] = ()
    breakdown: ScoreBreakdown | None = None
    auto_fail_detected: bool = False
    auto_fail_category: AutoFailCategory | None = None
    auto_fail_reason: str = ""


class TurnRecord(BaseModel):
    """One processed exchange in a call session."""

    model_config = {"frozen": True}

    number: int = Field(ge=1)
    agent_text: str
    customer_text: str
    timestamp: datetime
    context: CallContext
    analysis: TurnAnalysis


__all__ = [
    "AutoFailResult",
    "CriterionResult",
    "Impact",
    "Insight",
    "InsightType",
    "NextStepHint",
    "Opportunity",
    "PerformanceTier",
    "Priority",
    "ScoreBreakdown",
    "SectionBreakdown",
    "SectionResult",
    "TurnAnalysis",
    "TurnRecord",
]
