"""Session aggregation: turns a call's turn history into its final report."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from callcoach.models.analysis import PerformanceTier, Priority, SectionResult, TurnRecord
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
)
from callcoach.models.rubric import SectionId
from callcoach.models.session import EndReason
from callcoach.services.qa.coaching import (
    KEY_PHRASES,
    PRACTICE_SCENARIOS,
    round_half_up,
    section_actions,
)
from callcoach.services.qa.evaluator import performance_tier
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.trends import section_trend

MAX_FOCUS_AREAS = 3
MAX_SECTION_NOTES = 3
STRENGTH_PERCENT = 80
WEAK_PERCENT = 70
TARGET_STEP = 20

# Business metric thresholds
PROMOTER_BASELINE = 60
PROMOTER_BONUS = 15
PROMOTER_PENALTY = 20
PROMOTER_SECTION_PERCENT = 80
BEHAVIORS_FLOOR_PERCENT = 60
FIRST_CALL_RESOLUTION_PERCENT = 80
SALES_OPPORTUNITY_PERCENT = 70

SATISFACTION_TIERS: tuple[tuple[float, SatisfactionTier], ...] = (
    (85, SatisfactionTier.HIGHLY_SATISFIED),
    (70, SatisfactionTier.SATISFIED),
    (50, SatisfactionTier.NEUTRAL),
)


@dataclass
class SectionStats:
    """Raw section totals over the turns where the section applied."""

    section_id: SectionId
    name: str
    max_points: int
    scores: list[int] = field(default_factory=list)
    max_scores: list[int] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)

    def add(self, result: SectionResult) -> None:
        self.scores.append(result.score)
        self.max_scores.append(result.max_score)
        self.strengths.extend(result.strengths)
        self.improvements.extend(result.improvements)

    @property
    def applicable_turns(self) -> int:
        return len(self.scores)

    @property
    def average_score(self) -> float:
        return sum(self.scores) / len(self.scores) if self.scores else 0.0

    @property
    def percentage(self) -> float:
        total_max = sum(self.max_scores)
        return (sum(self.scores) / total_max) * 100 if total_max > 0 else 0.0


def _unique(items: Iterable[str], limit: int) -> tuple[str, ...]:
    return tuple(dict.fromkeys(i for i in items if i))[:limit]


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(high, max(low, value))


def collect_section_stats(
    turns: Sequence[TurnRecord], catalog: RubricCatalog | None = None
) -> dict[SectionId, SectionStats]:
    """Gather applicable section results across turns.

    Auto-failed turns carry no section results and so only affect the
    overall average, not the per-section figures.
    """
    catalog = catalog or get_default_catalog()
    stats = {
        section.id: SectionStats(section_id=section.id, name=section.name, max_points=section.max_points)
        for section in catalog.sections
    }
    for turn in turns:
        for section_id, result in turn.analysis.sections.items():
            if result.applicable and section_id in stats:
                stats[section_id].add(result)
    return stats


def satisfaction_tier(percentage: float) -> SatisfactionTier:
    """Predict customer satisfaction from the call percentage."""
    for threshold, tier in SATISFACTION_TIERS:
        if percentage >= threshold:
            return tier
    return SatisfactionTier.DISSATISFIED


def promoter_probability(percentage: float, stats: dict[SectionId, SectionStats]) -> int:
    """Estimate the chance the customer rates the call as a promoter.

    Twice the points above 60%, plus a bonus when both START and
    SUMMARIZE exceed 80% and a penalty when BEHAVIORS is under 60%.
    """
    probability = max(0.0, (percentage - PROMOTER_BASELINE) * 2)
    if (
        stats[SectionId.START].percentage > PROMOTER_SECTION_PERCENT
        and stats[SectionId.SUMMARIZE].percentage > PROMOTER_SECTION_PERCENT
    ):
        probability += PROMOTER_BONUS
    if stats[SectionId.BEHAVIORS].percentage < BEHAVIORS_FLOOR_PERCENT:
        probability -= PROMOTER_PENALTY
    return round_half_up(_clamp(probability))


def build_business_metrics(
    percentage: float, stats: dict[SectionId, SectionStats]
) -> BusinessMetrics:
    solve = stats[SectionId.SOLVE].percentage
    return BusinessMetrics(
        promoter_probability=promoter_probability(percentage, stats),
        resolution_rate=round_half_up(_clamp(solve)),
        sales_opportunity=stats[SectionId.SELL].percentage > SALES_OPPORTUNITY_PERCENT,
        first_call_resolution=solve > FIRST_CALL_RESOLUTION_PERCENT,
        satisfaction_tier=satisfaction_tier(percentage),
    )


def overall_recommendation(performances: Iterable[SectionPerformance]) -> str:
    """Recommendation keyed on how many sections are under 70%."""
    weak = sum(1 for p in performances if p.percentage < WEAK_PERCENT)
    if weak == 0:
        return "Excellent performance! Focus on consistency and maintaining high standards."
    if weak <= 2:  # noqa: PLR2004
        return "Good foundation. Focus on strengthening identified weak areas for promoter scores."
    return "Comprehensive S4 training recommended. Start with START and SUMMARIZE sections."


def build_action_plan(focus_areas: Sequence[FocusArea]) -> ActionPlan:
    return ActionPlan(
        title="Personalized Action Plan - Next Call Preparation",
        immediate_actions=(
            "Review guaranteed promoter checklist before next call",
            "Practice weak section phrases using provided examples",
            "Focus on top 3 improvement areas identified",
        ),
        weekly_goals=tuple(
            f"Improve {area.section} from {area.current_performance}% to {area.target_improvement}%"
            for area in focus_areas
        ),
        monthly_target="Achieve consistent 90%+ scores across all S4 sections",
        practice_scenarios=PRACTICE_SCENARIOS,
        key_phrases=dict(KEY_PHRASES),
    )


def build_coaching_plan(
    breakdown: dict[SectionId, SectionPerformance], catalog: RubricCatalog | None = None
) -> CoachingPlan:
    """Pick focus areas and strengths from the section breakdown.

    Conditional sections that never applied during the call are left out,
    so an inapplicable SELL section is neither a weakness nor a strength.
    """
    catalog = catalog or get_default_catalog()
    scored = [
        p
        for p in breakdown.values()
        if p.applicable_turns > 0 or catalog.section(p.section_id).applicability is None
    ]

    weakest = sorted(
        (p for p in scored if p.percentage < STRENGTH_PERCENT), key=lambda p: p.percentage
    )[:MAX_FOCUS_AREAS]
    strongest = sorted(
        (p for p in scored if p.percentage >= STRENGTH_PERCENT),
        key=lambda p: p.percentage,
        reverse=True,
    )

    focus_areas = tuple(
        FocusArea(
            section_id=p.section_id,
            section=p.name,
            current_performance=p.percentage,
            target_improvement=min(100, p.percentage + TARGET_STEP),
            specific_actions=section_actions(p.section_id),
        )
        for p in weakest
    )
    strengths = tuple(
        StrengthArea(
            section_id=p.section_id,
            section=p.name,
            performance=p.percentage,
            maintain_actions=(
                f"Continue excellent {p.name} performance",
                "Use as model for other sections",
            ),
        )
        for p in strongest
    )

    if len(focus_areas) > 2:  # noqa: PLR2004
        priority = Priority.HIGH
    elif focus_areas:
        priority = Priority.MEDIUM
    else:
        priority = Priority.LOW

    return CoachingPlan(
        priority=priority,
        focus_areas=focus_areas,
        strengths=strengths,
        recommendation=overall_recommendation(scored),
        action_plan=build_action_plan(focus_areas),
    )


def _basic_report(summary: CallSummary, max_score: int) -> SessionReport:
    return SessionReport(
        call_summary=summary,
        quality_metrics=QualityMetrics(
            average_score=0.0,
            max_score=max_score,
            percentage=0,
            performance_tier=PerformanceTier.NO_ANALYSIS,
        ),
        business_metrics=BusinessMetrics(
            promoter_probability=0,
            resolution_rate=0,
            sales_opportunity=False,
            first_call_resolution=False,
            satisfaction_tier=SatisfactionTier.UNKNOWN,
        ),
        coaching_plan=CoachingPlan(
            priority=Priority.HIGH,
            recommendation="Complete S4 methodology training required",
            action_plan=ActionPlan(
                title="Basic Action Plan",
                immediate_actions=("Complete S4 training",),
                weekly_goals=("Learn S4 methodology",),
                monthly_target="Achieve basic S4 competency",
                practice_scenarios=("Practice basic greetings",),
                key_phrases={"greeting": KEY_PHRASES["greeting"]},
            ),
        ),
    )


def aggregate_session(
    turns: Sequence[TurnRecord],
    *,
    scenario: str = "Unknown",
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    end_reason: EndReason = EndReason.MANUAL,
    catalog: RubricCatalog | None = None,
) -> SessionReport:
    """Build the final report for a call.

    Args:
        turns: Turn records in call order.
        scenario: Label of the scenario the call was run against.
        start_time: Call start; defaults to the first turn's timestamp.
        end_time: Call end; defaults to the last turn's timestamp.
        end_reason: Why the call ended.
        catalog: Rubric catalog; defaults to the shared S4 catalog.

    Returns:
        SessionReport. A call without turns gets a basic report.
    """
    catalog = catalog or get_default_catalog()
    now = datetime.now(UTC)
    start = start_time or (turns[0].timestamp if turns else now)
    end = end_time or (turns[-1].timestamp if turns else start)

    summary = CallSummary(
        duration_seconds=max(0, round_half_up((end - start).total_seconds())),
        turn_count=len(turns),
        scenario=scenario,
        start_time=start,
        end_time=end,
        end_reason=end_reason,
    )

    if not turns:
        return _basic_report(summary, catalog.max_total_score)

    max_score = catalog.max_total_score
    average = sum(t.analysis.total_score for t in turns) / len(turns)
    percentage = (average / max_score) * 100

    stats = collect_section_stats(turns, catalog)
    breakdown = {
        section_id: SectionPerformance(
            section_id=section_id,
            name=s.name,
            average_score=s.average_score,
            max_score=s.max_points,
            percentage=round_half_up(s.percentage),
            applicable_turns=s.applicable_turns,
            trend=section_trend(s.scores),
            strengths=_unique(s.strengths, MAX_SECTION_NOTES),
            improvements=_unique(s.improvements, MAX_SECTION_NOTES),
        )
        for section_id, s in stats.items()
    }

    return SessionReport(
        call_summary=summary,
        quality_metrics=QualityMetrics(
            average_score=average,
            max_score=max_score,
            percentage=round_half_up(percentage),
            performance_tier=performance_tier(percentage),
            section_breakdown=breakdown,
        ),
        business_metrics=build_business_metrics(percentage, stats),
        coaching_plan=build_coaching_plan(breakdown, catalog),
    )


__all__ = [
    "SectionStats",
    "aggregate_session",
    "build_business_metrics",
    "build_coaching_plan",
    "collect_section_stats",
    "overall_recommendation",
    "promoter_probability",
    "satisfaction_tier",
]
