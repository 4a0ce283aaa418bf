"""Turn evaluator: scores one agent utterance against the S4 rubric.

Auto-fail runs first and short-circuits to a zero score. Otherwise all
five sections are scored in fixed order, and insights, improvement
opportunities, a next-step hint and a percentage breakdown are derived
from the section results.
"""

from __future__ import annotations

from typing import Any

from callcoach.models.analysis import (
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
)
from callcoach.models.context import CallContext, CallStage
from callcoach.models.rubric import SectionId
from callcoach.services.qa.auto_fail import check_auto_fail
from callcoach.services.qa.coaching import round_half_up, suggestion_for
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.sections import analyze_section

# Overall insight tiers (percent of the turn's maximum)
INSIGHT_SUCCESS_PERCENT = 80
INSIGHT_WARNING_PERCENT = 60

# A section below this share of its maximum gets the next-step hint
HINT_THRESHOLD = 0.8

HIGHLY_EFFECTIVE_PERCENT = 90
MEETS_EXPECTATIONS_PERCENT = 70

NEXT_STEP_HINTS: dict[CallStage, tuple[str, Priority]] = {
    CallStage.START: (
        "Focus on completing your greeting and empathy. "
        "Try: \"I understand your concern and I'm here to help resolve this for you.\"",
        Priority.HIGH,
    ),
    CallStage.SOLVE: (
        "Ask probing questions to understand the root cause. "
        'Try: "Can you tell me more about when this issue started?"',
        Priority.HIGH,
    ),
    CallStage.SELL: (
        "Look for opportunities to add value. "
        "Try: \"Since we've resolved this, let me show you how to prevent this in the future "
        'with our enhanced service."',
        Priority.MEDIUM,
    ),
    CallStage.SUMMARIZE: (
        "Wrap up with clear next steps. "
        "Try: \"Let me summarize what we've accomplished and what you can expect next.\"",
        Priority.MEDIUM,
    ),
}


def performance_tier(percentage: float) -> PerformanceTier:
    """Map a percentage to its performance tier."""
    if percentage >= HIGHLY_EFFECTIVE_PERCENT:
        return PerformanceTier.HIGHLY_EFFECTIVE
    if percentage >= MEETS_EXPECTATIONS_PERCENT:
        return PerformanceTier.MEETS_EXPECTATIONS
    return PerformanceTier.BELOW_EXPECTATIONS


def _percentage(score: float, max_score: float) -> float:
    return (score / max_score) * 100 if max_score > 0 else 0.0


class TurnEvaluator:
    """Stateless scorer bound to a rubric catalog.

    Safe to share between sessions; it holds no per-call state.
    """

    def __init__(self, catalog: RubricCatalog | None = None) -> None:
        """Initialize the evaluator.

        Args:
            catalog: Rubric catalog; defaults to the shared S4 catalog.
        """
        self.catalog = catalog or get_default_catalog()

    def analyze(self, agent_text: Any, customer_text: Any, context: CallContext) -> TurnAnalysis:
        """Score one turn.

        Args:
            agent_text: Agent utterance.
            customer_text: Customer utterance the agent replied to.
            context: Context snapshot for the turn.

        Returns:
            TurnAnalysis; auto-failed turns carry no sections.
        """
        max_total = self.catalog.max_total_score

        auto_fail = check_auto_fail(agent_text, self.catalog)
        if auto_fail.detected:
            return TurnAnalysis(
                total_score=0,
                max_total_score=max_total,
                auto_fail_detected=True,
                auto_fail_category=auto_fail.category,
                auto_fail_reason=auto_fail.reason,
            )

        sections = {
            section.id: analyze_section(section.id, agent_text, customer_text, context, self.catalog)
            for section in self.catalog.sections
        }
        total = sum(s.score for s in sections.values())

        return TurnAnalysis(
            total_score=total,
            max_total_score=max_total,
            sections=sections,
            insights=tuple(self.build_insights(sections)),
            opportunities=tuple(self.build_opportunities(sections)),
            next_step_hints=(self.build_next_step_hint(sections),),
            breakdown=self.build_breakdown(sections),
        )

    def build_insights(self, sections: dict[SectionId, SectionResult]) -> list[Insight]:
        """One overall insight plus one per fully missed or perfect section."""
        total = sum(s.score for s in sections.values())
        max_total = sum(s.max_score for s in sections.values())
        percentage = _percentage(total, max_total)

        if percentage >= INSIGHT_SUCCESS_PERCENT:
            insights = [
                Insight(
                    type=InsightType.SUCCESS,
                    message="Excellent performance! You're following S4 methodology effectively.",
                    priority=Priority.HIGH,
                )
            ]
        elif percentage >= INSIGHT_WARNING_PERCENT:
            insights = [
                Insight(
                    type=InsightType.WARNING,
                    message="Good foundation, but there's room for improvement in S4 execution.",
                    priority=Priority.MEDIUM,
                )
            ]
        else:
            insights = [
                Insight(
                    type=InsightType.ERROR,
                    message="Focus on S4 fundamentals. Review training materials for better performance.",
                    priority=Priority.HIGH,
                )
            ]

        for section_id, section in sections.items():
            if section.score == 0 and section.applicable:
                first = section.improvements[0] if section.improvements else "Review section requirements."
                insights.append(
                    Insight(
                        type=InsightType.ERROR,
                        message=f"{section.name}: Missing key elements. {first}",
                        priority=Priority.HIGH,
                        section=section_id,
                    )
                )
            elif section.score == section.max_score:
                first = section.strengths[0] if section.strengths else "Keep up the excellent work."
                insights.append(
                    Insight(
                        type=InsightType.SUCCESS,
                        message=f"{section.name}: Perfect execution! {first}",
                        priority=Priority.LOW,
                        section=section_id,
                    )
                )

        return insights

    def build_opportunities(self, sections: dict[SectionId, SectionResult]) -> list[Opportunity]:
        """Every below-max criterion of every applicable below-max section."""
        opportunities = []
        for section_id, section in sections.items():
            if not section.applicable or section.score >= section.max_score:
                continue
            for result in section.criteria:
                if result.score >= result.max_score:
                    continue
                criterion = self.catalog.criterion(section_id, result.name)
                if criterion is None:
                    continue
                opportunities.append(
                    Opportunity(
                        section=section.name,
                        criterion=criterion.name,
                        description=criterion.description,
                        suggestion=suggestion_for(criterion),
                        impact=Impact.HIGH if result.score == 0 else Impact.MEDIUM,
                        keywords=criterion.keywords,
                    )
                )
        return opportunities

    def build_next_step_hint(self, sections: dict[SectionId, SectionResult]) -> NextStepHint:
        """Pick the single most pressing stage to work on."""
        stage = CallStage.SUMMARIZE
        start = sections.get(SectionId.START)
        solve = sections.get(SectionId.SOLVE)
        sell = sections.get(SectionId.SELL)

        if start is not None and start.score < start.max_score * HINT_THRESHOLD:
            stage = CallStage.START
        elif solve is not None and solve.score < solve.max_score * HINT_THRESHOLD:
            stage = CallStage.SOLVE
        elif sell is not None and sell.applicable and sell.score < sell.max_score * HINT_THRESHOLD:
            stage = CallStage.SELL

        hint, priority = NEXT_STEP_HINTS[stage]
        return NextStepHint(stage=stage, hint=hint, priority=priority)

    def build_breakdown(self, sections: dict[SectionId, SectionResult]) -> ScoreBreakdown:
        """Per-section percentages and the turn's performance tier."""
        total = sum(s.score for s in sections.values())
        max_total = sum(s.max_score for s in sections.values())
        return ScoreBreakdown(
            total_score=total,
            max_total_score=max_total,
            sections={
                section_id: SectionBreakdown(
                    name=section.name,
                    score=section.score,
                    max_score=section.max_score,
                    percentage=round_half_up(_percentage(section.score, section.max_score)),
                    applicable=section.applicable,
                )
                for section_id, section in sections.items()
            },
            performance_tier=performance_tier(_percentage(total, max_total)),
        )


def analyze_turn(
    agent_text: Any,
    customer_text: Any = "",
    context: CallContext | None = None,
    catalog: RubricCatalog | None = None,
) -> TurnAnalysis:
    """Score one turn without a session.

    Args:
        agent_text: Agent utterance.
        customer_text: Customer utterance the agent replied to.
        context: Context snapshot; defaults to a fresh call context.
        catalog: Rubric catalog; defaults to the shared S4 catalog.

    Returns:
        TurnAnalysis for the turn.
    """
    return TurnEvaluator(catalog).analyze(agent_text, customer_text, context or CallContext())


__all__ = [
    "NEXT_STEP_HINTS",
    "TurnEvaluator",
    "analyze_turn",
    "performance_tier",
]
