"""Tests for the turn evaluator."""

import pytest

from callcoach.models import (
    AutoFailCategory,
    CallContext,
    CallStage,
    Impact,
    InsightType,
    PerformanceTier,
    Priority,
    SectionId,
    SectionResult,
    Sentiment,
)
from callcoach.services.qa.evaluator import (
    NEXT_STEP_HINTS,
    TurnEvaluator,
    analyze_turn,
    performance_tier,
)
from callcoach.services.qa.rubric import RubricCatalog

GOOD_OPENING = (
    "Hello, this is John from Comcast. I understand your concern and I'm here to "
    "help resolve this for you. Let me verify your account."
)
SELL_PITCH = (
    "Since we've resolved your internet issue, I'd like to show you our enhanced security "
    "package that can prevent future problems. This would give you better protection and "
    "faster speeds. Would you like me to add this to your account?"
)


class TestAnalyzeTurn:
    """Tests for analyze_turn on representative utterances."""

    def test_strong_opening_scores_start(self, context: CallContext) -> None:
        """Test a complete opening earns the full START section."""
        analysis = analyze_turn(GOOD_OPENING, "", context)

        assert analysis.auto_fail_detected is False
        assert analysis.sections[SectionId.START].score > 15
        assert analysis.sections[SectionId.START].score == 22

    def test_opening_section_scores(self, context: CallContext) -> None:
        """Test the per-section scores of the opening line."""
        analysis = analyze_turn(GOOD_OPENING, "", context)
        scores = {sid: s.score for sid, s in analysis.sections.items()}

        assert scores == {
            SectionId.START: 22,
            SectionId.SOLVE: 9,
            SectionId.SELL: 0,
            SectionId.SUMMARIZE: 0,
            SectionId.BEHAVIORS: 7,
        }
        assert analysis.total_score == 38
        assert analysis.max_total_score == 100

    def test_probe_failure_is_explained(self, context: CallContext) -> None:
        """Test a statement without questions fails the probe criterion."""
        analysis = analyze_turn(GOOD_OPENING, "", context)
        probe = analysis.sections[SectionId.SOLVE].criteria[0]

        assert probe.name == "Obtain Info / Probe"
        assert probe.score == 0
        assert probe.justification == "Failed: no probing"

    def test_rude_turn_is_zeroed(self, context: CallContext) -> None:
        """Test rudeness short-circuits scoring."""
        analysis = analyze_turn("Shut up and listen to me, you idiot!", "", context)

        assert analysis.auto_fail_detected is True
        assert analysis.total_score == 0
        assert "Rudeness" in analysis.auto_fail_reason
        assert analysis.auto_fail_category == AutoFailCategory.RUDENESS
        assert analysis.sections == {}
        assert analysis.insights == ()
        assert analysis.opportunities == ()
        assert analysis.next_step_hints == ()
        assert analysis.breakdown is None

    def test_sell_pitch_scores_when_applicable(self, sell_context: CallContext) -> None:
        """Test a value pitch scores SELL for an authenticated customer."""
        analysis = analyze_turn(SELL_PITCH, "", sell_context)
        sell = analysis.sections[SectionId.SELL]

        assert sell.applicable is True
        assert sell.score == 11
        assert sell.score > 10

    def test_sell_not_applicable_for_irate_customer(self) -> None:
        """Test SELL is skipped for irate customers."""
        context = CallContext(authenticated=True, customer_sentiment=Sentiment.IRATE)

        analysis = analyze_turn(SELL_PITCH, "This is terrible! I hate your service!", context)
        sell = analysis.sections[SectionId.SELL]

        assert sell.applicable is False
        assert sell.score == 0
        assert sell.criteria[0].name == "Section Not Applicable"
        assert sell.improvements == ()

    def test_professional_behaviors(self, context: CallContext) -> None:
        """Test ownership and rapport language scores BEHAVIORS."""
        analysis = analyze_turn(
            "I understand your frustration and I take full responsibility for this issue. "
            "Let me personally ensure this gets resolved today.",
            "",
            context,
        )

        assert analysis.sections[SectionId.BEHAVIORS].score > 5

    @pytest.mark.parametrize("agent_text", ["", None, "   ", "<<>>"])
    def test_empty_input_scores_without_error(
        self, context: CallContext, agent_text: object
    ) -> None:
        """Test empty or malformed text scores as no evidence."""
        analysis = analyze_turn(agent_text, None, context)

        assert analysis.auto_fail_detected is False
        assert analysis.total_score == 0
        assert all(s.score == 0 for s in analysis.sections.values())

    def test_rude_phrase_past_length_cap_zeroes_turn(self, context: CallContext) -> None:
        """Test auto-fail sees text the section scoring never reads."""
        analysis = analyze_turn(
            "I understand and I will help you. " * 40 + "Shut up, you idiot!", "", context
        )

        assert analysis.auto_fail_detected is True
        assert analysis.total_score == 0
        assert analysis.sections == {}

    def test_overlong_input_is_truncated(self, context: CallContext) -> None:
        """Test very long text is scored on its leading part only."""
        text = "x" * 2000 + " thank you, anything else?"

        analysis = analyze_turn(text, "", context)

        assert analysis.sections[SectionId.SUMMARIZE].score == 0

    def test_deterministic(self, sell_context: CallContext) -> None:
        """Test identical inputs give identical analyses."""
        first = analyze_turn(SELL_PITCH, "ok", sell_context)
        second = analyze_turn(SELL_PITCH, "ok", sell_context)

        assert first == second


class TestInsights:
    """Tests for insight generation."""

    def test_low_score_insights(self, context: CallContext) -> None:
        """Test an overall error insight plus perfect and missed sections."""
        analysis = analyze_turn(GOOD_OPENING, "", context)
        insights = analysis.insights

        assert insights[0].type == InsightType.ERROR
        assert insights[0].priority == Priority.HIGH
        assert insights[0].section is None

        by_section = {i.section: i for i in insights[1:]}
        assert set(by_section) == {SectionId.START, SectionId.SUMMARIZE}
        assert by_section[SectionId.START].message == "START: Perfect execution! Strong greeting"
        assert by_section[SectionId.START].priority == Priority.LOW
        assert by_section[SectionId.SUMMARIZE].message.startswith(
            "SUMMARIZE: Missing key elements. Add summarize actions:"
        )

    def test_inapplicable_sell_gets_no_insight(self, context: CallContext) -> None:
        """Test an inapplicable section is not reported as missed."""
        analysis = analyze_turn(GOOD_OPENING, "", context)

        assert all(i.section != SectionId.SELL for i in analysis.insights)


class TestOpportunities:
    """Tests for opportunity generation."""

    def test_opportunities_for_below_max_criteria(self, context: CallContext) -> None:
        """Test every below-max criterion of applicable sections is listed."""
        analysis = analyze_turn(GOOD_OPENING, "", context)
        pairs = [(o.section, o.criterion, o.impact) for o in analysis.opportunities]

        assert ("SOLVE", "Obtain Info / Probe", Impact.HIGH) in pairs
        assert ("SOLVE", "Resolve / Address Issue(s)", Impact.MEDIUM) in pairs
        assert ("BEHAVIORS", "Acknowledge / Take Responsibility", Impact.MEDIUM) in pairs
        assert all(section not in {"START", "SELL"} for section, _, _ in pairs)
        assert len(pairs) == 10

    def test_suggestion_lookup_and_fallback(self, context: CallContext) -> None:
        """Test suggestions come from the table or fall back to the description."""
        analysis = analyze_turn(GOOD_OPENING, "", context)
        by_name = {o.criterion: o for o in analysis.opportunities}

        assert by_name["Obtain Info / Probe"].suggestion.startswith("Ask open-ended questions")
        assert by_name["Documentation"].suggestion == (
            "Focus on: Documents caller, reason, resolution/actions"
        )
        assert by_name["Build Value / Enhance"].keywords[0] == "email"


class TestNextStepHints:
    """Tests for next-step hint selection."""

    def test_weak_start_first(self, context: CallContext) -> None:
        """Test a weak START is addressed first."""
        analysis = analyze_turn("Okay.", "", context)

        assert len(analysis.next_step_hints) == 1
        assert analysis.next_step_hints[0].stage == CallStage.START
        assert analysis.next_step_hints[0].hint == NEXT_STEP_HINTS[CallStage.START][0]

    def test_weak_solve_after_strong_start(self, context: CallContext) -> None:
        """Test SOLVE is next once START is strong."""
        analysis = analyze_turn(GOOD_OPENING, "", context)

        assert analysis.next_step_hints[0].stage == CallStage.SOLVE
        assert analysis.next_step_hints[0].priority == Priority.HIGH

    def test_sell_then_summarize_hints(self, catalog: RubricCatalog) -> None:
        """Test SELL is hinted only when applicable, otherwise SUMMARIZE."""
        evaluator = TurnEvaluator(catalog)
        sections = {
            SectionId.START: _section(catalog, SectionId.START, full=True),
            SectionId.SOLVE: _section(catalog, SectionId.SOLVE, full=True),
            SectionId.SELL: _section(catalog, SectionId.SELL),
            SectionId.SUMMARIZE: _section(catalog, SectionId.SUMMARIZE),
            SectionId.BEHAVIORS: _section(catalog, SectionId.BEHAVIORS),
        }

        assert evaluator.build_next_step_hint(sections).stage == CallStage.SELL

        sections[SectionId.SELL] = _section(catalog, SectionId.SELL, applicable=False)
        hint = evaluator.build_next_step_hint(sections)

        assert hint.stage == CallStage.SUMMARIZE
        assert hint.priority == Priority.MEDIUM

class TestBreakdown:
    """Tests for the score breakdown."""

    def test_breakdown_percentages(self, context: CallContext) -> None:
        """Test per-section percentages and tier."""
        breakdown = analyze_turn(GOOD_OPENING, "", context).breakdown

        assert breakdown is not None
        assert breakdown.total_score == 38
        assert breakdown.sections[SectionId.START].percentage == 100
        assert breakdown.sections[SectionId.SOLVE].percentage == 33
        assert breakdown.sections[SectionId.SELL].applicable is False
        assert breakdown.performance_tier == PerformanceTier.BELOW_EXPECTATIONS

    @pytest.mark.parametrize(
        ("percentage", "tier"),
        [
            (100, PerformanceTier.HIGHLY_EFFECTIVE),
            (90, PerformanceTier.HIGHLY_EFFECTIVE),
            (89.9, PerformanceTier.MEETS_EXPECTATIONS),
            (70, PerformanceTier.MEETS_EXPECTATIONS),
            (69.9, PerformanceTier.BELOW_EXPECTATIONS),
        ],
    )
    def test_performance_tier(self, percentage: float, tier: PerformanceTier) -> None:
        """Test tier thresholds at 90 and 70 percent."""
        assert performance_tier(percentage) == tier




def _section(
    catalog: RubricCatalog, section_id: SectionId, full: bool = False, applicable: bool = True
) -> SectionResult:
    section = catalog.section(section_id)
    return SectionResult(
        section_id=section_id,
        name=section.name,
        score=section.max_points if full else 0,
        max_score=section.max_points,
        applicable=applicable,
    )
