"""Tests for section scoring."""

import pytest

from callcoach.models import CallContext, SectionId, Sentiment
from callcoach.services.qa.rubric import RubricCatalog
from callcoach.services.qa.sections import (
    NOT_APPLICABLE_CRITERION,
    NOT_APPLICABLE_REASON,
    analyze_section,
)

SELL_LINE = "Since you're all set, I recommend our upgrade. Would you like to add it today?"


class TestSellApplicability:
    """Tests for the SELL applicability rule."""

    @pytest.mark.parametrize(
        "context",
        [
            CallContext(authenticated=False),
            CallContext(authenticated=True, customer_sentiment=Sentiment.IRATE),
            CallContext(authenticated=True, opted_out_of_sales=True),
        ],
    )
    def test_inapplicable_contexts(self, context: CallContext) -> None:
        """Test each blocking condition makes SELL inapplicable."""
        result = analyze_section(SectionId.SELL, SELL_LINE, "", context)

        assert result.applicable is False
        assert result.score == 0
        assert result.max_score == 20
        assert len(result.criteria) == 1
        assert result.criteria[0].name == NOT_APPLICABLE_CRITERION
        assert result.criteria[0].justification == NOT_APPLICABLE_REASON
        assert result.improvements == ()
        assert result.strengths == ()

    def test_applicable_for_calm_authenticated_customer(self, sell_context: CallContext) -> None:
        """Test SELL scores every criterion when applicable."""
        result = analyze_section(SectionId.SELL, SELL_LINE, "", sell_context)

        assert result.applicable is True
        assert [c.name for c in result.criteria] == [
            "Transition to Relevant Offer",
            "Present Offer",
            "Overcome Objections",
            "Proactively Ask for the Sale",
        ]
        assert result.score > 0

    def test_satisfied_customer_still_applicable(self) -> None:
        """Test only irate sentiment blocks SELL."""
        context = CallContext(authenticated=True, customer_sentiment=Sentiment.SATISFIED)

        assert analyze_section("SELL", SELL_LINE, "", context).applicable is True


class TestSectionScoring:
    """Tests for section totals, strengths and improvements."""

    @pytest.mark.parametrize("section_id", list(SectionId))
    def test_score_within_bounds(
        self, catalog: RubricCatalog, sell_context: CallContext, section_id: SectionId
    ) -> None:
        """Test each section score sums its criteria and stays in range."""
        result = analyze_section(section_id, SELL_LINE, "", sell_context, catalog)

        assert result.score == sum(c.score for c in result.criteria)
        assert 0 <= result.score <= catalog.section(section_id).max_points

    def test_strengths_and_improvements_split(self, context: CallContext) -> None:
        """Test scored criteria give strengths and missed ones improvements."""
        result = analyze_section(
            SectionId.SUMMARIZE,
            "Thank you for calling, is there anything else I can do?",
            "",
            context,
        )

        assert result.criteria[1].score == 4
        assert result.strengths == ("Strong close contact",)
        assert result.improvements[0].startswith("Add summarize actions:")
        assert len(result.improvements) == 2

    def test_observational_behaviors_never_score(self, context: CallContext) -> None:
        """Test indicator-only behaviors earn nothing from transcript text."""
        result = analyze_section(
            SectionId.BEHAVIORS,
            "Clear communication, professional language and confident delivery.",
            "",
            context,
        )

        assert [c.score for c in result.criteria[:3]] == [0, 0, 0]

    def test_unknown_section_id(self, context: CallContext) -> None:
        """Test an unknown section id is rejected."""
        with pytest.raises(ValueError):
            analyze_section("UPSELL", "hello", "", context)
