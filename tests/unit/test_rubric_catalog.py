"""Unit tests for the rubric catalog."""

import copy
from typing import Any

import pytest

from callcoach.core.exceptions import RubricConfigurationError
from callcoach.models import CallContext, Criterion, SectionId, Sentiment
from callcoach.services.qa.rubric import (
    AUTO_FAIL_RULES,
    S4_RUBRIC,
    RubricCatalog,
    get_default_catalog,
    sell_applicable,
)


def _rubric() -> list[dict[str, Any]]:
    return copy.deepcopy(S4_RUBRIC)


class TestDefaultCatalog:
    """Tests for the built-in S4 catalog."""

    def test_sections_in_scoring_order(self, catalog: RubricCatalog) -> None:
        """Test sections come back START to BEHAVIORS."""
        assert [s.id for s in catalog.sections] == list(SectionId)

    def test_section_maxima(self, catalog: RubricCatalog) -> None:
        """Test the weighted section maxima."""
        maxima = {s.id: s.max_points for s in catalog.sections}

        assert maxima == {
            SectionId.START: 22,
            SectionId.SOLVE: 27,
            SectionId.SELL: 20,
            SectionId.SUMMARIZE: 14,
            SectionId.BEHAVIORS: 17,
        }
        assert catalog.max_total_score == 100

    def test_criteria_sum_to_section_maximum(self, catalog: RubricCatalog) -> None:
        """Test every section's criteria add up to its maximum."""
        for section in catalog.sections:
            assert sum(c.max_score for c in section.criteria) == section.max_points

    def test_keywords_are_lowercase(self, catalog: RubricCatalog) -> None:
        """Test keywords are stored in matching form."""
        criterion = catalog.criterion(SectionId.BEHAVIORS, "Acknowledge / Take Responsibility")

        assert criterion is not None
        assert "i will" in criterion.keywords
        assert "i'll take care" in criterion.keywords

    def test_observational_criteria_have_no_keywords(self, catalog: RubricCatalog) -> None:
        """Test indicator-only behavior criteria carry no keywords."""
        for name in ("Tone, Confidence & Clarity", "Active Listening", "Contact Management"):
            criterion = catalog.criterion(SectionId.BEHAVIORS, name)
            assert criterion is not None
            assert criterion.keywords == ()
            assert criterion.indicators

    def test_only_sell_has_applicability_rule(self, catalog: RubricCatalog) -> None:
        """Test applicability is conditional for SELL only."""
        conditional = [s.id for s in catalog.sections if s.applicability is not None]

        assert conditional == [SectionId.SELL]

    def test_auto_fail_rule_order(self, catalog: RubricCatalog) -> None:
        """Test auto-fail rules keep their evaluation order."""
        categories = [r.category.value for r in catalog.auto_fail_rules]

        assert categories == ["rudeness", "call_avoidance", "inappropriate_transfer"]

    def test_default_catalog_is_shared(self) -> None:
        """Test the default catalog is built once per process."""
        assert get_default_catalog() is get_default_catalog()

    def test_unknown_criterion_lookup(self, catalog: RubricCatalog) -> None:
        """Test looking up a criterion that does not exist."""
        assert catalog.criterion(SectionId.START, "Nonexistent") is None


class TestCatalogValidation:
    """Tests for fatal configuration errors."""

    def test_criteria_sum_mismatch_is_fatal(self) -> None:
        """Test a section whose criteria do not sum to its maximum."""
        rubric = _rubric()
        rubric[0]["criteria"][0]["max_score"] = 4

        with pytest.raises(RubricConfigurationError, match="START"):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_duplicate_section_is_fatal(self) -> None:
        """Test a duplicated section id."""
        rubric = _rubric()
        rubric.append(copy.deepcopy(rubric[0]))

        with pytest.raises(RubricConfigurationError, match="Duplicate"):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_missing_section_is_fatal(self) -> None:
        """Test a rubric without every section."""
        rubric = [row for row in _rubric() if row["id"] != "SELL"]

        with pytest.raises(RubricConfigurationError, match="SELL"):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_unknown_section_id_is_fatal(self) -> None:
        """Test a section id outside the five known sections."""
        rubric = _rubric()
        rubric[0]["id"] = "OPENING"

        with pytest.raises(RubricConfigurationError):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_negative_max_score_is_fatal(self) -> None:
        """Test a negative criterion maximum."""
        rubric = _rubric()
        rubric[0]["criteria"][0]["max_score"] = -3
        rubric[0]["criteria"][1]["max_score"] = 21

        with pytest.raises(RubricConfigurationError, match="negative"):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_negative_max_score_on_direct_construction(self) -> None:
        """Test building a criterion by hand rejects a negative maximum."""
        with pytest.raises(RubricConfigurationError, match="negative"):
            Criterion(name="Greeting", max_score=-1, description="Greets the caller")

    def test_total_other_than_hundred_is_fatal(self) -> None:
        """Test consistent sections that do not total 100 points."""
        rubric = _rubric()
        rubric[0]["max_points"] = 23
        rubric[0]["criteria"][0]["max_score"] = 4

        with pytest.raises(RubricConfigurationError, match="100"):
            RubricCatalog.from_definition(rubric, AUTO_FAIL_RULES)

    def test_invalid_auto_fail_pattern_is_fatal(self) -> None:
        """Test an auto-fail rule with an invalid regex."""
        rules = [{"category": "rudeness", "patterns": ["(unclosed"], "reason": "x"}]

        with pytest.raises(RubricConfigurationError):
            RubricCatalog.from_definition(_rubric(), rules)


class TestSellApplicable:
    """Tests for the SELL applicability rule."""

    @pytest.mark.parametrize(
        ("sentiment", "authenticated", "opted_out", "expected"),
        [
            (Sentiment.NEUTRAL, True, False, True),
            (Sentiment.SATISFIED, True, False, True),
            (Sentiment.IRATE, True, False, False),
            (Sentiment.NEUTRAL, False, False, False),
            (Sentiment.NEUTRAL, True, True, False),
            (Sentiment.IRATE, False, True, False),
        ],
    )
    def test_applicability_formula(
        self,
        sentiment: Sentiment,
        authenticated: bool,
        opted_out: bool,
        expected: bool,
    ) -> None:
        """Test calm, authenticated, not opted-out customers only."""
        context = CallContext(
            customer_sentiment=sentiment,
            authenticated=authenticated,
            opted_out_of_sales=opted_out,
        )

        assert sell_applicable(context) is expected
