"""Section-level scoring."""

from __future__ import annotations

from typing import Any

from callcoach.models.analysis import CriterionResult, SectionResult
from callcoach.models.context import CallContext
from callcoach.models.rubric import SectionId
from callcoach.services.qa.criteria import evaluate_criterion
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.text import normalize_text

NOT_APPLICABLE_CRITERION = "Section Not Applicable"
NOT_APPLICABLE_REASON = "Customer is irate, not authenticated, or opted out of sales"


def analyze_section(
    section_id: SectionId | str,
    agent_text: Any,
    customer_text: Any,
    context: CallContext,
    catalog: RubricCatalog | None = None,
) -> SectionResult:
    """Score every criterion of one section.

    A section whose applicability rule rejects ``context`` scores 0, is
    flagged ``applicable=False`` and carries a single synthetic criterion
    explaining why, with no improvements so coaching does not penalize it.

    Args:
        section_id: Section to score.
        agent_text: Agent utterance.
        customer_text: Customer utterance the agent replied to.
        context: Context snapshot for the turn.
        catalog: Rubric catalog; defaults to the shared S4 catalog.

    Returns:
        SectionResult for the section.
    """
    catalog = catalog or get_default_catalog()
    section = catalog.section(section_id)

    if not section.is_applicable(context):
        return SectionResult(
            section_id=section.id,
            name=section.name,
            score=0,
            max_score=section.max_points,
            applicable=False,
            criteria=(
                CriterionResult(
                    name=NOT_APPLICABLE_CRITERION,
                    score=0,
                    max_score=section.max_points,
                    justification=NOT_APPLICABLE_REASON,
                ),
            ),
        )

    text = normalize_text(agent_text)
    results = [evaluate_criterion(c, text, context) for c in section.criteria]

    return SectionResult(
        section_id=section.id,
        name=section.name,
        score=sum(r.score for r in results),
        max_score=section.max_points,
        applicable=True,
        criteria=tuple(results),
        strengths=tuple(r.strength for r in results if r.score > 0),
        improvements=tuple(r.improvement for r in results if r.score == 0),
    )


__all__ = ["NOT_APPLICABLE_CRITERION", "NOT_APPLICABLE_REASON", "analyze_section"]
