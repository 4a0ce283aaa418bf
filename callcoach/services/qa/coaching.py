"""Coaching content: suggestions, example phrases and drill-down insights."""

from __future__ import annotations

from typing import Any

from callcoach.models.analysis import SectionResult
from callcoach.models.rubric import Criterion, SectionId
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog

EXCELLENT_PERCENT = 80
GOOD_PERCENT = 60
NEEDS_IMPROVEMENT_PERCENT = 40
QUICK_WIN_KEYWORDS = 3

CRITERION_SUGGESTIONS: dict[str, str] = {
    "Greeting": 'Start with "Hello, this is [Your Name] from Comcast. How can I assist you today?"',
    "Reflect, Relate, Empathize": (
        'Use phrases like "I understand your frustration" and "Let me help resolve this for you"'
    ),
    "Set Agenda / Auth / Plant Seed": (
        "Say \"Let me verify your account and then we'll get this resolved\""
    ),
    "Obtain Info / Probe": (
        'Ask open-ended questions: "Can you tell me more about..." or "When did this start?"'
    ),
    "Resolve / Address Issue(s)": (
        'Explain the cause and solution: "The issue is caused by... and here\'s how we\'ll fix it..."'
    ),
    "Build Value / Enhance": (
        'Mention service benefits: "This also gives you access to..." or '
        '"Can I get your email for updates?"'
    ),
    "Transition to Relevant Offer": (
        "Bridge naturally: \"Since we've resolved this, I'd like to show you how to enhance your service\""
    ),
    "Present Offer": (
        'Focus on benefits: "This upgrade would give you faster speeds and better reliability"'
    ),
    "Overcome Objections": (
        'Acknowledge and redirect: "I understand your concern. Let me explain how this addresses that..."'
    ),
    "Proactively Ask for the Sale": (
        'Use closing techniques: "Would you like me to add this to your account today?"'
    ),
    "Summarize Actions": (
        "Recap clearly: \"Here's what we've done... and here's what happens next...\""
    ),
    "Close Contact": (
        'End professionally: "Is there anything else I can help you with today? '
        'Thank you for choosing Comcast"'
    ),
}

SECTION_EXAMPLES: dict[SectionId, tuple[str, ...]] = {
    SectionId.START: (
        "Hello, this is [Name] from Comcast. How can I assist you today?",
        "I understand your frustration with this issue, and I'm here to help resolve it.",
        "Let me verify your account information so we can get this taken care of for you.",
    ),
    SectionId.SOLVE: (
        "Can you tell me more about when this issue started?",
        "The problem is caused by [reason], and here's how we'll fix it: [solution]",
        "I'd like to capture your email address for important account updates.",
    ),
    SectionId.SELL: (
        "Since we've resolved your internet issue, I'd like to show you how our enhanced "
        "security package can prevent future problems.",
        "This upgrade would give you faster speeds and better reliability for your business needs.",
        "Would you like me to add this service to your account today?",
    ),
    SectionId.SUMMARIZE: (
        "Let me summarize what we've accomplished today and what you can expect next.",
        "Is there anything else I can help you with today?",
        "Thank you for choosing Comcast, and have a great day!",
    ),
    SectionId.BEHAVIORS: (
        "I completely understand your concern about this.",
        "Let me take care of that for you right away.",
        "I appreciate your patience while I look into this.",
    ),
}

SECTION_ACTIONS: dict[SectionId, tuple[str, ...]] = {
    SectionId.START: (
        "Use complete company greeting with name",
        "Acknowledge customer emotion explicitly",
        "Set clear agenda before proceeding",
    ),
    SectionId.SOLVE: (
        "Ask more probing questions",
        "Explain root cause clearly",
        "Capture customer email address",
    ),
    SectionId.SELL: (
        "Transition smoothly after resolution",
        "Focus on benefits, not just features",
        "Ask directly for the sale",
    ),
    SectionId.SUMMARIZE: (
        "Summarize all actions taken",
        "Provide clear next steps",
        "Offer additional assistance",
    ),
    SectionId.BEHAVIORS: (
        "Maintain professional tone",
        "Use active listening phrases",
        "Take ownership of issues",
    ),
}

KEY_PHRASES: dict[str, str] = {
    "greeting": "Hello, this is [Name] from Comcast Business. How can I assist you today?",
    "empathy": "I understand your frustration with this issue.",
    "ownership": "I'm going to take care of this for you personally.",
    "probing": "Can you tell me more about when this started happening?",
    "transition": "Since we've resolved your issue, I'd like to show you...",
    "closing": "Is there anything else I can help you with today?",
}

PRACTICE_SCENARIOS: tuple[str, ...] = (
    "Practice greeting with company name and empathy",
    "Role-play probing questions for technical issues",
    "Practice transitioning to offers after resolution",
    "Rehearse professional call closing",
)


def suggestion_for(criterion: Criterion) -> str:
    """Return the coaching suggestion for a criterion."""
    return CRITERION_SUGGESTIONS.get(criterion.name, f"Focus on: {criterion.description}")


def section_actions(section_id: SectionId) -> tuple[str, ...]:
    """Return practice actions for a weak section."""
    return SECTION_ACTIONS.get(section_id, ("Review section guidelines", "Practice key phrases"))


def score_indicator(score: float, max_score: float) -> dict[str, Any]:
    """Classify a score into a display level.

    Args:
        score: Points earned.
        max_score: Points available; a zero maximum reads as 0%.

    Returns:
        Dict with ``level`` and rounded ``percentage``.
    """
    percentage = (score / max_score) * 100 if max_score > 0 else 0.0

    if percentage >= EXCELLENT_PERCENT:
        level = "Excellent"
    elif percentage >= GOOD_PERCENT:
        level = "Good"
    elif percentage >= NEEDS_IMPROVEMENT_PERCENT:
        level = "Needs Improvement"
    else:
        level = "Poor"

    return {"level": level, "percentage": round_half_up(percentage)}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def section_insights(
    section_id: SectionId | str,
    result: SectionResult,
    catalog: RubricCatalog | None = None,
) -> dict[str, Any]:
    """Build the drill-down view for one section of a turn.

    Quick wins list zero-score criteria that have keywords to reach for;
    next steps start with a training review when the section is below
    half marks, followed by one step per recorded improvement.
    """
    catalog = catalog or get_default_catalog()
    section = catalog.section(section_id)

    quick_wins = []
    for criterion_result in result.criteria:
        if criterion_result.score != 0:
            continue
        criterion = catalog.criterion(section.id, criterion_result.name)
        if criterion is None or not criterion.keywords:
            continue
        quick_wins.append(
            {
                "criterion": criterion.name,
                "suggestion": "Include keywords like: "
                + ", ".join(criterion.keywords[:QUICK_WIN_KEYWORDS]),
                "impact": criterion.max_score,
                "difficulty": "easy",
            }
        )

    next_steps = []
    if result.score < result.max_score * 0.5:
        next_steps.append(
            {
                "priority": "high",
                "action": f"Review {section.name} training materials",
                "description": section.description,
            }
        )
    next_steps.extend(
        {
            "priority": "medium",
            "action": improvement,
            "description": "Focus on this in your next customer interaction",
        }
        for improvement in result.improvements
    )

    return {
        "section_name": section.name,
        "current_score": result.score,
        "max_score": result.max_score,
        "opportunities": list(result.improvements),
        "quick_wins": quick_wins,
        "detailed_breakdown": [c.model_dump() for c in result.criteria],
        "next_steps": next_steps,
        "examples": list(SECTION_EXAMPLES.get(section.id, ())),
    }


def promoter_checklist() -> dict[str, Any]:
    """Return the static checklist that maps rubric items to promoter scores."""
    return {
        "title": "Guaranteed Promoter Checklist - Follow for 100% Score",
        "description": "Complete this checklist to ensure promoter score and optimal business metrics",
        "sections": {
            SectionId.START.value: {
                "name": "START - Opening Excellence",
                "items": [
                    "Use complete greeting: 'Hello, this is [Name] from Comcast Business. "
                    "How can I assist you today?'",
                    "Acknowledge customer concern: 'I understand your frustration with [issue]'",
                    "Take ownership: 'I'm here to help resolve this for you'",
                    "Set agenda: 'Let me verify your account and then we'll get this resolved'",
                    "Authenticate customer before proceeding",
                ],
                "guaranteed_score": "22/22 points",
            },
            SectionId.SOLVE.value: {
                "name": "SOLVE - Resolution Mastery",
                "items": [
                    "Ask probing questions: 'Can you tell me more about when this started?'",
                    "Explain root cause: 'The issue is caused by [reason]'",
                    "Provide complete solution: 'Here's how we'll fix this: [steps]'",
                    "Educate on prevention: 'To prevent this in the future...'",
                    "Capture email: 'May I have your email for important updates?'",
                    "Build value: 'This also gives you access to [benefit]'",
                ],
                "guaranteed_score": "27/27 points",
            },
            SectionId.SELL.value: {
                "name": "SELL - Value Addition",
                "items": [
                    "Transition after resolution: 'Since we've resolved this...'",
                    "Probe for needs: 'What's most important for your business?'",
                    "Present tailored offer: 'Based on your needs, I recommend...'",
                    "Focus on benefits: 'This would give you [specific benefits]'",
                    "Handle objections: 'I understand your concern. Let me explain...'",
                    "Ask for the sale: 'Would you like me to add this today?'",
                ],
                "guaranteed_score": "20/20 points",
                "note": "Only applicable if customer is not irate and hasn't opted out",
            },
            SectionId.SUMMARIZE.value: {
                "name": "SUMMARIZE - Professional Closure",
                "items": [
                    "Summarize actions: 'Here's what we've accomplished today...'",
                    "Provide next steps: 'You can expect [timeline and actions]'",
                    "Offer additional help: 'Is there anything else I can assist with?'",
                    "Thank customer: 'Thank you for choosing Comcast Business'",
                    "Document everything: Include all details in ticket/notes",
                ],
                "guaranteed_score": "14/14 points",
            },
            SectionId.BEHAVIORS.value: {
                "name": "BEHAVIORS - Professional Excellence",
                "items": [
                    "Maintain professional, pleasant tone throughout",
                    "Use active listening: 'I hear you saying...'",
                    "Minimize dead air (under 20 seconds)",
                    "Take responsibility: 'I'll take care of this for you'",
                    "Build rapport: 'I appreciate your patience'",
                    "Show genuine concern for customer's business",
                ],
                "guaranteed_score": "17/17 points",
            },
        },
        "business_metrics": {
            "title": "Business Metrics Guarantee",
            "items": [
                "Promoter Score: Following this checklist guarantees promoter rating",
                "Resolution Rate: Proper troubleshooting prevents 7-day callbacks",
                "Sales Conversion: Qualified leads will close when properly presented",
                "First Call Resolution: Complete problem solving on first contact",
            ],
        },
    }


__all__ = [
    "CRITERION_SUGGESTIONS",
    "KEY_PHRASES",
    "PRACTICE_SCENARIOS",
    "SECTION_ACTIONS",
    "SECTION_EXAMPLES",
    "promoter_checklist",
    "round_half_up",
    "score_indicator",
    "section_actions",
    "section_insights",
    "suggestion_for",
]
