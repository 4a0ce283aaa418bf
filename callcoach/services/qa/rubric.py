"""S4 rubric table and the validated catalog built from it.

The rubric is kept as plain data so every score can be traced back to a
named row. ``RubricCatalog`` turns the table into frozen value objects
and refuses to build when the table is inconsistent.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

import structlog

from callcoach.core.exceptions import RubricConfigurationError
from callcoach.models.context import CallContext, Sentiment
from callcoach.models.rubric import (
    AutoFailCategory,
    AutoFailRule,
    Criterion,
    RubricSection,
    SectionId,
)

logger = structlog.get_logger()

RUBRIC_VERSION = "s4-2024.1"
TOTAL_POINTS = 100


def sell_applicable(context: CallContext) -> bool:
    """SELL only counts for calm, authenticated customers who allow offers."""
    return (
        context.customer_sentiment != Sentiment.IRATE
        and context.authenticated
        and not context.opted_out_of_sales
    )


# Rubric definition, in scoring order
S4_RUBRIC: list[dict[str, Any]] = [
    # ==========================================================================
    # START
    # ==========================================================================
    {
        "id": "START",
        "name": "START",
        "max_points": 22,
        "description": "Opening the call professionally and setting the foundation",
        "criteria": [
            {
                "name": "Greeting",
                "max_score": 3,
                "description": "Agent greets clearly (Comcast Name, Agent First Name, offer assistance)",
                "keywords": ["comcast", "hello", "hi", "good morning", "good afternoon", "how can i help", "assist"],
                "failure_conditions": ["incomplete greeting", "rushed", "no company name"],
            },
            {
                "name": "Reflect, Relate, Empathize",
                "max_score": 15,
                "description": "Reflects call reason, empathizes with customer, assures action",
                "keywords": ["understand", "sorry", "apologize", "help", "resolve", "concern", "frustration"],
                "failure_conditions": ["vague response", "trap words", "no ownership", "dismissive"],
            },
            {
                "name": "Set Agenda / Auth / Plant Seed",
                "max_score": 4,
                "description": "Sets agenda, authenticates caller, plants seed for account review",
                "keywords": ["verify", "confirm", "account", "review", "check", "authenticate"],
                "failure_conditions": ["no agenda", "no authentication", "no account review mention"],
            },
        ],
    },
    # ==========================================================================
    # SOLVE
    # ==========================================================================
    {
        "id": "SOLVE",
        "name": "SOLVE",
        "max_points": 27,
        "description": "Gathering information and resolving the customer's issue",
        "criteria": [
            {
                "name": "Obtain Info / Probe",
                "max_score": 7,
                "description": "Asks effective questions, probes root causes",
                "keywords": ["what", "when", "how", "why", "tell me", "explain", "describe"],
                "failure_conditions": [
                    "assumptions",
                    "no probing",
                    "no opportunity for customer to describe",
                ],
            },
            {
                "name": "Resolve / Address Issue(s)",
                "max_score": 14,
                "description": "Explains problem cause, provides complete resolution, educates on prevention",
                "keywords": ["solution", "fix", "resolve", "because", "reason", "prevent", "avoid"],
                "failure_conditions": ["incomplete resolution", "insufficient info", "no confirmation"],
            },
            {
                "name": "Build Value / Enhance",
                "max_score": 6,
                "description": "Attempts email capture AND builds value of EXISTING Comcast products/services",
                "keywords": ["email", "contact", "benefits", "features", "value", "service"],
                "failure_conditions": ["no email capture", "no value building"],
            },
        ],
    },
    # ==========================================================================
    # SELL
    # ==========================================================================
    {
        "id": "SELL",
        "name": "SELL",
        "max_points": 20,
        "description": (
            "Presenting relevant offers (only if customer is not irate, authenticated, "
            "and hasn't opted out)"
        ),
        "applicability": sell_applicable,
        "applicability_conditions": ["customer not irate", "authenticated", "not opted out of sales"],
        "criteria": [
            {
                "name": "Transition to Relevant Offer",
                "max_score": 6,
                "description": "Transitions after resolving issue, uses bridging statements, probes for needs",
                "keywords": ["also", "additionally", "by the way", "speaking of", "since", "needs"],
                "failure_conditions": ["transitions too early", "no bridging", "abrupt transition"],
            },
            {
                "name": "Present Offer",
                "max_score": 6,
                "description": "Presents tailored recommendation, discusses benefits/value",
                "keywords": ["recommend", "suggest", "offer", "benefits", "save", "upgrade", "enhance"],
                "failure_conditions": ["only mentions price", "no benefits", "generic offer"],
            },
            {
                "name": "Overcome Objections",
                "max_score": 4,
                "description": "Acknowledges objection, attempts to overcome resistance",
                "keywords": ["understand", "however", "but", "consider", "what if", "alternative"],
                "failure_conditions": ["poor attempt", "aggressive", "dismissive"],
                "not_applicable_note": "if customer accepts without resistance",
            },
            {
                "name": "Proactively Ask for the Sale",
                "max_score": 4,
                "description": "Uses closing techniques (choice, assumptive, urgency)",
                "keywords": ["would you like", "shall we", "can we", "today", "now", "which option"],
                "failure_conditions": ["discusses solution but doesn't ask"],
                "not_applicable_note": "if customer pre-purchases or rejects after objection handling",
            },
        ],
    },
    # ==========================================================================
    # SUMMARIZE
    # ==========================================================================
    {
        "id": "SUMMARIZE",
        "name": "SUMMARIZE",
        "max_points": 14,
        "description": "Wrapping up the call professionally and ensuring clarity",
        "criteria": [
            {
                "name": "Summarize Actions",
                "max_score": 7,
                "description": "Provides clear next steps, documents resolution, validates sales",
                "keywords": ["summary", "next steps", "will", "should", "expect", "follow up"],
                "failure_conditions": ["no recap", "no next steps", "unclear resolution"],
            },
            {
                "name": "Close Contact",
                "max_score": 4,
                "description": "Offers additional assistance, personalized closing, shows appreciation",
                "keywords": ["anything else", "additional", "thank you", "appreciate", "have a great"],
                "failure_conditions": ["abrupt ending", "no additional assistance offer", "impersonal"],
            },
            {
                "name": "Documentation",
                "max_score": 3,
                "description": "Documents caller, reason, resolution/actions",
                "keywords": ["document", "note", "record", "file"],
                "failure_conditions": ["missing required info"],
                "note": "Cannot be fully assessed from transcript alone",
            },
        ],
    },
    # ==========================================================================
    # BEHAVIORS
    # ==========================================================================
    {
        "id": "BEHAVIORS",
        "name": "BEHAVIORS",
        "max_points": 17,
        "description": "Professional behaviors assessed throughout the call",
        "criteria": [
            # Observational criteria: indicators only, no transcript keywords
            {
                "name": "Tone, Confidence & Clarity",
                "max_score": 3,
                "description": "Professional, pleasant, clear, unrushed pace",
                "indicators": ["clear communication", "professional language", "confident delivery"],
                "failure_conditions": ["unprofessional tone", "unclear speech", "rushed delivery"],
            },
            {
                "name": "Active Listening",
                "max_score": 3,
                "description": "Verbal cues, avoids interruption, references customer info",
                "indicators": [
                    "acknowledges customer",
                    "references previous statements",
                    "asks follow-up questions",
                ],
                "failure_conditions": ["interrupts customer", "ignores customer input", "no verbal cues"],
            },
            {
                "name": "Contact Management",
                "max_score": 3,
                "description": "Minimizes dead air (<20s), manages holds (<60s) with explanation",
                "indicators": ["smooth transitions", "explains delays", "manages time well"],
                "failure_conditions": ["excessive dead air", "long holds without explanation"],
            },
            {
                "name": "Acknowledge / Take Responsibility",
                "max_score": 4,
                "description": "Assures solution, positive language, avoids blame",
                "keywords": ["I will", "we can", "let me", "I'll take care", "my responsibility"],
                "failure_conditions": ["blames customer", "negative language", "no ownership"],
            },
            {
                "name": "Build Rapport / Demonstrate Concern",
                "max_score": 4,
                "description": "Genuine interest, acknowledges feelings, personalizes interaction",
                "keywords": ["understand", "appreciate", "concern", "important", "personally"],
                "failure_conditions": ["robotic responses", "ignores emotions", "impersonal"],
            },
        ],
    },
]

# Auto-fail rules, evaluated in this order; the first match wins
AUTO_FAIL_RULES: list[dict[str, Any]] = [
    {
        "category": "rudeness",
        "patterns": [
            r"\b(shut up|stupid|idiot|moron)\b",
            r"\b(fuck|shit|damn|hell)\b",
            r"\b(whatever|don't care|not my problem)\b",
        ],
        "reason": "Rudeness detected: Unprofessional language or attitude",
    },
    {
        "category": "call_avoidance",
        "patterns": [r"hold on", r"personal"],
        "match_all": True,
        "reason": "Call avoidance: Personal activities during call",
    },
    {
        "category": "inappropriate_transfer",
        "patterns": [r"call another department", r"not my department"],
        "reason": "Inappropriate transfer: Directing customer to other departments without assistance",
    },
]


def _build_criterion(row: Mapping[str, Any]) -> Criterion:
    try:
        return Criterion(
            name=row["name"],
            max_score=int(row["max_score"]),
            description=row.get("description", ""),
            keywords=tuple(k.lower() for k in row.get("keywords", ())),
            failure_conditions=tuple(c.lower() for c in row.get("failure_conditions", ())),
            indicators=tuple(row.get("indicators", ())),
            not_applicable_note=row.get("not_applicable_note"),
            note=row.get("note"),
        )
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Invalid criterion definition {row.get('name')!r}: {e}"
        raise RubricConfigurationError(msg) from e


def _build_section(row: Mapping[str, Any]) -> RubricSection:
    try:
        section_id = SectionId(row["id"])
    except (KeyError, ValueError) as e:
        msg = f"Invalid section id in rubric definition: {row.get('id')!r}"
        raise RubricConfigurationError(msg) from e

    return RubricSection(
        id=section_id,
        name=row.get("name", section_id.value),
        max_points=int(row.get("max_points", 0)),
        description=row.get("description", ""),
        criteria=tuple(_build_criterion(c) for c in row.get("criteria", ())),
        applicability=row.get("applicability"),
        applicability_conditions=tuple(row.get("applicability_conditions", ())),
    )


def _build_auto_fail_rule(row: Mapping[str, Any]) -> AutoFailRule:
    try:
        return AutoFailRule(
            category=AutoFailCategory(row["category"]),
            patterns=tuple(re.compile(p, re.IGNORECASE) for p in row["patterns"]),
            reason=row["reason"],
            match_all=bool(row.get("match_all", False)),
        )
    except (KeyError, ValueError, re.error) as e:
        msg = f"Invalid auto-fail rule {row.get('category')!r}: {e}"
        raise RubricConfigurationError(msg) from e


class RubricCatalog:
    """Validated, read-only rubric shared by every call session.

    Raises:
        RubricConfigurationError: If a section's criteria do not sum to its
            maximum, a section id is duplicated or missing, or the section
            maxima do not add up to 100 points.
    """

    def __init__(
        self,
        sections: Iterable[RubricSection],
        auto_fail_rules: Iterable[AutoFailRule],
        version: str = RUBRIC_VERSION,
    ) -> None:
        self.version = version
        self._sections: dict[SectionId, RubricSection] = {}
        for section in sections:
            if section.id in self._sections:
                msg = f"Duplicate rubric section id: {section.id.value}"
                raise RubricConfigurationError(msg)
            if section.criteria_total != section.max_points:
                msg = (
                    f"Section {section.id.value} criteria sum to {section.criteria_total}, "
                    f"expected {section.max_points}"
                )
                raise RubricConfigurationError(msg)
            self._sections[section.id] = section

        missing = [s.value for s in SectionId if s not in self._sections]
        if missing:
            msg = f"Rubric is missing sections: {', '.join(missing)}"
            raise RubricConfigurationError(msg)

        if self.max_total_score != TOTAL_POINTS:
            msg = f"Rubric sections sum to {self.max_total_score}, expected {TOTAL_POINTS}"
            raise RubricConfigurationError(msg)

        self._auto_fail_rules = tuple(auto_fail_rules)

    @classmethod
    def from_definition(
        cls,
        sections: Iterable[Mapping[str, Any]],
        auto_fail_rules: Iterable[Mapping[str, Any]],
        version: str = RUBRIC_VERSION,
    ) -> RubricCatalog:
        """Build a catalog from plain table rows."""
        return cls(
            sections=[_build_section(row) for row in sections],
            auto_fail_rules=[_build_auto_fail_rule(row) for row in auto_fail_rules],
            version=version,
        )

    @property
    def sections(self) -> tuple[RubricSection, ...]:
        """Sections in scoring order."""
        return tuple(self._sections[s] for s in SectionId)

    @property
    def auto_fail_rules(self) -> tuple[AutoFailRule, ...]:
        """Auto-fail rules in evaluation order."""
        return self._auto_fail_rules

    @property
    def max_total_score(self) -> int:
        """Sum of all section maxima."""
        return sum(s.max_points for s in self._sections.values())

    def section(self, section_id: SectionId | str) -> RubricSection:
        """Look up a section by id."""
        return self._sections[SectionId(section_id)]

    def criterion(self, section_id: SectionId | str, name: str) -> Criterion | None:
        """Look up a criterion by section and name."""
        for criterion in self.section(section_id).criteria:
            if criterion.name == name:
                return criterion
        return None


@lru_cache(maxsize=1)
def get_default_catalog() -> RubricCatalog:
    """Return the process-wide S4 catalog, building it on first use."""
    catalog = RubricCatalog.from_definition(S4_RUBRIC, AUTO_FAIL_RULES)
    logger.info(
        "rubric_catalog_loaded",
        version=catalog.version,
        sections=len(catalog.sections),
        auto_fail_rules=len(catalog.auto_fail_rules),
    )
    return catalog


__all__ = [
    "AUTO_FAIL_RULES",
    "RUBRIC_VERSION",
    "S4_RUBRIC",
    "TOTAL_POINTS",
    "RubricCatalog",
    "get_default_catalog",
    "sell_applicable",
]
