"""Disqualifying-behavior scan run before any rubric scoring."""

from __future__ import annotations

from typing import Any

from callcoach.models.analysis import AutoFailResult
from callcoach.services.qa.rubric import RubricCatalog, get_default_catalog
from callcoach.services.qa.text import normalize_text


def check_auto_fail(agent_text: Any, catalog: RubricCatalog | None = None) -> AutoFailResult:
    """Scan agent text for auto-fail behavior.

    Rules are checked in catalog order (rudeness, call avoidance,
    inappropriate transfer) and the first match wins. The whole
    utterance is scanned, including any text past the scoring length cap.

    Args:
        agent_text: Raw agent utterance.
        catalog: Rubric catalog; defaults to the shared S4 catalog.

    Returns:
        AutoFailResult with ``detected`` False when nothing matched.
    """
    catalog = catalog or get_default_catalog()
    text = normalize_text(agent_text, truncate=False)
    if not text:
        return AutoFailResult()

    for rule in catalog.auto_fail_rules:
        if rule.matches(text):
            return AutoFailResult(detected=True, category=rule.category, reason=rule.reason)

    return AutoFailResult()


__all__ = ["check_auto_fail"]
