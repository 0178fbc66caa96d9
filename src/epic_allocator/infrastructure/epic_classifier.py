"""Hybrid epic classifier: keyword rules first, optional AI tie-breaker.

- single top keyword category        → high confidence, method "keyword"
- tie at the top, AI answers         → medium confidence, method "ai-fallback"
- tie at the top, AI silent/failing  → low confidence, first tied category
- no keyword hit at all              → "Full Stack", low confidence, method "default"
"""

from __future__ import annotations

import logging

from epic_allocator.domain.models import EpicClassification
from epic_allocator.domain.ports import AIClassifier
from epic_allocator.domain.taxonomy import Category

logger = logging.getLogger(__name__)

HIGH = "high"
MEDIUM = "medium"
LOW = "low"

METHOD_KEYWORD = "keyword"
METHOD_AI = "ai-fallback"
METHOD_DEFAULT = "default"


def keyword_scores(text: str) -> dict[Category, int]:
    """Number of each category's keywords found as substrings of *text*."""
    lowered = text.lower()
    return {
        category: sum(1 for kw in category.keywords if kw in lowered)
        for category in Category
    }


def top_categories(scores: dict[Category, int]) -> tuple[list[Category], int]:
    """Categories tied at the maximum nonzero score, in taxonomy order."""
    best = max(scores.values(), default=0)
    if best <= 0:
        return [], 0
    return [c for c, s in scores.items() if s == best], best


def _ask_ai(ai: AIClassifier | None, title: str, description: str) -> Category | None:
    if ai is None:
        return None
    try:
        answer = ai.classify(title, description)
    except Exception as e:  # collaborator failures never reach the caller
        logger.warning("AI classifier failed, using keyword fallback: %s", e)
        return None
    if not answer:
        return None
    category = Category.from_name(answer)
    if category is None:
        logger.warning("AI classifier returned unknown category %r", answer)
    return category


def classify_text(
    title: str, description: str, ai: AIClassifier | None = None,
) -> EpicClassification:
    scores = keyword_scores(f"{title} {description}")
    tied, best = top_categories(scores)

    if len(tied) == 1:
        return EpicClassification(
            primary=tied[0].value, confidence=HIGH,
            method=METHOD_KEYWORD, keyword_score=best,
        )

    if len(tied) > 1:
        names = [c.value for c in tied]
        chosen = _ask_ai(ai, title, description)
        if chosen is not None:
            return EpicClassification(
                primary=chosen.value, confidence=MEDIUM, method=METHOD_AI,
                alternatives=names, keyword_score=best,
            )
        return EpicClassification(
            primary=names[0], confidence=LOW, method=METHOD_KEYWORD,
            alternatives=names[1:], keyword_score=best,
        )

    return EpicClassification(
        primary=Category.FULL_STACK.value, confidence=LOW, method=METHOD_DEFAULT,
    )
