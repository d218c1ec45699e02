"""Rule-based intent classification for chat messages.

Classifies a raw message as a recommendation request, a directory search or
general conversation using fixed keyword tables. Pure functions only, no I/O.

Precedence:
1. Recommendation keywords present, or a category mentioned without an
   explicit search keyword -> recommendation (category from the direct match,
   else inferred from context terms, else "consulting").
2. Search keywords present, or a category mentioned -> search (term from the
   category, else the first quoted phrase, else capitalized words, else the
   raw message).
3. Otherwise -> general.
"""

import re
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Union

from vira.core.constants import (
    DEFAULT_IMPLIED_CATEGORY,
    IMPLIED_CATEGORY_RULES,
    INTENT_GENERAL,
    INTENT_RECOMMENDATION,
    INTENT_SEARCH,
    RECOMMENDATION_KEYWORDS,
    SEARCH_KEYWORDS,
    SERVICE_CATEGORIES,
)

_QUOTED_RE = re.compile(r'"([^"]+)"')
_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+\b")


@dataclass(frozen=True)
class RecommendationIntent:
    """The user asks which vendors to hire for a category."""

    category: str
    scope_text: str
    type: ClassVar[str] = INTENT_RECOMMENDATION


@dataclass(frozen=True)
class SearchIntent:
    """The user wants to browse the vendor directory."""

    search_term: str
    type: ClassVar[str] = INTENT_SEARCH


@dataclass(frozen=True)
class GeneralIntent:
    """Anything else."""

    type: ClassVar[str] = INTENT_GENERAL


Intent = Union[RecommendationIntent, SearchIntent, GeneralIntent]


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(phrase in text for phrase in phrases)


def detect_category(text: str) -> Optional[str]:
    """Return the first service category mentioned in lower-cased text."""
    for category in SERVICE_CATEGORIES:
        if category in text:
            return category
    return None


def infer_implied_category(text: str) -> str:
    """Map context terms ("writer", "website", "app", ...) to a category."""
    lowered = text.lower()
    for terms, category in IMPLIED_CATEGORY_RULES:
        if _contains_any(lowered, terms):
            return category
    return DEFAULT_IMPLIED_CATEGORY


def extract_search_term(message: str) -> str:
    """Extract a search term: quoted phrase, capitalized words, or the message."""
    quoted = _QUOTED_RE.search(message)
    if quoted:
        return quoted.group(1)

    capitalized = _CAPITALIZED_RE.findall(message)
    if capitalized:
        return " ".join(capitalized)

    return message


def classify_intent(message: str) -> Intent:
    """Classify a chat message.

    Args:
        message: Raw chat message

    Returns:
        RecommendationIntent, SearchIntent or GeneralIntent
    """
    text = message.lower()

    has_recommendation = _contains_any(text, RECOMMENDATION_KEYWORDS)
    has_search = _contains_any(text, SEARCH_KEYWORDS)
    category = detect_category(text)

    if has_recommendation or (category and not has_search):
        return RecommendationIntent(
            category=category or infer_implied_category(text),
            scope_text=message,
        )

    if has_search or category:
        return SearchIntent(search_term=category or extract_search_term(message))

    return GeneralIntent()
