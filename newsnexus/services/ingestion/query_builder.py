"""Google News RSS query construction.

Keyword inputs are comma-separated strings. Terms containing spaces are
quoted so Google treats them as phrases; OR terms are grouped when mixed
with AND terms; a ``when:<N>d`` window is always appended.
"""

import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlencode

DEFAULT_TIME_RANGE = "180d"

_TIME_RANGE_PATTERN = re.compile(r"^\d+d$")


@dataclass
class GoogleRssQuery:
    """Result of building a Google News RSS query."""

    query: str
    and_string: Optional[str]
    or_string: Optional[str]
    time_range: str
    time_range_invalid: bool


def normalize_time_range(value: Optional[str]) -> tuple[str, bool]:
    """Validate a ``<N>d`` time range.

    Returns:
        (time_range, invalid) where an empty value silently falls back to the
        default and a malformed value falls back with ``invalid=True``
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return DEFAULT_TIME_RANGE, False
    if not _TIME_RANGE_PATTERN.match(trimmed) or int(trimmed[:-1]) <= 0:
        return DEFAULT_TIME_RANGE, True
    return trimmed, False


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [term.strip() for term in value.split(",") if term.strip()]


def normalize_term(term: str) -> str:
    trimmed = term.strip()
    if not trimmed:
        return ""
    quoted = (trimmed.startswith('"') and trimmed.endswith('"')) or (
        trimmed.startswith("'") and trimmed.endswith("'")
    )
    if quoted:
        return trimmed
    if " " in trimmed:
        return f'"{trimmed}"'
    return trimmed


def combine_for_db(keywords: Optional[str], exact_phrases: Optional[str]) -> Optional[str]:
    """Join keyword and phrase lists into the string stored on the request row."""
    parts = split_csv(keywords) + split_csv(exact_phrases)
    if not parts:
        return None
    return ", ".join(parts)


def build_query(
    and_keywords: Optional[str] = None,
    and_exact_phrases: Optional[str] = None,
    or_keywords: Optional[str] = None,
    or_exact_phrases: Optional[str] = None,
    time_range: Optional[str] = None,
) -> GoogleRssQuery:
    """Build the Google News search expression.

    Example:
        and_keywords="fire, recall", or_keywords="Ohio, New York", time_range="7d"
        gives ``fire recall (Ohio OR "New York") when:7d``
    """
    and_terms = [
        t
        for t in (normalize_term(x) for x in split_csv(and_keywords) + split_csv(and_exact_phrases))
        if t
    ]
    or_terms = [
        t
        for t in (normalize_term(x) for x in split_csv(or_keywords) + split_csv(or_exact_phrases))
        if t
    ]

    parts: List[str] = []
    if and_terms:
        parts.append(" ".join(and_terms))
    if or_terms:
        or_expression = " OR ".join(or_terms)
        if and_terms and len(or_terms) > 1:
            or_expression = f"({or_expression})"
        parts.append(or_expression)

    resolved_range, invalid = normalize_time_range(time_range)
    parts.append(f"when:{resolved_range}")

    return GoogleRssQuery(
        query=" ".join(parts).strip(),
        and_string=combine_for_db(and_keywords, and_exact_phrases),
        or_string=combine_for_db(or_keywords, or_exact_phrases),
        time_range=resolved_range,
        time_range_invalid=invalid,
    )


def build_rss_url(
    query: str,
    base_url: str = "https://news.google.com/rss/search",
    hl: str = "en-US",
    gl: str = "US",
    ceid: str = "US:en",
) -> str:
    """Build the full Google News RSS search URL."""
    params = urlencode({"q": query, "hl": hl, "gl": gl, "ceid": ceid})
    return f"{base_url}?{params}"
