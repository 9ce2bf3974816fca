"""
Audit Year Resolution

Resolves the audit year a request refers to. The report dashboard defaults to
"2024 and later", so year phrases are the most ambiguous part of a request:

- "from 2024"       -> "2024"   (a preposition pins the exact year)
- "only 2025"       -> "2025"   (an explicit qualifier pins the exact year)
- "audit year all"  -> "all"
- "year 2025"       -> "2024+"  (bare years from 2024 on collapse to the open range)
- "year 2023"       -> "2023"
- "2024+"           -> "2024+"

Rules are checked in a strict order and the first match wins. Moving the
prepositional or qualifier rules after the bare-year rule would turn
"from 2024" into "2024+".

All matching runs on normalized text, so Turkish keywords are written here
without diacritics ("için" -> "icin", "yılı" -> "yili").
"""
import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from auditbot.core.text_normalizer import normalize

logger = logging.getLogger(__name__)

RANGE_START_YEAR = 2024
RANGE_TOKEN = "2024+"
ALL_YEARS_TOKEN = "all"


class YearRule(Enum):
    """Which resolution rule produced the audit year."""
    PREPOSITION = "preposition"
    QUALIFIER = "qualifier"
    ALL_YEARS = "all_years"
    YEAR_KEYWORD = "year_keyword"
    RANGE_LITERAL = "range_literal"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class YearMatch:
    """A resolved audit year and the rule that produced it."""
    value: str
    rule: YearRule


_PREPOSITIONS = r"(?:from|in|for|since|during|icin|icinde|yilinda|yili)"
_QUALIFIERS = r"(?:just|only|sadece)"
_YEAR_WORDS = r"(?:years?|yil|yili)"
_ALL_WORDS = r"(?:all|tumu|hepsi|tum)"

PREPOSITION_YEAR = re.compile(rf"\b{_PREPOSITIONS}\s+(\d{{4}})\b")
PREPOSITION_YEAR_REVERSED = re.compile(rf"\b(\d{{4}})\s+{_PREPOSITIONS}\b")
QUALIFIED_YEAR = re.compile(rf"\b{_QUALIFIERS}\s+(?:{_YEAR_WORDS}\s*)?(\d{{4}})\b")
YEAR_IS_ALL = re.compile(rf"\b(?:audit\s+)?{_YEAR_WORDS}\s+(?:is\s+)?{_ALL_WORDS}\b")
ALL_WORD = re.compile(rf"\b{_ALL_WORDS}\b")
ALL_NEAR_YEAR = re.compile(
    rf"\b(?:{_YEAR_WORDS}|audit)\b.*?\b{_ALL_WORDS}\b|\b{_ALL_WORDS}\b.*?\b(?:{_YEAR_WORDS}|audit)\b"
)
# "all" that modifies something other than the year
ALL_NOT_ABOUT_YEAR = re.compile(
    rf"\ball\s+(?:actions?|results?|findings?)\b|\b(?:export|show)\s+all\b(?!\s+{_YEAR_WORDS}\b)"
)
YEAR_KEYWORD_YEAR = re.compile(
    rf"\b(?:audit\s+)?{_YEAR_WORDS}\s*(?:is\s+)?(?:{_QUALIFIERS}\s*)?(?:=|:)?\s*(\d{{4}})\b"
)
QUALIFIER_WORD = re.compile(rf"\b{_QUALIFIERS}\b")
RANGE_LITERAL = re.compile(r"\b2024\s*(?:\+|ve\s+sonrasi\b)")
STANDALONE_YEAR = re.compile(r"\b(20\d{2})\b")
YEAR_CONTEXT_WORD = re.compile(rf"\b(?:{_YEAR_WORDS}|audit|{_QUALIFIERS}|{_PREPOSITIONS})\b")


def collapse_to_range(year: str) -> str:
    """Years from the range start on collapse to the open range token."""
    return RANGE_TOKEN if int(year) >= RANGE_START_YEAR else year


class AuditYearResolver:
    """
    Ordered rule set for audit year phrases.

    Usage:
        resolver = AuditYearResolver()
        match = resolver.resolve("Completed actions for year 2023")
        match.value  # "2023"
    """

    def resolve(self, text: str) -> Optional[YearMatch]:
        normalized = normalize(text)
        if not normalized:
            return None

        for rule in (
            self._preposition_year,
            self._qualified_year,
            self._all_years,
            self._year_keyword,
            self._range_literal,
            self._standalone_year,
        ):
            match = rule(normalized)
            if match:
                logger.debug(f"Audit year '{match.value}' via {match.rule.value} rule")
                return match
        return None

    def _preposition_year(self, text: str) -> Optional[YearMatch]:
        # Always exact, even for years >= 2024
        for pattern in (PREPOSITION_YEAR, PREPOSITION_YEAR_REVERSED):
            m = pattern.search(text)
            if m:
                return YearMatch(m.group(1), YearRule.PREPOSITION)
        return None

    def _qualified_year(self, text: str) -> Optional[YearMatch]:
        m = QUALIFIED_YEAR.search(text)
        if m:
            return YearMatch(m.group(1), YearRule.QUALIFIER)
        return None

    def _all_years(self, text: str) -> Optional[YearMatch]:
        if YEAR_IS_ALL.search(text):
            return YearMatch(ALL_YEARS_TOKEN, YearRule.ALL_YEARS)
        if not ALL_WORD.search(text) or ALL_NOT_ABOUT_YEAR.search(text):
            return None
        if ALL_NEAR_YEAR.search(text):
            return YearMatch(ALL_YEARS_TOKEN, YearRule.ALL_YEARS)
        return None

    def _year_keyword(self, text: str) -> Optional[YearMatch]:
        m = YEAR_KEYWORD_YEAR.search(text)
        if not m:
            return None
        year = m.group(1)
        if QUALIFIER_WORD.search(text[:m.start()]):
            return YearMatch(year, YearRule.YEAR_KEYWORD)
        return YearMatch(collapse_to_range(year), YearRule.YEAR_KEYWORD)

    def _range_literal(self, text: str) -> Optional[YearMatch]:
        if RANGE_LITERAL.search(text):
            return YearMatch(RANGE_TOKEN, YearRule.RANGE_LITERAL)
        return None

    def _standalone_year(self, text: str) -> Optional[YearMatch]:
        m = STANDALONE_YEAR.search(text)
        if not m or not YEAR_CONTEXT_WORD.search(text):
            return None
        year = m.group(1)
        if QUALIFIER_WORD.search(text):
            return YearMatch(year, YearRule.STANDALONE)
        return YearMatch(collapse_to_range(year), YearRule.STANDALONE)


_resolver = AuditYearResolver()


def extract_audit_year(text: str) -> Optional[str]:
    """Resolve the audit year of a request: "2024+", "all", a 4-digit year, or None."""
    match = _resolver.resolve(text)
    return match.value if match else None


# =============================================================================
# YEAR FILTER MATCHING
# =============================================================================
# Applies a resolved audit year to the year value stored on an action. Stored
# values are not always clean: "2023", 2023, "2023-2024" all occur.
# =============================================================================

_YEAR_IN_VALUE = re.compile(r"\b(\d{4})\b")


def first_year(raw_value) -> Optional[int]:
    """First 4-digit year found in a stored audit year value."""
    if raw_value is None:
        return None
    m = _YEAR_IN_VALUE.search(str(raw_value))
    return int(m.group(1)) if m else None


def year_filter_matches(audit_year: str, raw_value) -> bool:
    """
    Check whether an action's stored audit year satisfies the year filter.

    Args:
        audit_year: "2024+", "all", or a specific year like "2023"
        raw_value: The action's stored audit year (str, int, or None)
    """
    if audit_year == ALL_YEARS_TOKEN:
        return True
    if raw_value is None or str(raw_value).strip() in ("", "nan", "None"):
        return False

    if audit_year == RANGE_TOKEN:
        # "2023-2024" reaches into the range
        return any(int(y) >= RANGE_START_YEAR for y in _YEAR_IN_VALUE.findall(str(raw_value)))

    year = first_year(raw_value)
    if year is not None:
        return str(year) == audit_year
    return audit_year in str(raw_value)
