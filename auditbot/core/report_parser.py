"""
Report Request Parser

Turns a free-text chat request (English or Turkish) into structured filters
for the audit action report.

Pipeline for one request:
1. Casual check: greetings, thanks, farewells and compliments get a canned
   reply and no filters
2. Context carry-over: "export them", "same but overdue" start from the
   previous turn's filters
3. Field extraction: status, risk level, audit name, audit lead,
   responsible, C-level, audit year
4. Vocabulary validation against the values present in the data
5. Result assembly, including the count-vs-export intent

The parser is a pure function of (request, available options, previous
filters). It holds no state between calls and never raises; a request it
cannot understand yields success=False with usage guidance.
"""
import logging
import random
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Any, Union

from auditbot.core.text_normalizer import normalize
from auditbot.core.conversation import classify_casual
from auditbot.core.report_semantics import extract_status, extract_risk_level
from auditbot.core.field_extractors import (
    extract_audit_name,
    extract_audit_lead,
    extract_responsible,
    extract_c_level,
)
from auditbot.core.audit_year import extract_audit_year
from auditbot.core.query_classifier import get_query_classifier
from auditbot.core.vocabulary import AvailableOptions, VocabularyValidator
from auditbot.core.error_taxonomy import USAGE_GUIDANCE

logger = logging.getLogger(__name__)

# ParsedFilters attribute -> wire key
FILTER_KEYS = {
    "status": "status",
    "risk_level": "riskLevel",
    "audit_name": "auditName",
    "audit_lead": "auditLead",
    "responsible_email": "responsibleEmail",
    "c_level": "cLevel",
    "audit_year": "auditYear",
}


@dataclass
class ParsedFilters:
    """
    Structured filters for the action report.

    Every set field holds a non-empty trimmed string. Empty strings are
    stored as None and omitted from to_dict().
    """
    status: Optional[str] = None
    risk_level: Optional[str] = None
    audit_name: Optional[str] = None
    audit_lead: Optional[str] = None
    responsible_email: Optional[str] = None
    c_level: Optional[str] = None
    audit_year: Optional[str] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                value = str(value).strip()
                setattr(self, f.name, value or None)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the camelCase mapping, omitting unset fields."""
        result = {}
        for attr, key in FILTER_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ParsedFilters":
        """Build from a mapping with camelCase or snake_case keys."""
        if not data:
            return cls()
        kwargs = {}
        for attr, key in FILTER_KEYS.items():
            value = data.get(key, data.get(attr))
            if value is not None:
                kwargs[attr] = str(value)
        return cls(**kwargs)

    def is_empty(self) -> bool:
        return not self.to_dict()

    def merge(self, other: "ParsedFilters") -> "ParsedFilters":
        """Return a copy with every field set on `other` overriding this one."""
        merged = self.to_dict()
        merged.update(other.to_dict())
        return ParsedFilters.from_dict(merged)


@dataclass
class ParseResult:
    """Outcome of parsing one request."""
    success: bool
    filters: ParsedFilters = field(default_factory=ParsedFilters)
    message: Optional[str] = None
    error: Optional[str] = None
    is_count_request: Optional[bool] = None

    @property
    def is_casual(self) -> bool:
        return self.message is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "filters": self.filters.to_dict(),
        }
        if self.message is not None:
            result["message"] = self.message
        if self.error is not None:
            result["error"] = self.error
        if self.is_count_request is not None:
            result["isCountRequest"] = self.is_count_request
        return result


class ReportRequestParser:
    """
    Rule-based request parser.

    Usage:
        parser = ReportRequestParser()
        result = parser.parse("How many actions with Critical risk?")
        result.filters.risk_level   # "Critical"
        result.is_count_request     # True
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize parser.

        Args:
            rng: Random generator for casual replies (module default if None)
        """
        self.rng = rng
        self.classifier = get_query_classifier()

    def parse(
        self,
        request: str,
        available_options: Union[AvailableOptions, Dict[str, Any], None] = None,
        previous_filters: Union[ParsedFilters, Dict[str, Any], None] = None,
    ) -> ParseResult:
        """
        Parse a request into report filters.

        Args:
            request: The user's free-text request
            available_options: Known values per field for validation
            previous_filters: Filters from the previous successful turn

        Returns:
            ParseResult
        """
        if not request or not request.strip():
            logger.warning("Empty report request")
            return ParseResult(success=False, error=USAGE_GUIDANCE)

        casual = classify_casual(request, self.rng)
        if casual.is_casual:
            return ParseResult(
                success=True,
                message=casual.response,
                is_count_request=False,
            )

        if not isinstance(available_options, AvailableOptions):
            available_options = AvailableOptions.from_dict(available_options)
        if not isinstance(previous_filters, ParsedFilters):
            previous_filters = ParsedFilters.from_dict(previous_filters)

        working = ParsedFilters()
        if not previous_filters.is_empty() and (
            self.classifier.has_reference_words(request)
            or self.classifier.is_simple_export_request(request)
        ):
            logger.info(f"Carrying over previous filters: {previous_filters.to_dict()}")
            working = ParsedFilters.from_dict(previous_filters.to_dict())

        detected = self._extract(request, VocabularyValidator(available_options))
        filters = working.merge(detected)

        if filters.is_empty():
            logger.warning(f"Could not extract filters from request: '{request}'")
            return ParseResult(success=False, error=USAGE_GUIDANCE)

        is_count = self.classifier.is_count_request(request)
        logger.info(f"Parsed filters: {filters.to_dict()} (count={is_count})")
        return ParseResult(success=True, filters=filters, is_count_request=is_count)

    def _extract(self, request: str, validator: VocabularyValidator) -> ParsedFilters:
        """Run every extractor and keep the candidates the vocabulary accepts."""
        candidates = {
            "status": extract_status(request),
            "riskLevel": extract_risk_level(request),
            "auditName": extract_audit_name(request),
            "auditLead": extract_audit_lead(request),
            "responsibleEmail": extract_responsible(request),
            "cLevel": extract_c_level(request),
        }
        logger.debug(f"Extracted candidates for '{normalize(request)}': {candidates}")

        accepted = {}
        for key, candidate in candidates.items():
            value = validator.validate(key, candidate)
            if value:
                accepted[key] = value

        # No vocabulary list exists for the year
        audit_year = extract_audit_year(request)
        if audit_year:
            accepted["auditYear"] = audit_year

        return ParsedFilters.from_dict(accepted)


_report_parser: Optional[ReportRequestParser] = None


def get_report_parser() -> ReportRequestParser:
    """Get the shared report parser instance."""
    global _report_parser
    if _report_parser is None:
        _report_parser = ReportRequestParser()
    return _report_parser


def parse_report_request(
    request: str,
    available_options: Union[AvailableOptions, Dict[str, Any], None] = None,
    previous_filters: Union[ParsedFilters, Dict[str, Any], None] = None,
) -> ParseResult:
    """Parse a request with the shared parser. See ReportRequestParser.parse."""
    return get_report_parser().parse(request, available_options, previous_filters)
