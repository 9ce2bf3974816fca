"""
Query Classifier

Classifies a report request by intent before and after filter extraction:
- Follow-up requests ("export them", "same but overdue") reuse the previous
  turn's filters
- Count requests ("how many ...", "kaç tane ...") ask for a number instead of a file

Works on normalized text, so Turkish forms are written without diacritics.
"""
import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from auditbot.core.text_normalizer import normalize

logger = logging.getLogger(__name__)


class RequestIntent(Enum):
    """What the user wants done with the filtered actions."""
    EXPORT = "export"
    COUNT = "count"


@dataclass
class ClassificationResult:
    """Result of request classification."""
    intent: RequestIntent
    is_follow_up: bool
    is_simple_export: bool
    notes: List[str] = field(default_factory=list)


class QueryClassifier:
    """
    Intent checks over a single request.

    This is a THIN layer of pattern checks; extraction of the filters
    themselves happens in the field extractors.
    """

    # Words that point back at the previous result
    REFERENCE_PATTERNS = [
        r"\b(them|those|it|same|also|too|as well)\b",
        r"\b(bunlari|onlari|ayni|da|de)\b",
        r"\bexport\s+them\b",
        r"\b(show|list|get|fetch)\s+them\b",
    ]

    # A bare export with nothing else in it
    SIMPLE_EXPORT_PATTERNS = [
        r"^export$",
        r"^export\s+(pls|please|lutfen)$",
        r"^export\s+(them|those|it|all)(\s+(pls|please|lutfen))?$",
        r"^(pls|please|lutfen)\s+export$",
    ]

    COUNT_PATTERNS = [
        r"\b(how many|count|number|kac tane|kac|sayi|sayisi)\b",
        r"\b(show|list|goster)\b.*\b(how many|count|kac)\b",
    ]

    _TRAILING_PUNCTUATION = re.compile(r"[\s!.?,]+$")

    def has_reference_words(self, text: str) -> bool:
        """Check whether the request refers back to the previous result."""
        normalized = normalize(text)
        return any(re.search(p, normalized) for p in self.REFERENCE_PATTERNS)

    def is_simple_export_request(self, text: str) -> bool:
        """Check whether the request is only "export" with optional politeness or a pronoun."""
        normalized = self._TRAILING_PUNCTUATION.sub("", normalize(text))
        normalized = re.sub(r"\s+", " ", normalized)
        return any(re.match(p, normalized) for p in self.SIMPLE_EXPORT_PATTERNS)

    def is_count_request(self, text: str) -> bool:
        """Check whether the request asks for a count rather than a report."""
        normalized = normalize(text)
        return any(re.search(p, normalized) for p in self.COUNT_PATTERNS)

    def classify(self, text: str) -> ClassificationResult:
        """
        Classify a request.

        Args:
            text: The raw request

        Returns:
            ClassificationResult with the intent and follow-up flags
        """
        notes = []
        is_count = self.is_count_request(text)
        is_follow_up = self.has_reference_words(text)
        is_simple_export = self.is_simple_export_request(text)

        if is_follow_up:
            notes.append("Detected reference to previous result")
        if is_simple_export:
            notes.append("Detected bare export request")

        return ClassificationResult(
            intent=RequestIntent.COUNT if is_count else RequestIntent.EXPORT,
            is_follow_up=is_follow_up,
            is_simple_export=is_simple_export,
            notes=notes,
        )


_classifier: Optional[QueryClassifier] = None


def get_query_classifier() -> QueryClassifier:
    """Get the shared query classifier instance."""
    global _classifier
    if _classifier is None:
        _classifier = QueryClassifier()
    return _classifier


def has_reference_words(text: str) -> bool:
    return get_query_classifier().has_reference_words(text)


def is_simple_export_request(text: str) -> bool:
    return get_query_classifier().is_simple_export_request(text)


def is_count_request(text: str) -> bool:
    return get_query_classifier().is_count_request(text)
