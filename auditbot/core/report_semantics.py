"""
Report Semantics Module

Bilingual (English / Turkish) synonym tables that map surface forms in a user's
request to the canonical values used by the audit action report.

Key Concepts:
- Status terms: "açık", "open" -> Open; "gecikmiş", "overdue" -> Overdue
- Risk level terms: "kritik", "critical" -> Critical; "düşük", "low" -> Low
- Lookup is substring based on normalized text, scanned in table order

Table order encodes precedence. When two surface forms could both appear in a
request, the one listed first wins, so list specific phrases before generic ones.
"""
import logging
from enum import Enum
from typing import Optional, Tuple, FrozenSet

from auditbot.core.text_normalizer import normalize

logger = logging.getLogger(__name__)


class ActionStatus(Enum):
    """Canonical action status labels."""
    OPEN = "Open"
    OVERDUE = "Overdue"
    COMPLETED = "Completed"
    RISK_ACCEPTED = "Risk Accepted"


class RiskLevel(Enum):
    """Canonical risk level labels."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNASSIGNED = "Unassigned"


# =============================================================================
# SYNONYM TABLES
# =============================================================================
# (surface form, canonical value) pairs. Surface forms are written the way
# users type them; they are normalized once at import time.
# =============================================================================

STATUS_SYNONYMS: Tuple[Tuple[str, ActionStatus], ...] = (
    ("açık", ActionStatus.OPEN),
    ("open", ActionStatus.OPEN),
    ("gecikmiş", ActionStatus.OVERDUE),
    ("overdue", ActionStatus.OVERDUE),
    ("tamamlanmış", ActionStatus.COMPLETED),
    ("completed", ActionStatus.COMPLETED),
    ("tamamlandı", ActionStatus.COMPLETED),
    ("risk kabul", ActionStatus.RISK_ACCEPTED),
    ("risk accepted", ActionStatus.RISK_ACCEPTED),
    ("risk kabul edildi", ActionStatus.RISK_ACCEPTED),
)

RISK_LEVEL_SYNONYMS: Tuple[Tuple[str, RiskLevel], ...] = (
    ("kritik", RiskLevel.CRITICAL),
    ("critical", RiskLevel.CRITICAL),
    ("yüksek", RiskLevel.HIGH),
    ("high", RiskLevel.HIGH),
    ("orta", RiskLevel.MEDIUM),
    ("medium", RiskLevel.MEDIUM),
    ("düşük", RiskLevel.LOW),
    ("low", RiskLevel.LOW),
    ("atanmamış", RiskLevel.UNASSIGNED),
    ("unassigned", RiskLevel.UNASSIGNED),
)

_NORMALIZED_STATUS = tuple((normalize(term), value) for term, value in STATUS_SYNONYMS)
_NORMALIZED_RISK = tuple((normalize(term), value) for term, value in RISK_LEVEL_SYNONYMS)


def _lookup(text: str, table: Tuple[Tuple[str, Enum], ...]) -> Optional[Enum]:
    normalized = normalize(text)
    if not normalized:
        return None
    for key, value in table:
        if key in normalized:
            return value
    return None


def extract_status(text: str) -> Optional[str]:
    """
    Extract the canonical action status from a request.

    Returns:
        "Open", "Overdue", "Completed", "Risk Accepted", or None
    """
    match = _lookup(text, _NORMALIZED_STATUS)
    if match:
        logger.debug(f"Semantic: status -> {match.value}")
        return match.value
    return None


def extract_risk_level(text: str) -> Optional[str]:
    """
    Extract the canonical risk level from a request.

    Returns:
        "Critical", "High", "Medium", "Low", "Unassigned", or None
    """
    match = _lookup(text, _NORMALIZED_RISK)
    if match:
        logger.debug(f"Semantic: risk level -> {match.value}")
        return match.value
    return None


def is_status_value(value: str) -> bool:
    """Check whether a string is one of the canonical status labels."""
    return value in {s.value for s in ActionStatus}


def is_risk_level_value(value: str) -> bool:
    """Check whether a string is one of the canonical risk level labels."""
    return value in {r.value for r in RiskLevel}


def vocabulary_words() -> FrozenSet[str]:
    """
    All single normalized words that belong to the status / risk vocabulary.

    Used by the free-form extractors so that a capitalized "Critical" or
    "Overdue" is never mistaken for a person's name.
    """
    words = set()
    for key, value in _NORMALIZED_STATUS + _NORMALIZED_RISK:
        words.update(key.split())
        words.update(normalize(value.value).split())
    return frozenset(words)
