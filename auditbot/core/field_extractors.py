"""
Free-form Field Extractors

Extracts the free-form report filters from a request:
- audit name:        "audit Cyber Security", "'Cyber Security' audit"
- audit lead:        "audit lead is Jane Doe", "lider Ahmet Yılmaz"
- responsible:       "responsible john@corp.com", "sorumlu Ayşe", bare e-mails,
                     and a capitalized-name fallback
- C-level:           "c-level CFO", "'CFO' c-level"

Each extractor tries its patterns in order against the raw request and returns
the first trimmed capture, or None. Captures stop at clause connectors, at a
comma or semicolon, and at an "and" that opens another filter, so
"audit Cyber Security with Open status" and "lead Jane Doe and Critical risk"
yield "Cyber Security" and "Jane Doe".

The capitalized-name fallback for the responsible field is a heuristic and the
least reliable extractor here. It is best-effort only. It skips request verbs
and words inside another captured field, as well as a word after "from" or
next to a department noun.
"""
import re
import logging
from re import Pattern
from typing import Optional, Iterable

from auditbot.core.text_normalizer import normalize
from auditbot.core.report_semantics import vocabulary_words

logger = logging.getLogger(__name__)

_VALUE = r"""["']?([^"'\n]+)["']?"""
_QUOTED = r"""["']([^"'\n]+)["']"""
# Words after a field keyword that start a different phrase, not a value
_NOT_A_VALUE = r"(?![\s:=]*(?:years?|y[ıi]l[ıi]?|lead|leader|lider|actions?|findings?|reports?)\b)"

AUDIT_NAME_PATTERNS = (
    re.compile(rf"\b(?:audit|denetim)\s+{_NOT_A_VALUE}(?:(?:name|isim|ad[ıi])\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
    re.compile(rf"{_QUOTED}\s+(?:audit|denetim)\b", re.IGNORECASE),
    re.compile(rf"\b(?:audit|denetim)\s+{_QUOTED}", re.IGNORECASE),
)

AUDIT_LEAD_PATTERNS = (
    re.compile(rf"\b(?:audit\s+)?lead\b\s*(?:(?:is|name|ad[ıi])\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
    re.compile(rf"{_QUOTED}\s+(?:audit\s+)?lead\b", re.IGNORECASE),
    re.compile(rf"\b(?:denetim\s+)?lider\b\s*(?:(?:is|name|ad[ıi])\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
)

EMAIL_PATTERN = re.compile(r"\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b")

RESPONSIBLE_PATTERNS = (
    re.compile(rf"\b(?:action\s+)?responsible\b\s*(?:(?:is|email|isim)\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
    re.compile(rf"{_QUOTED}\s+(?:action\s+)?responsible\b", re.IGNORECASE),
    re.compile(rf"\b(?:sorumlu|responsible)\s+(?:(?:is|email|isim)\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
    EMAIL_PATTERN,
)

C_LEVEL_PATTERNS = (
    re.compile(rf"\b(?:c[-_ ]?level|clevel)\b\s*{_NOT_A_VALUE}(?:(?:is|email|isim)\b\s*)?[:=]?\s*{_VALUE}", re.IGNORECASE),
    re.compile(rf"{_QUOTED}\s+(?:c[-_ ]?level|clevel)\b", re.IGNORECASE),
    re.compile(r"\b(?:c[-_ ]?level|clevel)\b.*?([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", re.IGNORECASE),
)

# Capitalized words, optionally followed by a possessive ("John Doe's", "Ayşe'nin")
CAPITALIZED_NAME = re.compile(
    r"\b([A-ZÇĞİÖŞÜ][a-zçğıöşü]+(?:\s+[A-ZÇĞİÖŞÜ][a-zçğıöşü]+)*)(?:'s|'n[ıiuü]n|\s+(?:nun|nin|nın|nün))?"
)
# A name next to one of these belongs to another field
FIELD_KEYWORD_BEFORE = re.compile(
    r"""\b(?:audit|denetim|lead|lider|c[-_ ]?level|clevel|responsible|sorumlu)\s+(?:(?:is|name|isim|ad[ıi]|email)\s+)?[:=]?\s*["']?$""",
    re.IGNORECASE,
)
FIELD_KEYWORD_AFTER = re.compile(
    r"""^["']?\s+(?:audit\s+|denetim\s+|action\s+)?(?:lead|lider|audit|denetim|c[-_ ]?level|clevel|responsible|sorumlu)\b""",
    re.IGNORECASE,
)

CLAUSE_CONNECTOR = re.compile(
    r"\s+(?:with|where|which|for|from|since|during|ile|in\s+\d{4}|and\s+(?:with|status|risk))\b.*$",
    re.IGNORECASE,
)
CLAUSE_BREAK = re.compile(r"\s*[,;].*$")
AND_JOIN = re.compile(r"\s+(?:and|ve)\s+(\S+)", re.IGNORECASE)
TRAILING_YEAR = re.compile(r"\s+\d{4}\+?$")
# First words of a phrase that names another filter
FIELD_WORDS = frozenset({
    "audit", "denetim", "lead", "lider", "responsible", "sorumlu", "c-level",
    "clevel", "status", "durum", "risk", "year", "yil",
})
# A capitalized word here names an organisation unit, not a person
ORG_CONTEXT_BEFORE = re.compile(r"\b(?:from|department|dept|team|unit|division)\s+$", re.IGNORECASE)
ORG_NOUN_AFTER = re.compile(r"^\s+(?:department|dept|team|unit|division|birimi|departmani|departmanı)\b", re.IGNORECASE)
PREPOSITION_YEAR = re.compile(r"\b(?:from|in|for|since|during|için|içinde|yılında|yılı)\s+\d{4}\b", re.IGNORECASE)
BARE_YEAR = re.compile(r"^\d{4}$")

GENERIC_WORDS = frozenset({
    "action", "actions", "actionlar", "actionlarin", "there", "here",
})

# Words that start a request or name a report concept, never a person
NAME_STOPWORDS = frozenset({
    "show", "list", "get", "fetch", "export", "give", "find", "count", "display",
    "send", "need", "want", "bring", "download", "check", "tell", "see",
    "hi", "hello", "hey", "merhaba", "selam", "there",
    "how", "many", "what", "which", "who", "where", "when", "please", "pls",
    "can", "could", "would", "you", "me", "my", "i", "we", "the", "a", "an",
    "all", "any", "only", "just", "also", "same", "them", "those", "it",
    "and", "or", "with", "for", "from", "in", "of", "to", "by",
    "action", "actions", "finding", "findings", "report", "reports", "status",
    "risk", "level", "audit", "audits", "year", "years", "lead", "responsible",
    "goster", "listele", "aksiyon", "aksiyonlar", "bulgu", "bulgular", "tum",
    "tumu", "hepsi", "kac", "lutfen", "sadece", "denetim", "yil", "yili", "rapor",
})


def _cut_before_next_field(value: str) -> str:
    """Cut "Jane Doe and Critical risk" back to "Jane Doe"."""
    stop = FIELD_WORDS | vocabulary_words()
    for match in AND_JOIN.finditer(value):
        if normalize(match.group(1)).strip(",.;:") in stop:
            return value[:match.start()]
    return value


def _clean(value: str) -> Optional[str]:
    """Trim a raw capture to the value itself."""
    value = CLAUSE_CONNECTOR.sub("", value)
    value = CLAUSE_BREAK.sub("", value)
    value = _cut_before_next_field(value)
    value = value.strip().strip("\"'").strip()
    value = re.sub(r"[?.!,;:]+$", "", value).strip()
    value = TRAILING_YEAR.sub("", value)
    value = re.sub(r"\s+", " ", value)
    return value or None


def _first_capture(text: str, patterns: Iterable[Pattern]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1):
            value = _clean(match.group(1))
            if value:
                return value
    return None


def extract_audit_name(text: str) -> Optional[str]:
    """Extract an audit name ("audit X", "'X' audit", "denetim adı X")."""
    return _first_capture(text, AUDIT_NAME_PATTERNS)


def extract_audit_lead(text: str) -> Optional[str]:
    """Extract an audit lead ("audit lead X", "'X' lead", "lider X")."""
    return _first_capture(text, AUDIT_LEAD_PATTERNS)


def extract_c_level(text: str) -> Optional[str]:
    """Extract a C-level owner ("c-level X", "'X' c-level", "clevel ... x@corp.com")."""
    return _first_capture(text, C_LEVEL_PATTERNS)


def _is_excluded_responsible(value: str) -> bool:
    lowered = value.lower()
    if PREPOSITION_YEAR.search(value):
        return True
    if BARE_YEAR.match(value):
        return True
    if lowered in GENERIC_WORDS or normalize(value) in GENERIC_WORDS:
        return True
    if "how many" in lowered or "in there" in lowered or re.search(r"\bfrom\b", lowered):
        return True
    return False


def _strip_stopwords(candidate: str) -> Optional[str]:
    stop = NAME_STOPWORDS | vocabulary_words()
    words = candidate.split()
    while words and normalize(words[0]) in stop:
        words.pop(0)
    while words and normalize(words[-1]) in stop:
        words.pop()
    return " ".join(words) or None


def _capitalized_name(text: str) -> Optional[str]:
    taken = [v for v in (extract_audit_name(text), extract_audit_lead(text), extract_c_level(text)) if v]
    for match in CAPITALIZED_NAME.finditer(text):
        before, after = text[:match.start()], text[match.end(1):]
        if FIELD_KEYWORD_BEFORE.search(before) or FIELD_KEYWORD_AFTER.search(after):
            continue
        if ORG_CONTEXT_BEFORE.search(before) or ORG_NOUN_AFTER.search(after):
            continue
        candidate = _strip_stopwords(match.group(1))
        if not candidate or _is_excluded_responsible(candidate):
            continue
        # Part of an audit name like "IT Controls"
        if any(candidate in value for value in taken):
            continue
        logger.debug(f"Responsible name heuristic matched '{candidate}'")
        return candidate
    return None


def extract_responsible(text: str) -> Optional[str]:
    """
    Extract the action responsible, as an e-mail or a name.

    Keyword patterns come first, then a bare e-mail, then capitalized words as
    a last resort. Captures that look like date phrases ("from 2024"), bare
    years, or generic words are skipped.
    """
    for pattern in RESPONSIBLE_PATTERNS:
        match = pattern.search(text)
        if not match or not match.group(1):
            continue
        value = _clean(match.group(1))
        if value and not _is_excluded_responsible(value):
            return value
    return _capitalized_name(text)
