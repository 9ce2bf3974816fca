"""
Conversational Intent Classifier

Recognizes casual utterances (greetings, thanks, farewells, compliments) so
they are answered with a canned reply instead of being parsed for filters.
"thanks!" must never turn into a status or a year.

Groups are checked in order: greeting, thanks, farewell, compliment. Patterns
run on normalized text, so Turkish forms are written without diacritics
("teşekkürler" -> "tesekkurler").
"""
import re
import random
import logging
from dataclasses import dataclass
from enum import Enum
from re import Pattern
from typing import Optional, Tuple

from auditbot.core.text_normalizer import normalize
from auditbot.core.responses import (
    GREETING_REPLIES,
    THANKS_REPLIES,
    FAREWELL_REPLIES,
    COMPLIMENT_REPLIES,
    pick_reply,
)

logger = logging.getLogger(__name__)


class CasualCategory(Enum):
    """Kinds of casual utterance."""
    GREETING = "greeting"
    THANKS = "thanks"
    FAREWELL = "farewell"
    COMPLIMENT = "compliment"


@dataclass
class CasualCheck:
    """Result of the casual-utterance check."""
    is_casual: bool
    response: Optional[str] = None
    category: Optional[CasualCategory] = None


def _compile(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


CASUAL_PATTERNS = (
    (CasualCategory.GREETING, _compile(
        r"^(?:hi|hello|hey|merhaba|selam|gunaydin|iyi gunler|good morning|good afternoon|good evening)$",
        r"^(?:hi|hello|hey|merhaba|selam)\s+(?:there|auditbot|bot)[\s!.,]*$",
        r"\bhow\s+are\s+you\b",
        r"\bhow\s+do\s+you\s+do\b",
        r"\bnasilsin(?:iz)?\b",
    ), GREETING_REPLIES),
    (CasualCategory.THANKS, _compile(
        r"^(?:thanks|thank you|tesekkur|tesekkurler|tesekkur ederim|sag ol|sagol)$",
        r"^(?:thanks|thank you|tesekkur|tesekkurler|tesekkur ederim)\s+(?:a lot|so much|very much|cok)[\s!.,]*$",
        r"^ty$",
        r"^thx$",
    ), THANKS_REPLIES),
    (CasualCategory.FAREWELL, _compile(
        r"^(?:bye|goodbye|see you|gorusuruz|hosca kal|iyi gunler)$",
        r"^(?:bye|goodbye|see you|gorusuruz)\s+(?:then|later|soon)[\s!.,]*$",
    ), FAREWELL_REPLIES),
    (CasualCategory.COMPLIMENT, _compile(
        r"^(?:good|great|nice|awesome|cool|harika|super|mukemmel)\s+(?:job|work|bot|assistant)[\s!.,]*$",
        r"\byou(?:\s+are|'re)\s+(?:great|awesome|cool|amazing|wonderful|harika|super)\b",
    ), COMPLIMENT_REPLIES),
)

# "hello!" and "thanks :)" should match the anchored patterns; "hi there, show
# overdue actions" must not, so a greeting in front of a request is parsed
_TRAILING_NOISE = re.compile(r"[\s!.?,:;)(]+$")


def classify_casual(text: str, rng: Optional[random.Random] = None) -> CasualCheck:
    """
    Check whether a request is casual conversation.

    Args:
        text: The raw request
        rng: Optional random generator for the reply choice

    Returns:
        CasualCheck with is_casual and, when casual, a reply from the category's pool
    """
    cleaned = _TRAILING_NOISE.sub("", normalize(text))
    if not cleaned:
        return CasualCheck(is_casual=False)

    for category, patterns, replies in CASUAL_PATTERNS:
        if any(p.search(cleaned) for p in patterns):
            logger.debug(f"Casual utterance detected: {category.value}")
            return CasualCheck(
                is_casual=True,
                response=pick_reply(replies, rng),
                category=category,
            )

    return CasualCheck(is_casual=False)
