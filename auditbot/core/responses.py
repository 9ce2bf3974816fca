"""
Reply Catalogue

Fixed reply pools for the chat assistant and the seedable picker that chooses
among them. Variety is cosmetic; pass a seeded random.Random (or set
REPLY_SEED) when output has to be reproducible.

Two kinds of replies live here:
- Casual replies, returned by the parser for greetings, thanks, etc.
- Result replies, composed by the caller once a filter has been executed
  (the parser never fabricates counts).
"""
import random
import logging
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

GREETING_REPLIES = (
    "Hello! 👋 How can I help you with your audit reports today?",
    "Hi there! 😊 Ready to generate some reports?",
    "Hey! I'm doing great, thanks for asking! What can I do for you?",
    "Good morning! ☀️ How can I assist you today?",
    "Hello! I'm here and ready to help! 🚀",
)

THANKS_REPLIES = (
    "You're welcome! 😊 Happy to help!",
    "Anytime! Let me know if you need anything else! ✨",
    "My pleasure! Feel free to ask for more reports! 🎉",
    "Glad I could help! 🚀",
    "You're very welcome! 😄",
)

FAREWELL_REPLIES = (
    "See you later! 👋 Have a great day!",
    "Goodbye! Take care! 😊",
    "Bye! Come back anytime you need reports! ✨",
    "See you soon! 🚀",
)

COMPLIMENT_REPLIES = (
    "Aww, thanks! 😊 I'm here to help anytime!",
    "You're too kind! 🎉 Let me know if you need anything else!",
    "Thank you! That means a lot! ✨",
    "Much appreciated! 😄 Happy to be of service!",
)

EXPORT_REPLIES = (
    "Perfect! Your report is ready and downloading now... 🚀",
    "All set! I've prepared your report and it's downloading... ✨",
    "Done! Your report is ready. Check your downloads! 📥",
    "Great! I've generated your report and it's on its way... 🎉",
    "Excellent! Your report is ready and downloading... 📊",
)

NO_MATCH_REPLY = "Hmm, I couldn't find any actions matching your request. Try different filters! 🤔"
EXPORT_FAILED_REPLY = "Oops! Something went wrong while generating your report. Please try again."

_default_rng = random.Random()


def seed_replies(seed: Optional[int]):
    """Re-seed the module-level picker (None reseeds from system entropy)."""
    _default_rng.seed(seed)


def pick_reply(pool: Sequence[str], rng: Optional[random.Random] = None) -> str:
    """Pick one reply from a pool."""
    return (rng or _default_rng).choice(pool)


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def _size_comment(count: int) -> str:
    if count == 0:
        return "No matches this time."
    if count < 10:
        return "That's a small batch!"
    if count < 50:
        return "Nice collection!"
    return "That's quite a lot!"


def count_replies(count: int) -> tuple:
    """All count replies for a given number of matching actions."""
    s = _plural(count)
    return (
        f"I found **{count}** action{s} matching your request! 🎯",
        f"There {'is' if count == 1 else 'are'} **{count}** action{s} in total. 📊",
        f"Great! I counted **{count}** action{s} for you. ✨",
        f"Found **{count}** action{s}! {_size_comment(count)} 🚀",
    )


def export_replies_with_count(count: int) -> tuple:
    """All export replies that mention how many actions went into the report."""
    s = _plural(count)
    return (
        f"Perfect! I've prepared your report with {count} action{s} and it's downloading now... 🚀",
        f"All set! Your report with {count} action{s} is ready. Check your downloads! 📥",
        f"Done! I've generated your report ({count} action{s}) and it's on its way... ✨",
        f"Great! Your report is ready with {count} action{s}. Downloading now... 🎉",
        f"Excellent! I've prepared your report ({count} action{s}) and it's downloading... 📊",
    )


def compose_count_reply(count: int, rng: Optional[random.Random] = None) -> str:
    """Reply for a "how many" request once the caller has the count."""
    return pick_reply(count_replies(count), rng)


def compose_export_reply(count: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """
    Reply for an export request.

    Args:
        count: Number of exported actions, or None when the backend did the
               filtering and the count is unknown
    """
    if count is None:
        return pick_reply(EXPORT_REPLIES, rng)
    return pick_reply(export_replies_with_count(count), rng)
