"""
Message Guards

Pre-flight checks on chat messages. Both are plain case-insensitive
substring tests and run before any completion call.

- Safety filter: courtesy denylist, not a security boundary
- Attribution: canned answer to "who made you" questions
"""

from app.core.config import Settings, settings


BANNED_SUBSTRINGS = ("bomb", "terrorist", "kill", "harm", "attack")

ATTRIBUTION_PHRASES = ("who created you", "who made you", "who built you")


def is_message_safe(text: str) -> bool:
    """False if the text contains any denylisted substring. Empty text passes."""
    if not text:
        return True
    low = text.lower()
    return not any(banned in low for banned in BANNED_SUBSTRINGS)


def is_attribution_question(text: str) -> bool:
    if not text:
        return False
    low = text.lower()
    return any(phrase in low for phrase in ATTRIBUTION_PHRASES)


def attribution_reply(config: Settings = settings) -> str:
    return f"{config.owner_name} from {config.owner_location}. ({config.product_name} {config.app_version})"
