"""
Deterministic intent classification and day-token extraction.

Intents are matched with fixed keywords and regular expressions only.
The rules are evaluated in order and the first match wins.
"""

import re
from collections.abc import Callable
from enum import Enum

from src.conversation_state import SessionMemory
from src.leave_store import DayToken

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"
# Month-first dates only take a real month name, so "marketing 2" is not a date.
_MONTH_NAME = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t|tember)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

# "5 Feb", "12february", and the month-first form used in our own
# prompts: "Feb 10", "February 5th".
DATE_PATTERN = re.compile(
    rf"\b(\d{{1,2}}\s*{_MONTH}|{_MONTH_NAME}\s*\d{{1,2}}(?:st|nd|rd|th)?)\b",
    re.IGNORECASE,
)
REPEAT_PATTERN = re.compile(r"\b(repeat|say that again|same line|again|repeat that)\b", re.IGNORECASE)


class Intent(Enum):
    LEAVE_INQUIRY = "leave_inquiry"
    LEAVE_APPLICATION = "leave_application"
    PENDING_DATE = "pending_date"
    REPEAT = "repeat"
    FALLBACK = "fallback"


def is_leave_inquiry(text: str, memory: SessionMemory) -> bool:
    return "when" in text and "sick leave" in text


def is_leave_application(text: str, memory: SessionMemory) -> bool:
    return "apply" in text and "leave" in text


def is_pending_date(text: str, memory: SessionMemory) -> bool:
    return memory.awaiting_leave_date


def is_repeat(text: str, memory: SessionMemory) -> bool:
    return bool(memory.last_ai_message) and REPEAT_PATTERN.search(text) is not None


IntentRule = tuple[Intent, Callable[[str, SessionMemory], bool]]

INTENT_RULES: list[IntentRule] = [
    (Intent.LEAVE_INQUIRY, is_leave_inquiry),
    (Intent.LEAVE_APPLICATION, is_leave_application),
    (Intent.PENDING_DATE, is_pending_date),
    (Intent.REPEAT, is_repeat),
]


def classify(text: str, memory: SessionMemory) -> Intent:
    """
    Pick the intent for a lowercased message.

    Args:
        text: Lowercased user message
        memory: Current session memory (read only)

    Returns:
        The first matching intent, or Intent.FALLBACK
    """
    for intent, predicate in INTENT_RULES:
        if predicate(text, memory):
            return intent
    return Intent.FALLBACK


def extract_day_token(message: str) -> DayToken | None:
    """Return the first day token in the raw message, verbatim, or None."""
    match = DATE_PATTERN.search(message)
    return DayToken(match.group(1)) if match else None
