"""
Follow-up handling for the generation path.

Short replies such as "tell me more" or "the 2nd one" mean nothing on
their own. They are rewritten into a self-contained query using what the
session remembers, before the prompt is built.
"""

import re
from dataclasses import dataclass

from src.conversation_state import SessionMemory

TOPIC_KEYWORDS = ["leave", "holiday", "benefit", "policy", "hours"]

VAGUE_FOLLOWUP_PATTERN = re.compile(r"\b(any more|tell me more|what else|more info)\b", re.IGNORECASE)
NUMBERED_FOLLOWUP_PATTERN = re.compile(
    r"\b(1st|first|2nd|second|3rd|third|4th|fourth)\b", re.IGNORECASE
)


@dataclass(frozen=True)
class ResolvedQuery:
    text: str
    rewrite: str | None = None  # "vague", "numbered" or None


def tag_topic(text: str, memory: SessionMemory) -> None:
    """Set last_topic to the first known topic keyword in the text."""
    for topic in TOPIC_KEYWORDS:
        if topic in text:
            memory.last_topic = topic
            return


def resolve_followup(message: str, memory: SessionMemory) -> ResolvedQuery:
    """
    Tag the topic and rewrite vague or numbered follow-ups.

    A vague follow-up needs a remembered topic and a numbered one needs a
    previous AI answer; otherwise the literal message is used. Only one
    rewrite applies, vague first.
    """
    text = message.lower()
    tag_topic(text, memory)

    if VAGUE_FOLLOWUP_PATTERN.search(text) and memory.last_topic:
        return ResolvedQuery(f"Give me more details about {memory.last_topic}.", "vague")

    if NUMBERED_FOLLOWUP_PATTERN.search(text) and memory.last_ai_message:
        return ResolvedQuery(
            f'The user said "{message}". Based on the previous AI message: '
            f'"{memory.last_ai_message}", determine which option they meant '
            "and continue accordingly.",
            "numbered",
        )

    return ResolvedQuery(message)
