"""
Prompt assembly for the generation fallback.
"""

import json
from typing import Any

from src.conversation_state import SessionMemory

PERSONA = 'You are "HR Buddy", a polite, conversational HR assistant.'

GUIDELINES = """Guidelines:
- If the user says "1st one", "second", or "3rd one", infer which option from the previous AI message they meant.
- If vague ("any more", "tell me more", "what else"), elaborate naturally on the last discussed topic.
- If user asks to "repeat", reuse last response.
- Always be friendly, concise, and clear."""


def compose_prompt(reference_data: dict[str, Any], memory: SessionMemory, query: str) -> str:
    """
    Build the full prompt for one fallback turn.

    The reference document is serialized verbatim; empty memory fields are
    shown as "none". Built fresh on every call.
    """
    hr_info = json.dumps(reference_data, indent=2, ensure_ascii=False)

    return f"""{PERSONA}

Use this HR information as your source of truth:
{hr_info}

Conversation context:
- Last topic: {memory.last_topic or "none"}
- Last user message: {memory.context or "none"}
- Last AI message: {memory.last_ai_message or "none"}

User message: {query}

{GUIDELINES}
"""
