"""
Request handler for the HR Buddy assistant.
"""

import logging
from typing import Any

from data.hr_reference import load_hr_reference
from src.config import settings
from src.conversation_state import InMemorySessionStore, SessionMemory, SessionStore
from src.followups import resolve_followup
from src.generation import GenerationGateway, GenerationTransportError
from src.intents import Intent, classify
from src.leave_handlers import (
    handle_leave_application,
    handle_leave_inquiry,
    handle_pending_date,
)
from src.leave_store import JsonLeaveStore
from src.observability import trace_span
from src.prompts import compose_prompt

logger = logging.getLogger(__name__)


class HRBuddyAgent:
    """
    Deterministic intake in front of a probabilistic language model.

    Responsibilities:
    - classify every message with fixed rules, in a fixed order
    - answer leave questions and record leave from stored data only
    - carry the last topic, last message and last answer across turns
    - fall back to generation with an assembled context prompt

    Session memory is read as a working copy and written back once at the
    end of a successful turn. A failed generation call leaves the session
    exactly as it was.
    """

    def __init__(
        self,
        leave_store: JsonLeaveStore,
        gateway: GenerationGateway,
        reference_data: dict[str, Any],
        sessions: SessionStore | None = None,
    ):
        """Initialize the agent."""
        logger.info("Initializing HRBuddyAgent")

        self.leave_store = leave_store
        self.gateway = gateway
        self.reference_data = reference_data
        self.sessions = sessions if sessions is not None else InMemorySessionStore()

        self._structured_handlers = {
            Intent.LEAVE_INQUIRY: self._leave_inquiry,
            Intent.LEAVE_APPLICATION: self._leave_application,
            Intent.PENDING_DATE: self._pending_date,
            Intent.REPEAT: self._repeat,
        }

        logger.info("HRBuddyAgent initialized successfully")

    def _leave_inquiry(self, message: str, session_id: str, memory: SessionMemory) -> str:
        return handle_leave_inquiry(self.leave_store, session_id)

    def _leave_application(self, message: str, session_id: str, memory: SessionMemory) -> str:
        return handle_leave_application(self.leave_store, memory, session_id, message)

    def _pending_date(self, message: str, session_id: str, memory: SessionMemory) -> str:
        return handle_pending_date(self.leave_store, memory, session_id, message)

    def _repeat(self, message: str, session_id: str, memory: SessionMemory) -> str:
        return memory.last_ai_message

    async def _generate_reply(self, message: str, session_id: str, memory: SessionMemory) -> str:
        """
        Fallback path: rewrite follow-ups, build the prompt and generate.

        Raises:
            GenerationTransportError: If the generation backend could not be reached
        """
        query = resolve_followup(message, memory)
        if query.rewrite:
            logger.info(f"Follow-up rewritten ({query.rewrite}) for session {session_id}")

        prompt = compose_prompt(self.reference_data, memory, query.text)

        with trace_span("fallback_turn", session=session_id):
            result = await self.gateway.generate(prompt)

        if result.failed:
            raise GenerationTransportError(result.error or "generation backend unavailable")

        # Remember the literal message, not the rewritten query.
        memory.context = message
        memory.last_ai_message = result.text
        return result.text

    async def chat(self, message: str, session_id: str) -> str:
        """
        Handle one user message.

        Args:
            message: User's message, original casing
            session_id: Session identifier

        Returns:
            Reply text

        Raises:
            GenerationTransportError: Generation backend failed; session untouched
            LeaveStoreError: Leave file could not be read or written
        """
        logger.info(f"Processing message for session {session_id}")

        memory = self.sessions.get_or_create(session_id)
        intent = classify(message.lower(), memory)
        logger.info(f"Intent {intent.value} for session {session_id}")

        handler = self._structured_handlers.get(intent)
        if handler is not None:
            response_text = handler(message, session_id, memory)
        else:
            response_text = await self._generate_reply(message, session_id, memory)

        self.sessions.update(session_id, memory)
        return response_text

    def get_session(self, session_id: str) -> SessionMemory:
        """Snapshot of a session's memory; empty for unknown sessions, which stay unregistered."""
        return self.sessions.get(session_id) or SessionMemory()


# Global agent instance
hr_agent = None


def get_agent() -> HRBuddyAgent:
    """Get or create global agent instance."""
    global hr_agent
    if hr_agent is None:
        hr_agent = HRBuddyAgent(
            leave_store=JsonLeaveStore(settings.leaves_file),
            gateway=GenerationGateway(),
            reference_data=load_hr_reference(settings.hr_data_file),
        )
    return hr_agent
