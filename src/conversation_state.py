"""
Per-session conversational memory.

Why:
The intent rules are deterministic, but they depend on what happened in
the previous turn (an unfinished leave application, the last topic, the
last generated answer). That memory lives here, behind a small store
interface so the in-process table can be replaced by an external cache.
"""

from dataclasses import dataclass, replace
from typing import Protocol

AWAITING_LEAVE_DATE = "awaiting_leave_date"
LEAVE_APPLIED = "leave_applied"


@dataclass
class SessionMemory:
    context: str = ""
    last_topic: str = ""
    last_ai_message: str = ""

    @property
    def awaiting_leave_date(self) -> bool:
        return self.context == AWAITING_LEAVE_DATE


class SessionStore(Protocol):
    def get_or_create(self, session_id: str) -> SessionMemory: ...

    def get(self, session_id: str) -> SessionMemory | None: ...

    def update(self, session_id: str, memory: SessionMemory) -> None: ...

    def __len__(self) -> int: ...


class InMemorySessionStore:
    """
    Process-lifetime session table.

    get_or_create() hands out a working copy; nothing changes for the
    session until update() is called with it. Sessions are never evicted
    and are lost on restart.
    """

    def __init__(self):
        self._sessions: dict[str, SessionMemory] = {}

    def get_or_create(self, session_id: str) -> SessionMemory:
        memory = self._sessions.setdefault(session_id, SessionMemory())
        return replace(memory)

    def get(self, session_id: str) -> SessionMemory | None:
        """Working copy of a known session, without registering unknown ones."""
        memory = self._sessions.get(session_id)
        return replace(memory) if memory is not None else None

    def update(self, session_id: str, memory: SessionMemory) -> None:
        # last writer wins
        self._sessions[session_id] = replace(memory)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
