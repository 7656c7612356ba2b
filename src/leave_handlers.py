"""
Handlers for the structured leave intents.

Each handler reads or appends leave records and adjusts the working copy
of the session memory it is given. The caller decides whether that copy
is saved. Replies are plain strings sent back to the user as-is.
"""

import logging

from src.conversation_state import AWAITING_LEAVE_DATE, LEAVE_APPLIED, SessionMemory
from src.intents import extract_day_token
from src.leave_store import JsonLeaveStore, LeaveType
from src.observability import trace_span

logger = logging.getLogger(__name__)

NO_SICK_LEAVE_REPLY = "You haven't applied for any sick leave yet in this session."
ASK_DATE_REPLY = (
    "Please specify the date you want to take the leave. "
    "For example, 'Apply sick leave for Feb 5'."
)
ASK_DATE_AGAIN_REPLY = (
    "Sorry, I didn't catch the date. Please say something like 'Feb 5' or 'February 5th'."
)


def detect_leave_type(text: str) -> LeaveType:
    """Leave type by keyword priority: sick, then casual."""
    text = text.lower()
    if "sick" in text:
        return LeaveType.SICK
    if "casual" in text:
        return LeaveType.CASUAL
    return LeaveType.UNSPECIFIED


def handle_leave_inquiry(store: JsonLeaveStore, session_id: str) -> str:
    """List the sick leave dates recorded for this session, oldest first."""
    with trace_span("leave_inquiry", session=session_id):
        records = store.find(session_id, LeaveType.SICK)

    if not records:
        return NO_SICK_LEAVE_REPLY

    dates = ", ".join(record.date for record in records)
    return f"You have applied sick leave on {dates}."


def handle_leave_application(
    store: JsonLeaveStore, memory: SessionMemory, session_id: str, message: str
) -> str:
    """
    Record a leave request, or ask for the date when the message has none.

    Without a date no record is written and the session moves into the
    awaiting-date state; the next message is then treated as the answer.

    Args:
        store: Leave record store
        memory: Working copy of the session memory (modified in place)
        session_id: Session identifier
        message: Raw user message (original casing)

    Returns:
        Reply text
    """
    leave_type = detect_leave_type(message)
    date = extract_day_token(message)

    memory.last_topic = "leave"

    if date is None:
        logger.info(f"Leave application without date, awaiting date: session={session_id}")
        memory.context = AWAITING_LEAVE_DATE
        return ASK_DATE_REPLY

    with trace_span("leave_application", session=session_id, type=leave_type.value):
        store.append(session_id, leave_type, date)

    memory.context = LEAVE_APPLIED
    return f"✅ Your {leave_type.value} leave for {date} has been noted."


def handle_pending_date(
    store: JsonLeaveStore, memory: SessionMemory, session_id: str, message: str
) -> str:
    """Complete an application that was waiting for its date."""
    date = extract_day_token(message)

    if date is None:
        return ASK_DATE_AGAIN_REPLY

    with trace_span("leave_pending_date", session=session_id):
        store.append(session_id, LeaveType.UNSPECIFIED, date)

    memory.context = LEAVE_APPLIED
    memory.last_topic = "leave"
    return f"✅ Noted! Your leave for {date} has been applied."
