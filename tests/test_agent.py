"""
Request handler tests: decision order, leave sub-protocol and session memory.
"""

import asyncio

import pytest
from conftest import FakeGateway, ok, parse_failure, transport_failure

from data.hr_reference import HR_DATA
from src.agent import HRBuddyAgent
from src.conversation_state import AWAITING_LEAVE_DATE, LEAVE_APPLIED, SessionMemory
from src.generation import FALLBACK_REPLY, GenerationTransportError
from src.leave_handlers import ASK_DATE_AGAIN_REPLY, ASK_DATE_REPLY, NO_SICK_LEAVE_REPLY
from src.leave_store import LeaveType


def say(agent: HRBuddyAgent, message: str, session_id: str) -> str:
    return asyncio.run(agent.chat(message=message, session_id=session_id))


class TestLeaveScenarios:
    """End-to-end leave flows through the request handler."""

    def test_apply_sick_leave_with_date(self, agent, leave_store, gateway):
        response = say(agent, "Apply sick leave for 5 Feb", "s1")

        assert "sick" in response
        assert "5 Feb" in response
        records = leave_store.load_all()
        assert len(records) == 1
        assert records[0].session_id == "s1"
        assert records[0].type == LeaveType.SICK
        assert records[0].date == "5 Feb"
        assert gateway.prompts == []

    def test_inquiry_lists_applied_sick_leave(self, agent):
        say(agent, "Apply sick leave for 5 Feb", "s1")

        response = say(agent, "when did I take sick leave", "s1")

        assert "5 Feb" in response

    def test_inquiry_before_any_application(self, agent):
        assert say(agent, "When did I take sick leave?", "fresh") == NO_SICK_LEAVE_REPLY

    def test_inquiry_is_scoped_to_session(self, agent):
        say(agent, "Apply sick leave for 5 Feb", "s1")

        assert say(agent, "when did I take sick leave", "other") == NO_SICK_LEAVE_REPLY

    def test_repeated_inquiry_is_idempotent(self, agent):
        say(agent, "Apply sick leave for 5 Feb", "s1")
        say(agent, "Apply sick leave for 9 Mar", "s1")

        first = say(agent, "when did I take sick leave", "s1")
        second = say(agent, "when did I take sick leave", "s1")

        assert first == second == "You have applied sick leave on 5 Feb, 9 Mar."

    def test_apply_without_date_then_date(self, agent, leave_store):
        assert say(agent, "Apply leave", "s2") == ASK_DATE_REPLY
        assert leave_store.count() == 0
        assert agent.get_session("s2").context == AWAITING_LEAVE_DATE

        response = say(agent, "Feb 10", "s2")

        assert "Feb 10" in response
        records = leave_store.load_all()
        assert len(records) == 1
        assert (records[0].session_id, records[0].type, records[0].date) == (
            "s2",
            LeaveType.UNSPECIFIED,
            "Feb 10",
        )
        assert agent.get_session("s2").context == LEAVE_APPLIED

    def test_awaiting_date_persists_until_date_arrives(self, agent, leave_store, gateway):
        say(agent, "Apply casual leave", "s3")

        for message in ["next week", "not sure yet", "tell me more"]:
            assert say(agent, message, "s3") == ASK_DATE_AGAIN_REPLY
            assert agent.get_session("s3").context == AWAITING_LEAVE_DATE

        assert leave_store.count() == 0
        assert gateway.prompts == []

        say(agent, "3 Mar", "s3")

        # pending completion records as unspecified regardless of the first message
        assert [r.type for r in leave_store.load_all()] == [LeaveType.UNSPECIFIED]

    def test_new_application_while_awaiting_date(self, agent, leave_store):
        say(agent, "Apply leave", "s4")

        response = say(agent, "Apply casual leave for 12 Apr", "s4")

        assert "casual" in response
        assert leave_store.load_all()[0].type == LeaveType.CASUAL
        assert agent.get_session("s4").context == LEAVE_APPLIED

    def test_invalid_calendar_date_accepted(self, agent, leave_store):
        say(agent, "Apply sick leave for 32 Jan", "s5")
        assert leave_store.load_all()[0].date == "32 Jan"


class TestRepeat:
    def test_repeat_returns_last_answer_verbatim(self, leave_store):
        gateway = FakeGateway(ok("Holidays: Diwali, Christmas."))
        agent = HRBuddyAgent(leave_store, gateway, HR_DATA)

        say(agent, "Which holidays do we have?", "r1")
        response = say(agent, "say that again", "r1")

        assert response == "Holidays: Diwali, Christmas."
        assert len(gateway.prompts) == 1

    def test_repeat_without_previous_answer_goes_to_generation(self, agent, gateway):
        response = say(agent, "repeat", "r2")

        assert response == "Generated reply 1"
        assert len(gateway.prompts) == 1


class TestFallback:
    def test_session_memory_updated_after_generation(self, agent, gateway):
        response = say(agent, "What benefits do I get?", "f1")

        assert response == "Generated reply 1"
        assert agent.get_session("f1") == SessionMemory(
            context="What benefits do I get?",
            last_topic="benefit",
            last_ai_message="Generated reply 1",
        )

    def test_prompt_carries_previous_turn(self, agent, gateway):
        say(agent, "What benefits do I get?", "f2")
        say(agent, "Anything about working hours?", "f2")

        second = gateway.prompts[1]
        assert "- Last topic: hours" in second
        assert "- Last user message: What benefits do I get?" in second
        assert "- Last AI message: Generated reply 1" in second
        assert "User message: Anything about working hours?" in second

    def test_vague_followup_rewrites_query_but_remembers_literal_message(self, agent, gateway):
        say(agent, "Tell me about the holiday list", "f3")
        say(agent, "tell me more", "f3")

        assert "User message: Give me more details about holiday." in gateway.prompts[1]
        assert agent.get_session("f3").context == "tell me more"

    def test_numbered_followup_includes_previous_answer(self, leave_store):
        gateway = FakeGateway(ok("1. Health insurance 2. Provident fund"), ok("PF details"))
        agent = HRBuddyAgent(leave_store, gateway, HR_DATA)

        say(agent, "What benefits are there?", "f4")
        say(agent, "the 2nd one", "f4")

        assert 'The user said "the 2nd one"' in gateway.prompts[1]
        assert '"1. Health insurance 2. Provident fund"' in gateway.prompts[1]
        assert agent.get_session("f4").last_ai_message == "PF details"

    def test_leave_topic_then_vague_followup(self, agent, gateway):
        say(agent, "Apply leave for 5 Feb", "f5")
        say(agent, "what else?", "f5")

        assert "User message: Give me more details about leave." in gateway.prompts[0]

    def test_parse_failure_is_remembered(self, leave_store):
        gateway = FakeGateway(parse_failure())
        agent = HRBuddyAgent(leave_store, gateway, HR_DATA)

        response = say(agent, "Who is my HR partner?", "f6")

        assert response == FALLBACK_REPLY
        assert agent.get_session("f6").last_ai_message == FALLBACK_REPLY
        assert agent.get_session("f6").context == "Who is my HR partner?"

    def test_transport_failure_leaves_session_untouched(self, leave_store):
        gateway = FakeGateway(ok("first answer"), transport_failure())
        agent = HRBuddyAgent(leave_store, gateway, HR_DATA)
        say(agent, "Hello", "f7")
        before = agent.get_session("f7")

        with pytest.raises(GenerationTransportError):
            say(agent, "What is the holiday policy?", "f7")

        assert agent.get_session("f7") == before
        assert before.last_topic == ""


class TestGetSession:
    def test_unknown_session_is_empty_and_unregistered(self, agent):
        assert agent.get_session("ghost") == SessionMemory()
        assert "ghost" not in agent.sessions
        assert len(agent.sessions) == 0

    def test_returns_copy(self, agent):
        say(agent, "Apply leave", "c1")

        snapshot = agent.get_session("c1")
        snapshot.context = "changed"

        assert agent.get_session("c1").context == AWAITING_LEAVE_DATE
