"""
Tests for topic tagging and follow-up rewriting.
"""

from src.conversation_state import SessionMemory
from src.followups import resolve_followup, tag_topic


class TestTagTopic:
    def test_first_keyword_in_list_order_wins(self):
        memory = SessionMemory()
        tag_topic("what is the holiday leave policy", memory)
        assert memory.last_topic == "leave"

    def test_no_keyword_keeps_topic(self):
        memory = SessionMemory(last_topic="benefit")
        tag_topic("thanks!", memory)
        assert memory.last_topic == "benefit"

    def test_plural_matches_by_containment(self):
        memory = SessionMemory()
        tag_topic("list the holidays", memory)
        assert memory.last_topic == "holiday"


class TestResolveFollowup:
    def test_literal_message_by_default(self):
        memory = SessionMemory()
        resolved = resolve_followup("What are the office hours?", memory)

        assert resolved.text == "What are the office hours?"
        assert resolved.rewrite is None
        assert memory.last_topic == "hours"

    def test_vague_followup_uses_last_topic(self):
        memory = SessionMemory(last_topic="benefit")
        resolved = resolve_followup("Tell me more", memory)

        assert resolved.text == "Give me more details about benefit."
        assert resolved.rewrite == "vague"

    def test_vague_followup_after_tagging_same_message(self):
        memory = SessionMemory()
        resolved = resolve_followup("any more holiday info?", memory)

        assert resolved.text == "Give me more details about holiday."

    def test_vague_followup_without_topic_is_literal(self):
        memory = SessionMemory()
        resolved = resolve_followup("what else?", memory)

        assert resolved.text == "what else?"
        assert resolved.rewrite is None

    def test_numbered_followup_embeds_previous_answer(self):
        memory = SessionMemory(last_ai_message="1. Casual leave 2. Sick leave")
        resolved = resolve_followup("the 2nd one", memory)

        assert resolved.rewrite == "numbered"
        assert '"the 2nd one"' in resolved.text
        assert '"1. Casual leave 2. Sick leave"' in resolved.text
        assert "which option they meant" in resolved.text

    def test_numbered_followup_without_answer_is_literal(self):
        resolved = resolve_followup("first one", SessionMemory())
        assert resolved.text == "first one"

    def test_vague_checked_before_numbered(self):
        memory = SessionMemory(last_topic="policy", last_ai_message="1. A 2. B")
        resolved = resolve_followup("tell me more about the first", memory)

        assert resolved.rewrite == "vague"
        assert resolved.text == "Give me more details about policy."
