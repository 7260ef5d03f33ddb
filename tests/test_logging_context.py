"""Tests for conversation-id log tagging."""

import logging

import pytest

from repairbot.logging_context import (
    NO_CONVERSATION,
    ConversationIdFilter,
    conversation_handler,
    conversation_scope,
    get_conversation_id,
    get_conversation_logger,
    set_conversation_id,
)


class TestConversationLogger:
    def test_filter_attached_once(self):
        logger = get_conversation_logger("repairbot.test.once")
        get_conversation_logger("repairbot.test.once")
        assert sum(isinstance(f, ConversationIdFilter) for f in logger.filters) == 1

    def test_record_tagged_with_current_id(self, caplog):
        logger = get_conversation_logger("repairbot.test.tagged")
        with conversation_scope("conv-123"):
            with caplog.at_level(logging.INFO, logger="repairbot.test.tagged"):
                logger.info("hello")
            assert get_conversation_id() == "conv-123"
        assert caplog.records[-1].conversation_id == "conv-123"

    def test_scope_restores_previous_id(self):
        set_conversation_id("outer")
        with conversation_scope("inner"):
            assert get_conversation_id() == "inner"
        assert get_conversation_id() == "outer"
        set_conversation_id(NO_CONVERSATION)

    def test_handler_tags_foreign_records(self):
        handler = conversation_handler()
        handler.setFormatter(logging.Formatter("[%(conversation_id)s] %(message)s"))
        record = logging.LogRecord("httpx", logging.INFO, __file__, 1, "request", None, None)
        with conversation_scope("conv-9"):
            assert handler.filter(record)
        assert handler.format(record) == "[conv-9] request"


class TestSessionManagerScope:
    @pytest.mark.asyncio
    async def test_turn_records_carry_id(self, session_manager, caplog):
        started = await session_manager.start("browser-1")
        with caplog.at_level(logging.INFO, logger="repairbot.conversation.session_manager"):
            await session_manager.process_message(started.conversation_id, "Mon écran est cassé")
            await session_manager.generate_report(started.conversation_id)
        tagged = [
            r.conversation_id for r in caplog.records
            if r.name == "repairbot.conversation.session_manager"
        ]
        assert len(tagged) == 2
        assert set(tagged) == {started.conversation_id}

    @pytest.mark.asyncio
    async def test_id_does_not_leak_after_operations(self, session_manager):
        before = get_conversation_id()
        started = await session_manager.start("browser-1")
        assert get_conversation_id() == before
        await session_manager.process_message(started.conversation_id, "Mon écran est cassé")
        await session_manager.generate_report(started.conversation_id)
        assert get_conversation_id() == before
