"""Conversation ID logging context for tracing turns across modules.

Provides a conversation-aware logger that attaches the active
conversation ID to every log record, making it easy to follow one
customer's session through the orchestrator, classifier, and store.

Usage:
    from repairbot.logging_context import conversation_scope, get_conversation_logger

    logger = get_conversation_logger(__name__)
    with conversation_scope("3f1c..."):
        logger.info("Processing message")  # record.conversation_id == "3f1c..."
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_CONVERSATION = "NO_CONVERSATION"

_conversation_id: ContextVar[str] = ContextVar("conversation_id", default=NO_CONVERSATION)


def set_conversation_id(conversation_id: str) -> None:
    """Set the conversation ID for the current async context."""
    _conversation_id.set(conversation_id)


def get_conversation_id() -> str:
    """Retrieve the current conversation ID."""
    return _conversation_id.get()


@contextmanager
def conversation_scope(conversation_id: str) -> Iterator[None]:
    """Tag records with ``conversation_id`` for the duration of the block.

    The previous ID is restored on exit, so nothing leaks into later
    records of the same task.
    """
    token = _conversation_id.set(conversation_id)
    try:
        yield
    finally:
        _conversation_id.reset(token)


class ConversationIdFilter(logging.Filter):
    """Injects conversation_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation_id = _conversation_id.get()  # type: ignore[attr-defined]
        return True


def get_conversation_logger(name: str) -> logging.Logger:
    """Return a logger with the ConversationIdFilter attached.

    The filter adds ``conversation_id`` to each record so formatters can
    include ``%(conversation_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ConversationIdFilter) for f in logger.filters):
        logger.addFilter(ConversationIdFilter())
    return logger


def conversation_handler() -> logging.Handler:
    """Stream handler that tags every record it emits, including records
    from third-party loggers that never went through a conversation logger."""
    handler = logging.StreamHandler()
    handler.addFilter(ConversationIdFilter())
    return handler
