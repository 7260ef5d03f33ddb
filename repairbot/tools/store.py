"""
Conversation store interface and an in-memory implementation.

In production, ``Store`` is backed by the service database (conversation,
message and metrics tables). ``InMemoryStore`` keeps everything in dicts
and copies records on the way in and out, so callers never share mutable
state with the store.
"""

import logging
from collections import defaultdict
from typing import Optional, Protocol

from repairbot.schemas.conversation_schema import ConversationSession, Message
from repairbot.schemas.memory_schema import ConversationMemory

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Persistence collaborator used by the session manager only."""

    async def create_session(self, session: ConversationSession) -> None: ...

    async def get_session(self, conversation_id: str) -> Optional[ConversationSession]: ...

    async def update_session(self, session: ConversationSession) -> None: ...

    async def append_message(self, conversation_id: str, message: Message) -> None: ...

    async def list_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> list[Message]: ...

    async def save_memory(self, conversation_id: str, memory: ConversationMemory) -> None: ...

    async def load_memory(self, conversation_id: str) -> Optional[ConversationMemory]: ...

    async def increment_metric(self, name: str) -> None: ...


class InMemoryStore:
    """Dict-backed store for tests, the console demo, and single-process use."""

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}
        self._messages: dict[str, list[Message]] = defaultdict(list)
        self._memories: dict[str, ConversationMemory] = {}
        self.metrics: dict[str, int] = defaultdict(int)

    async def create_session(self, session: ConversationSession) -> None:
        if session.conversation_id in self._sessions:
            raise ValueError(f"Conversation {session.conversation_id} already exists")
        self._sessions[session.conversation_id] = session.model_copy(deep=True)
        logger.debug("Session stored: %s", session.conversation_id)

    async def get_session(self, conversation_id: str) -> Optional[ConversationSession]:
        session = self._sessions.get(conversation_id)
        return session.model_copy(deep=True) if session else None

    async def update_session(self, session: ConversationSession) -> None:
        if session.conversation_id not in self._sessions:
            raise KeyError(f"Conversation {session.conversation_id} not found")
        self._sessions[session.conversation_id] = session.model_copy(deep=True)

    async def append_message(self, conversation_id: str, message: Message) -> None:
        self._messages[conversation_id].append(message.model_copy(deep=True))

    async def list_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> list[Message]:
        messages = self._messages.get(conversation_id, [])
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return [m.model_copy(deep=True) for m in messages]

    async def save_memory(self, conversation_id: str, memory: ConversationMemory) -> None:
        self._memories[conversation_id] = memory.model_copy(deep=True)

    async def load_memory(self, conversation_id: str) -> Optional[ConversationMemory]:
        memory = self._memories.get(conversation_id)
        return memory.model_copy(deep=True) if memory else None

    async def increment_metric(self, name: str) -> None:
        self.metrics[name] += 1

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        self._sessions.clear()
        self._messages.clear()
        self._memories.clear()
        self.metrics.clear()
