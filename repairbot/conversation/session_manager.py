"""
Session manager: the five operations a caller can invoke on the engine.

Owns the session lifecycle (see ``state_machine``), threads conversation
memory through every turn, and is the only component that talks to the
store. Turns of one conversation run strictly one after another under a
per-conversation ``asyncio.Lock``; different conversations share nothing
mutable and proceed concurrently.

Usage:
    manager = SessionManager(store=InMemoryStore())
    started = await manager.start("browser-session-1")
    reply = await manager.process_message(started.conversation_id, "Mon écran est cassé")
    report = await manager.generate_report(started.conversation_id)
    await manager.end(started.conversation_id, satisfaction_score=90)
"""

import asyncio
import uuid
import weakref
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

from repairbot.config import settings
from repairbot.conversation.composer import compose_response
from repairbot.conversation.memory import (
    record_satisfaction,
    update_memory,
    with_nearby_repairers,
)
from repairbot.conversation.orchestrator import AIOrchestrator
from repairbot.conversation.report import generate_report
from repairbot.conversation.state_machine import (
    InvalidTransitionError,
    SessionStateMachine,
    SessionTrigger,
)
from repairbot.logging_context import conversation_scope, get_conversation_logger
from repairbot.prompts.prompt_templates import build_welcome_message
from repairbot.schemas.conversation_schema import (
    ConversationSession,
    Message,
    SenderType,
    UserType,
)
from repairbot.schemas.memory_schema import ConversationMemory
from repairbot.schemas.response_schema import (
    Ack,
    Action,
    DiagnosticReport,
    EngineResponse,
    StartResult,
)
from repairbot.tools.repairers import RepairerDirectory
from repairbot.tools.store import Store

logger = get_conversation_logger(__name__)

Location = tuple[float, float]

WELCOME_SUGGESTIONS = [
    "🔍 Diagnostic de mon problème",
    "📱 Mon écran est cassé",
    "🔋 Problème de batterie",
    "📍 Trouver un réparateur près de moi",
]
WELCOME_ACTIONS = [
    Action(type="button", label="Commencer le diagnostic", action="start_diagnostic"),
    Action(type="button", label="Urgence (réparation immédiate)", action="urgent_repair"),
]
LOCATION_ACK = (
    "Parfait ! J'ai bien reçu votre localisation. Je peux maintenant vous recommander "
    "les meilleurs réparateurs près de chez vous ! 📍"
)
GOODBYE_MESSAGE = (
    "Merci d'avoir utilisé notre assistant ! N'hésitez pas à revenir si vous avez "
    "d'autres questions. 😊"
)

METRIC_CONVERSATIONS_STARTED = "advanced_conversations_started"
METRIC_MESSAGES_PROCESSED = "advanced_messages_processed"


class SessionError(Exception):
    """Base class for session lookup and lifecycle errors."""


class SessionNotFound(SessionError):
    """The conversation id is unknown, or the conversation no longer accepts turns."""


class SessionAlreadyCompleted(SessionNotFound):
    """The conversation has already been ended."""


class SessionManager:
    """Entry point for start / message / location / report / end."""

    def __init__(
        self,
        store: Store,
        orchestrator: Optional[AIOrchestrator] = None,
        repairers: Optional[RepairerDirectory] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator or AIOrchestrator()
        self._repairers = repairers
        self._clock = clock or datetime.now
        # Held only while a turn is running or waiting; idle locks are collected.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def _turn(self, conversation_id: str) -> AsyncIterator[ConversationSession]:
        """Serialize one turn of a conversation and yield its fresh session.

        Unknown ids raise ``SessionNotFound`` before any lock is created.
        """
        with conversation_scope(conversation_id):
            await self._get_session(conversation_id)
            lock = self._locks.get(conversation_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[conversation_id] = lock
            async with lock:
                yield await self._get_session(conversation_id)

    async def _get_session(self, conversation_id: str) -> ConversationSession:
        session = await self._store.get_session(conversation_id)
        if session is None:
            raise SessionNotFound(f"Conversation {conversation_id} not found")
        return session

    def _require(self, session: ConversationSession, trigger: SessionTrigger) -> SessionStateMachine:
        sm = SessionStateMachine(session.status)
        if not sm.can_transition(trigger):
            raise SessionAlreadyCompleted(
                f"Conversation {session.conversation_id} is {session.status.value}"
            )
        return sm

    async def _load_memory(self, conversation_id: str) -> ConversationMemory:
        return await self._store.load_memory(conversation_id) or ConversationMemory()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def start(
        self,
        session_id: str,
        user_id: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> StartResult:
        now = self._clock()
        conversation_id = str(uuid.uuid4())
        with conversation_scope(conversation_id):
            sm = SessionStateMachine()
            status = sm.transition(SessionTrigger.ACTIVATED)
            session = ConversationSession(
                conversation_id=conversation_id,
                session_id=session_id,
                user_id=user_id,
                user_type=UserType.AUTHENTICATED if user_id else UserType.ANONYMOUS,
                status=status,
                user_location=location,
                location_updated_at=now if location else None,
                created_at=now,
                updated_at=now,
            )
            await self._store.create_session(session)
            await self._store.save_memory(conversation_id, ConversationMemory())
            await self._store.increment_metric(METRIC_CONVERSATIONS_STARTED)
            logger.info("Conversation started for session %s", session_id)

            return StartResult(
                conversation_id=conversation_id,
                message=build_welcome_message(now.hour, location is not None),
                suggestions=list(WELCOME_SUGGESTIONS),
                actions=[a.model_copy() for a in WELCOME_ACTIONS],
            )

    async def process_message(
        self,
        conversation_id: str,
        text: str,
        location: Optional[Location] = None,
    ) -> EngineResponse:
        async with self._turn(conversation_id) as session:
            sm = self._require(session, SessionTrigger.MESSAGE_PROCESSED)
            now = self._clock()

            if location is not None:
                session.user_location = location
                session.location_updated_at = now

            memory = await self._load_memory(conversation_id)
            if session.user_location is not None and self._repairers is not None:
                nearby = await self._repairers.find_nearby(
                    session.user_location, settings.memory.max_repairer_hints
                )
                memory = with_nearby_repairers(memory, nearby)

            history = await self._store.list_messages(
                conversation_id, limit=settings.memory.history_window
            )
            await self._store.append_message(
                conversation_id,
                Message(sender_type=SenderType.USER, content=text, created_at=now),
            )

            classified = await self._orchestrator.classify(text, history, memory)
            memory = update_memory(memory, text, classified)
            if classified.updated_context:
                session.context.update(classified.updated_context)
            response = compose_response(classified, memory)

            await self._store.append_message(
                conversation_id,
                Message(
                    sender_type=SenderType.BOT,
                    content=response.response,
                    confidence=response.confidence,
                    metadata=response.metadata,
                    created_at=self._clock(),
                ),
            )
            await self._store.save_memory(conversation_id, memory)

            session.status = sm.transition(SessionTrigger.MESSAGE_PROCESSED)
            session.updated_at = now
            await self._store.update_session(session)
            await self._store.increment_metric(METRIC_MESSAGES_PROCESSED)

            logger.info(
                "Message processed via %s (confidence %.2f)",
                response.metadata.get("ai_model"), response.confidence,
            )
            return response

    async def update_location(self, conversation_id: str, location: Location) -> Ack:
        async with self._turn(conversation_id) as session:
            sm = self._require(session, SessionTrigger.LOCATION_UPDATED)
            now = self._clock()
            session.user_location = location
            session.location_updated_at = now
            session.updated_at = now
            session.status = sm.transition(SessionTrigger.LOCATION_UPDATED)
            await self._store.update_session(session)
            logger.info("Location updated")
            return Ack(message=LOCATION_ACK)

    async def generate_report(self, conversation_id: str) -> DiagnosticReport:
        with conversation_scope(conversation_id):
            await self._get_session(conversation_id)
            report = generate_report(await self._load_memory(conversation_id))
            logger.info("Report generated (%d symptoms)", len(report.symptoms))
            return report

    async def end(self, conversation_id: str, satisfaction_score: float) -> Ack:
        if not 0.0 <= satisfaction_score <= 100.0:
            raise ValueError(f"satisfaction_score must be within 0-100, got {satisfaction_score}")

        async with self._turn(conversation_id) as session:
            sm = SessionStateMachine(session.status)
            try:
                session.status = sm.transition(SessionTrigger.ENDED)
            except InvalidTransitionError as exc:
                raise SessionAlreadyCompleted(
                    f"Conversation {conversation_id} is already completed"
                ) from exc

            memory = record_satisfaction(
                await self._load_memory(conversation_id), satisfaction_score
            )
            now = self._clock()
            session.completed_at = now
            session.updated_at = now
            session.satisfaction_score = satisfaction_score
            session.completion_reason = "user_ended"

            await self._store.save_memory(conversation_id, memory)
            await self._store.update_session(session)
            logger.info("Conversation ended (satisfaction %.0f)", satisfaction_score)

        return Ack(message=GOODBYE_MESSAGE)

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    async def get_session(self, conversation_id: str) -> ConversationSession:
        return await self._get_session(conversation_id)

    async def get_memory(self, conversation_id: str) -> ConversationMemory:
        await self._get_session(conversation_id)
        return await self._load_memory(conversation_id)
