"""
Action dispatcher, the single outward entry point of the engine.

A payload carries an ``action`` discriminator plus the fields that action
needs. ``ChatbotEngine.handle`` validates the payload against the action's
request model, calls the session manager, and turns the result (or the
error) into an ``ActionResult`` with an HTTP-style status code. Every error
body carries the canned ``fallback_response`` so callers always have a
human-readable message to show.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ValidationError

from repairbot.config import settings
from repairbot.conversation.orchestrator import AIOrchestrator
from repairbot.conversation.session_manager import (
    SessionAlreadyCompleted,
    SessionManager,
    SessionNotFound,
)
from repairbot.providers.registry import create_default_provider
from repairbot.schemas.request_schema import (
    DiagnosticReportRequest,
    EndConversationRequest,
    LocationUpdatedRequest,
    SendMessageRequest,
    StartConversationRequest,
)
from repairbot.tools.repairers import InMemoryRepairerDirectory, RepairerDirectory
from repairbot.tools.store import InMemoryStore, Store

logger = logging.getLogger(__name__)

UNKNOWN_ACTION = "Action non reconnue"


class RequestValidationError(Exception):
    """The payload is missing an action, names an unknown one, or fails validation."""


@dataclass
class ActionResult:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class ChatbotEngine:
    """Routes action payloads to the session manager."""

    def __init__(self, sessions: SessionManager) -> None:
        self._sessions = sessions
        self._handlers: dict[
            str, tuple[type[BaseModel], Callable[[Any], Awaitable[BaseModel]]]
        ] = {
            "start_conversation": (StartConversationRequest, self._start),
            "send_message": (SendMessageRequest, self._send_message),
            "location_updated": (LocationUpdatedRequest, self._location_updated),
            "generate_diagnostic_report": (DiagnosticReportRequest, self._report),
            "end_conversation": (EndConversationRequest, self._end),
        }

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    @property
    def actions(self) -> list[str]:
        return list(self._handlers)

    async def handle(self, payload: dict[str, Any]) -> ActionResult:
        """Dispatch one payload. Never raises."""
        action = payload.get("action") if isinstance(payload, dict) else None
        try:
            request_model, handler = self._resolve(action)
            try:
                request = request_model.model_validate(payload)
            except ValidationError as exc:
                raise RequestValidationError(_describe_validation(exc)) from exc
            result = await handler(request)
        except RequestValidationError as exc:
            logger.info("Rejected %s payload: %s", action or "unknown", exc)
            return _error(400, str(exc))
        except SessionAlreadyCompleted as exc:
            logger.info("Rejected %s: %s", action, exc)
            return _error(409, str(exc))
        except SessionNotFound as exc:
            logger.info("Rejected %s: %s", action, exc)
            return _error(404, str(exc))
        except Exception:
            logger.exception("Action %s failed", action)
            return _error(500, "Erreur interne")

        body = result.model_dump(mode="json")
        if action == "generate_diagnostic_report":
            body = {"report": body}
        return ActionResult(status_code=200, body=body)

    def _resolve(self, action: Optional[str]):
        if not action or action not in self._handlers:
            raise RequestValidationError(UNKNOWN_ACTION)
        return self._handlers[action]

    async def _start(self, request: StartConversationRequest):
        return await self._sessions.start(
            request.session_id, user_id=request.user_id, location=request.user_location
        )

    async def _send_message(self, request: SendMessageRequest):
        return await self._sessions.process_message(
            request.conversation_id, request.content, location=request.user_location
        )

    async def _location_updated(self, request: LocationUpdatedRequest):
        return await self._sessions.update_location(
            request.conversation_id, request.user_location
        )

    async def _report(self, request: DiagnosticReportRequest):
        return await self._sessions.generate_report(request.conversation_id)

    async def _end(self, request: EndConversationRequest):
        return await self._sessions.end(request.conversation_id, request.satisfaction_score)


def _describe_validation(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "payload"
        problems.append(f"{loc}: {err['msg']}")
    return "; ".join(problems)


def _error(status_code: int, message: str) -> ActionResult:
    return ActionResult(
        status_code=status_code,
        body={
            "error": message,
            "fallback_response": settings.assistant.fallback_response,
        },
    )


def build_engine(
    store: Optional[Store] = None,
    repairers: Optional[RepairerDirectory] = None,
    orchestrator: Optional[AIOrchestrator] = None,
) -> ChatbotEngine:
    """Wire an engine from settings, defaulting to in-memory collaborators."""
    if orchestrator is None:
        orchestrator = AIOrchestrator(provider=create_default_provider())
    sessions = SessionManager(
        store=store if store is not None else InMemoryStore(),
        orchestrator=orchestrator,
        repairers=repairers if repairers is not None else InMemoryRepairerDirectory(),
    )
    return ChatbotEngine(sessions)
