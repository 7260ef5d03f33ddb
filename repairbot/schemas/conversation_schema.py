"""Conversation session and message records."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SenderType(str, Enum):
    USER = "user"
    BOT = "bot"


class ConversationStatus(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"


class UserType(str, Enum):
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class Message(BaseModel):
    """A single turn persisted for a conversation."""

    sender_type: SenderType
    content: str
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)


class ConversationSession(BaseModel):
    """Lifecycle record for one conversation, owned by the session manager."""

    conversation_id: str
    session_id: str
    user_id: Optional[str] = None
    user_type: UserType = UserType.ANONYMOUS
    status: ConversationStatus = ConversationStatus.ACTIVE
    user_location: Optional[tuple[float, float]] = None
    location_updated_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    satisfaction_score: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    completion_reason: Optional[str] = None
    context: dict[str, Any] = Field(default_factory=dict)
