"""Per-conversation memory threaded through every turn.

The memory is folded, never edited in place: each turn produces a new
``ConversationMemory`` from the previous one (see
``repairbot.conversation.memory.update_memory``).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CommunicationStyle(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RepairerRef(BaseModel):
    """Lightweight pointer to a repairer near the customer."""

    name: str
    address: str
    rating: Optional[float] = None
    specialties: list[str] = Field(default_factory=list)
    lat: Optional[float] = None
    lng: Optional[float] = None
    distance_km: Optional[float] = None


class UserProfile(BaseModel):
    communication_style: CommunicationStyle = CommunicationStyle.FORMAL
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM
    previous_issues: list[str] = Field(default_factory=list)
    satisfaction_history: list[float] = Field(default_factory=list)


class ConversationContext(BaseModel):
    current_issue: Optional[str] = None
    diagnosis_stage: str = "greeting"
    collected_symptoms: list[str] = Field(default_factory=list)
    suggested_solutions: list[str] = Field(default_factory=list)
    nearby_repairers: list[RepairerRef] = Field(default_factory=list)


class EmotionalJourney(BaseModel):
    initial_mood: str = "neutral"
    current_mood: str = "neutral"
    frustration_level: int = Field(default=0, ge=0, le=10)
    confidence_level: float = Field(default=50.0, ge=0.0, le=100.0)
    recent_emotions: list[str] = Field(default_factory=list)


class ConversationMemory(BaseModel):
    """Cumulative state for one conversation."""

    user_profile: UserProfile = Field(default_factory=UserProfile)
    conversation_context: ConversationContext = Field(default_factory=ConversationContext)
    emotional_journey: EmotionalJourney = Field(default_factory=EmotionalJourney)
