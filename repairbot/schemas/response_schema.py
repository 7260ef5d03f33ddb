"""Classifier output, outbound payloads, and the diagnostic report.

``ClassifiedResponse`` is the strict contract both the language-model
provider and the rule classifier must satisfy. Provider JSON that does
not validate against it is treated as malformed output and never
reaches the composer.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repairbot.schemas.memory_schema import UrgencyLevel

Complexity = Literal["simple", "medium", "complex"]


class Action(BaseModel):
    """A button or location directive rendered next to a bot message."""

    type: Literal["button", "location"]
    label: str
    action: str


class EmotionalContext(BaseModel):
    detected_emotion: Optional[str] = None
    response_tone: Optional[str] = None
    adaptation_made: Optional[str] = None


class DiagnosticData(BaseModel):
    symptoms_detected: list[str] = Field(default_factory=list)
    diagnosis_stage: Optional[str] = None
    estimated_cost: Optional[str] = None
    urgency_level: Optional[UrgencyLevel] = None
    confidence_diagnosis: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    suggested_solutions: list[str] = Field(default_factory=list)


class ClassifiedResponse(BaseModel):
    """Structured answer produced by the AI provider or the rule classifier."""

    model_config = ConfigDict(extra="ignore")

    content: str
    confidence: float = Field(ge=0.0, le=1.0)
    suggestions: list[str]
    actions: list[Action]
    emotional_context: EmotionalContext
    diagnostic_data: DiagnosticData
    complexity: Optional[Complexity] = None
    reasoning: Optional[str] = None
    updated_context: Optional[dict[str, Any]] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value


class EngineResponse(BaseModel):
    """Outbound payload for a processed user message."""

    response: str
    confidence: float
    suggestions: list[str] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    emotional_context: dict[str, Any] = Field(default_factory=dict)
    diagnostic_data: DiagnosticData = Field(default_factory=DiagnosticData)
    metadata: dict[str, Any] = Field(default_factory=dict)


class StartResult(BaseModel):
    conversation_id: str
    message: str
    suggestions: list[str] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)


class Ack(BaseModel):
    success: bool = True
    message: str


class DiagnosticReport(BaseModel):
    """Projection of conversation memory into a shareable summary."""

    summary: str
    symptoms: list[str]
    recommendations: list[str]
    estimated_timeline: str
    confidence_level: float
