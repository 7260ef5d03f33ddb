"""Validated request payloads, one model per engine action."""

from typing import Annotated, Optional

from pydantic import BaseModel, Field

Latitude = Annotated[float, Field(ge=-90.0, le=90.0, allow_inf_nan=False)]
Longitude = Annotated[float, Field(ge=-180.0, le=180.0, allow_inf_nan=False)]
Location = tuple[Latitude, Longitude]


class StartConversationRequest(BaseModel):
    session_id: str = Field(min_length=1)
    user_id: Optional[str] = None
    user_location: Optional[Location] = None


class SendMessageRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    content: str = Field(min_length=1)
    user_location: Optional[Location] = None


class LocationUpdatedRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    user_location: Location


class DiagnosticReportRequest(BaseModel):
    conversation_id: str = Field(min_length=1)


class EndConversationRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    satisfaction_score: float = Field(ge=0.0, le=100.0)
