"""Merge the winning classification and updated memory into the outbound payload."""

from typing import Optional

from repairbot.config import settings
from repairbot.schemas.memory_schema import ConversationMemory
from repairbot.schemas.response_schema import Action, ClassifiedResponse, EngineResponse

DEFAULT_COMPLEXITY = "medium"
REQUEST_LOCATION = Action(type="location", label="Partager ma position", action="request_location")


def compose_response(
    classified: ClassifiedResponse,
    memory: ConversationMemory,
    max_suggestions: Optional[int] = None,
) -> EngineResponse:
    """Build the ``EngineResponse`` for one turn. Inputs are not modified."""
    limit = settings.memory.max_suggestions if max_suggestions is None else max_suggestions
    journey = memory.emotional_journey

    actions = [action.model_copy() for action in classified.actions]
    if not memory.conversation_context.nearby_repairers and not any(
        a.action == REQUEST_LOCATION.action for a in actions
    ):
        actions.append(REQUEST_LOCATION.model_copy())

    emotional_context = classified.emotional_context.model_dump(exclude_none=True)
    emotional_context.update(
        current_mood=journey.current_mood,
        frustration_level=journey.frustration_level,
        confidence_level=journey.confidence_level,
    )

    metadata = dict(classified.metadata)
    metadata["complexity"] = classified.complexity or DEFAULT_COMPLEXITY
    metadata.setdefault("ai_model", "unknown")

    return EngineResponse(
        response=classified.content,
        confidence=classified.confidence,
        suggestions=classified.suggestions[:limit],
        actions=actions,
        emotional_context=emotional_context,
        diagnostic_data=classified.diagnostic_data.model_copy(deep=True),
        metadata=metadata,
    )
