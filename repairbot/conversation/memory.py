"""
Pure fold of one conversation turn into ``ConversationMemory``.

``update_memory`` never mutates its input: it deep-copies the previous
memory, applies the turn, clamps the bounded fields and returns the copy.
Identical inputs always give identical outputs.

Fold order:
    1. union detected symptoms into collected_symptoms (never removes)
    2. overwrite diagnosis_stage when the engine reports one
    3. append newly proposed solutions
    4. recompute frustration from recent emotions and message signals
    5. overwrite confidence from confidence_diagnosis (scaled to 0-100)
    6. set current_mood from the detected emotion
plus profile updates from message signals and current-issue tracking.
"""

import logging
from typing import Optional

from repairbot.config import settings
from repairbot.conversation.signals import MessageSignals, SignalPipeline
from repairbot.schemas.memory_schema import ConversationMemory, RepairerRef
from repairbot.schemas.response_schema import ClassifiedResponse
from repairbot.utils import clamp

logger = logging.getLogger(__name__)

MIN_FRUSTRATION = 0
MAX_FRUSTRATION = 10
MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 100.0

NEGATIVE_EMOTIONS = frozenset({"concern", "frustration"})
POSITIVE_EMOTIONS = frozenset({"excitement", "relief", "satisfaction"})
REPEATED_NEGATIVE_THRESHOLD = 2

_signals = SignalPipeline()


def _merge_unique(existing: list[str], new_items: list[str]) -> list[str]:
    """Append items not already present, keeping first-seen order."""
    merged = list(existing)
    for item in new_items:
        if item and item not in merged:
            merged.append(item)
    return merged


def _next_frustration(
    current: int,
    recent_emotions: list[str],
    detected_emotion: Optional[str],
    signals: MessageSignals,
) -> int:
    level = current
    negatives = sum(1 for emotion in recent_emotions if emotion in NEGATIVE_EMOTIONS)
    if detected_emotion in NEGATIVE_EMOTIONS and negatives >= REPEATED_NEGATIVE_THRESHOLD:
        level += 1
    if signals.frustrated:
        level += 1
    if signals.positive or detected_emotion in POSITIVE_EMOTIONS:
        level -= 1
    return int(clamp(level, MIN_FRUSTRATION, MAX_FRUSTRATION))


def update_memory(
    previous: ConversationMemory,
    user_message: str,
    engine_output: ClassifiedResponse,
) -> ConversationMemory:
    """Fold one turn (user message + engine output) into a new memory."""
    memory = previous.model_copy(deep=True)
    profile = memory.user_profile
    context = memory.conversation_context
    journey = memory.emotional_journey
    diagnostic = engine_output.diagnostic_data
    detected_emotion = engine_output.emotional_context.detected_emotion
    signals = _signals.analyze(user_message)

    context.collected_symptoms = _merge_unique(
        context.collected_symptoms, diagnostic.symptoms_detected
    )

    if diagnostic.diagnosis_stage:
        context.diagnosis_stage = diagnostic.diagnosis_stage

    context.suggested_solutions = _merge_unique(
        context.suggested_solutions, diagnostic.suggested_solutions
    )

    if diagnostic.symptoms_detected:
        issue = diagnostic.symptoms_detected[0]
        if context.current_issue and context.current_issue != issue:
            profile.previous_issues = _merge_unique(
                profile.previous_issues, [context.current_issue]
            )
        context.current_issue = issue

    if detected_emotion:
        window = settings.memory.emotion_window
        journey.recent_emotions = (journey.recent_emotions + [detected_emotion])[-window:]
    journey.frustration_level = _next_frustration(
        journey.frustration_level, journey.recent_emotions, detected_emotion, signals
    )

    if diagnostic.confidence_diagnosis is not None:
        journey.confidence_level = clamp(
            diagnostic.confidence_diagnosis * 100, MIN_CONFIDENCE, MAX_CONFIDENCE
        )

    if detected_emotion:
        journey.current_mood = detected_emotion

    if signals.style is not None:
        profile.communication_style = signals.style
    if signals.urgency is not None:
        profile.urgency_level = signals.urgency
    elif diagnostic.urgency_level is not None:
        profile.urgency_level = diagnostic.urgency_level

    logger.debug(
        "Memory folded: %d symptom(s), stage=%s, frustration=%d, confidence=%.1f",
        len(context.collected_symptoms),
        context.diagnosis_stage,
        journey.frustration_level,
        journey.confidence_level,
    )
    return memory


def with_nearby_repairers(
    memory: ConversationMemory, repairers: list[RepairerRef]
) -> ConversationMemory:
    """Return a copy of ``memory`` with the nearby repairer list replaced."""
    updated = memory.model_copy(deep=True)
    updated.conversation_context.nearby_repairers = [r.model_copy() for r in repairers]
    return updated


def record_satisfaction(memory: ConversationMemory, score: float) -> ConversationMemory:
    """Return a copy of ``memory`` with ``score`` appended to the satisfaction history."""
    updated = memory.model_copy(deep=True)
    updated.user_profile.satisfaction_history.append(float(score))
    if updated.conversation_context.current_issue:
        updated.user_profile.previous_issues = _merge_unique(
            updated.user_profile.previous_issues,
            [updated.conversation_context.current_issue],
        )
    return updated
