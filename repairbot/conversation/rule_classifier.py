"""
Deterministic keyword classifier, the guaranteed-available baseline.

Scores a message against every lexicon entry by the ratio of the entry's
keywords present in the message (matched / total keywords of that entry),
keeps the strictly highest score so ties resolve to the earliest entry,
and only commits to an intent when that score clears the configured
minimum confidence. Anything below falls through to a generic prompt
asking the customer to describe the problem.

Usage:
    classifier = RuleClassifier()
    result = classifier.classify("Mon écran est cassé")
    assert result.diagnostic_data.symptoms_detected == ["screen_broken"]
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from repairbot.config import settings
from repairbot.schemas.memory_schema import UrgencyLevel
from repairbot.schemas.response_schema import (
    Action,
    ClassifiedResponse,
    DiagnosticData,
    EmotionalContext,
)
from repairbot.tools.intents import (
    GENERIC_RESPONSE,
    GENERIC_SUGGESTIONS,
    INTENT_LEXICON,
    IntentDefinition,
)
from repairbot.utils import normalize_text, words_in

logger = logging.getLogger(__name__)

RULES_MODEL = "enhanced_rules"
RULES_FALLBACK_MODEL = "enhanced_rules_fallback"


@dataclass(frozen=True)
class IntentMatch:
    """Score of one lexicon entry against a message."""

    intent: IntentDefinition
    matched: int
    score: float


class RuleClassifier:
    """Keyword-overlap intent classifier. Never fails, never calls out."""

    def __init__(
        self,
        lexicon: Sequence[IntentDefinition] = INTENT_LEXICON,
        min_confidence: Optional[float] = None,
        generic_confidence: Optional[float] = None,
        max_follow_ups: Optional[int] = None,
    ) -> None:
        self._lexicon = tuple(lexicon)
        cfg = settings.classifier
        self.min_confidence = cfg.min_confidence if min_confidence is None else min_confidence
        self.generic_confidence = (
            cfg.generic_confidence if generic_confidence is None else generic_confidence
        )
        self.max_follow_ups = cfg.max_follow_ups if max_follow_ups is None else max_follow_ups

    def score_all(self, text: str) -> list[IntentMatch]:
        """Score every lexicon entry, preserving lexicon order."""
        words = words_in(normalize_text(text))
        matches = []
        for intent in self._lexicon:
            if not intent.keywords:
                continue
            matched = len(intent.keywords & words)
            matches.append(IntentMatch(intent, matched, matched / len(intent.keywords)))
        return matches

    def best_match(self, text: str) -> Optional[IntentMatch]:
        """Return the winning entry, or None if nothing clears the threshold."""
        best: Optional[IntentMatch] = None
        for match in self.score_all(text):
            if best is None or match.score > best.score:
                best = match
        if best is None or best.score <= self.min_confidence:
            return None
        return best

    def classify(self, text: str) -> ClassifiedResponse:
        match = self.best_match(text)
        if match is None:
            logger.debug("No intent above %.2f, using generic response", self.min_confidence)
            return self._generic_response()
        logger.debug("Intent '%s' selected (score %.3f)", match.intent.id, match.score)
        return self._intent_response(match)

    def _intent_response(self, match: IntentMatch) -> ClassifiedResponse:
        intent = match.intent
        questions = list(intent.follow_up_questions[: self.max_follow_ups])
        numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, start=1))
        urgent = intent.urgency == UrgencyLevel.HIGH

        return ClassifiedResponse(
            content=f"{intent.opening_response}\n\n{numbered}",
            confidence=match.score,
            complexity="medium",
            suggestions=questions,
            actions=[
                Action(type="button", label="Voir les réparateurs", action="show_repairers"),
                Action(type="button", label="Estimation détaillée", action="detailed_quote"),
            ],
            emotional_context=EmotionalContext(
                detected_emotion="concern" if urgent else "supportive",
                response_tone="urgent" if urgent else "caring",
            ),
            diagnostic_data=DiagnosticData(
                symptoms_detected=[intent.id],
                diagnosis_stage="symptom_collection",
                estimated_cost=intent.estimated_cost_range,
                urgency_level=intent.urgency,
                confidence_diagnosis=match.score,
                suggested_solutions=list(intent.solutions),
            ),
            metadata={"ai_model": RULES_MODEL, "category": "diagnostic", "intent": intent.id},
        )

    def _generic_response(self) -> ClassifiedResponse:
        return ClassifiedResponse(
            content=GENERIC_RESPONSE,
            confidence=self.generic_confidence,
            complexity="simple",
            suggestions=list(GENERIC_SUGGESTIONS),
            actions=[
                Action(type="button", label="Diagnostic guidé", action="guided_diagnostic"),
            ],
            emotional_context=EmotionalContext(
                detected_emotion="supportive",
                response_tone="encouraging",
            ),
            diagnostic_data=DiagnosticData(
                symptoms_detected=[],
                diagnosis_stage="problem_identification",
                urgency_level=UrgencyLevel.MEDIUM,
            ),
            metadata={"ai_model": RULES_FALLBACK_MODEL, "category": "general"},
        )
