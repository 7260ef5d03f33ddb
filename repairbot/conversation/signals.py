"""
Keyword-based signal detection on incoming user messages.

Four independent detectors, each reading a different cue:
1. StyleDetector      : formal / casual / technical register
2. UrgencyDetector    : how quickly the customer needs the repair
3. FrustrationDetector: annoyance markers that raise the frustration level
4. PositivityDetector : thanks and relief that lower it

They are composed into a SignalPipeline whose output feeds the memory fold.
A detector that finds no cue returns None so the previous profile value is kept.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

from repairbot.schemas.memory_schema import CommunicationStyle, UrgencyLevel

logger = logging.getLogger(__name__)


def _compile_patterns(phrases: list[str]) -> re.Pattern[str]:
    """Compile a list of phrases into a single word-boundary regex."""
    escaped = [re.escape(p) for p in phrases]
    return re.compile(r"\b(?:" + "|".join(escaped) + r")\b", re.IGNORECASE)


@dataclass(frozen=True)
class MessageSignals:
    """Everything the detectors found in one user message."""

    style: Optional[CommunicationStyle] = None
    urgency: Optional[UrgencyLevel] = None
    frustrated: bool = False
    positive: bool = False


class StyleDetector:
    """Infers the customer's register from indicator words."""

    FORMAL_INDICATORS = ["monsieur", "madame", "veuillez", "pourriez-vous", "j'aimerais"]
    CASUAL_INDICATORS = ["salut", "coucou", "ouais", "nan", "cool"]
    TECHNICAL_INDICATORS = ["firmware", "logiciel", "système", "version", "rom"]

    _FORMAL_RE = _compile_patterns(FORMAL_INDICATORS)
    _TECHNICAL_RE = _compile_patterns(TECHNICAL_INDICATORS)
    _CASUAL_RE = _compile_patterns(CASUAL_INDICATORS)

    def detect(self, text: str) -> Optional[CommunicationStyle]:
        if self._FORMAL_RE.search(text):
            return CommunicationStyle.FORMAL
        if self._TECHNICAL_RE.search(text):
            return CommunicationStyle.TECHNICAL
        if self._CASUAL_RE.search(text):
            return CommunicationStyle.CASUAL
        return None


class UrgencyDetector:
    """Maps urgency phrases to a tier, checking the highest tier first."""

    INDICATORS: dict[UrgencyLevel, list[str]] = {
        UrgencyLevel.HIGH: [
            "urgent", "rapidement", "vite", "tout de suite", "immédiatement", "en panne",
        ],
        UrgencyLevel.MEDIUM: ["bientôt", "prochainement", "cette semaine"],
        UrgencyLevel.LOW: ["quand vous pouvez", "pas pressé", "dans quelques jours"],
    }

    _PATTERNS = {level: _compile_patterns(phrases) for level, phrases in INDICATORS.items()}

    def detect(self, text: str) -> Optional[UrgencyLevel]:
        for level, pattern in self._PATTERNS.items():
            match = pattern.search(text)
            if match:
                logger.debug("Urgency indicator detected: '%s' (%s)", match.group(0), level.value)
                return level
        return None


class FrustrationDetector:
    """Detects annoyance that should raise the frustration level."""

    FRUSTRATION_KEYWORDS = [
        "marre", "énervé", "agacé", "nul", "inadmissible", "inacceptable",
        "toujours pas", "encore une fois", "ça ne marche pas", "ras le bol",
    ]

    _RE = _compile_patterns(FRUSTRATION_KEYWORDS)

    def detect(self, text: str) -> bool:
        match = self._RE.search(text)
        if match:
            logger.info("Frustration keyword detected: '%s'", match.group(0))
            return True
        return False


class PositivityDetector:
    """Detects thanks or relief that should ease the frustration level."""

    POSITIVE_KEYWORDS = ["merci", "super", "parfait", "génial", "top", "rassuré"]

    _RE = _compile_patterns(POSITIVE_KEYWORDS)

    def detect(self, text: str) -> bool:
        return self._RE.search(text) is not None


class SignalPipeline:
    """Runs every detector over a user message."""

    def __init__(self) -> None:
        self.style = StyleDetector()
        self.urgency = UrgencyDetector()
        self.frustration = FrustrationDetector()
        self.positivity = PositivityDetector()

    def analyze(self, text: str) -> MessageSignals:
        text = unicodedata.normalize("NFC", text)
        return MessageSignals(
            style=self.style.detect(text),
            urgency=self.urgency.detect(text),
            frustrated=self.frustration.detect(text),
            positive=self.positivity.detect(text),
        )
