"""Tests for message signal detection."""

import unicodedata

import pytest

from repairbot.conversation.signals import (
    FrustrationDetector,
    PositivityDetector,
    SignalPipeline,
    StyleDetector,
    UrgencyDetector,
)
from repairbot.schemas.memory_schema import CommunicationStyle, UrgencyLevel


class TestStyleDetector:
    @pytest.mark.parametrize("text, expected", [
        ("Bonjour madame, pourriez-vous m'aider ?", CommunicationStyle.FORMAL),
        ("Salut, mon tel est mort", CommunicationStyle.CASUAL),
        ("Depuis la mise à jour du firmware", CommunicationStyle.TECHNICAL),
    ])
    def test_detects_style(self, text, expected):
        assert StyleDetector().detect(text) == expected

    def test_no_indicator(self):
        assert StyleDetector().detect("Mon écran est cassé") is None

    def test_word_boundary(self):
        # "nan" inside "maintenant" must not count as casual
        assert StyleDetector().detect("Il faut le réparer maintenant") is None

    def test_formal_takes_precedence(self):
        assert StyleDetector().detect("Salut madame") == CommunicationStyle.FORMAL


class TestUrgencyDetector:
    @pytest.mark.parametrize("text, expected", [
        ("C'est urgent !", UrgencyLevel.HIGH),
        ("J'en ai besoin tout de suite", UrgencyLevel.HIGH),
        ("Si possible cette semaine", UrgencyLevel.MEDIUM),
        ("Je ne suis pas pressé", UrgencyLevel.LOW),
    ])
    def test_detects_urgency(self, text, expected):
        assert UrgencyDetector().detect(text) == expected

    def test_no_indicator(self):
        assert UrgencyDetector().detect("Mon écran est cassé") is None


class TestMoodDetectors:
    def test_frustration(self):
        assert FrustrationDetector().detect("J'en ai vraiment marre")
        assert not FrustrationDetector().detect("Tout va bien")

    def test_positivity(self):
        assert PositivityDetector().detect("Merci pour votre aide")
        assert not PositivityDetector().detect("Mon écran est cassé")


class TestSignalPipeline:
    def test_combines_detectors(self):
        signals = SignalPipeline().analyze("Salut, c'est urgent, j'en ai marre")
        assert signals.style == CommunicationStyle.CASUAL
        assert signals.urgency == UrgencyLevel.HIGH
        assert signals.frustrated
        assert not signals.positive

    def test_empty_message(self):
        signals = SignalPipeline().analyze("")
        assert signals.style is None
        assert signals.urgency is None
        assert not signals.frustrated
        assert not signals.positive

    def test_decomposed_accents(self):
        text = unicodedata.normalize("NFD", "Il me le faut immédiatement")
        assert SignalPipeline().analyze(text).urgency == UrgencyLevel.HIGH
