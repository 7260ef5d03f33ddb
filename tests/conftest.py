"""Shared test fixtures and helpers."""

import asyncio
import json
from datetime import datetime
from typing import Any, Optional

import pytest

from repairbot.conversation.orchestrator import AIOrchestrator
from repairbot.conversation.rule_classifier import RuleClassifier
from repairbot.conversation.session_manager import SessionManager
from repairbot.conversation.state_machine import SessionStateMachine
from repairbot.engine import ChatbotEngine
from repairbot.schemas.response_schema import (
    Action,
    ClassifiedResponse,
    DiagnosticData,
    EmotionalContext,
)
from repairbot.tools.repairers import InMemoryRepairerDirectory
from repairbot.tools.store import InMemoryStore

FIXED_NOW = datetime(2026, 3, 2, 10, 30)
PARIS = (48.8566, 2.3522)


class FakeProvider:
    """Scripted language-model provider. Records every call it receives."""

    def __init__(
        self,
        raw: Optional[str] = None,
        exc: Optional[BaseException] = None,
        delay: float = 0.0,
        model_name: str = "fake-model",
    ) -> None:
        self.raw = raw
        self.exc = exc
        self.delay = delay
        self.model_name = model_name
        self.calls: list[list[dict[str, str]]] = []

    async def complete(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.raw or ""


def provider_payload(**overrides: Any) -> dict[str, Any]:
    """A well-formed provider answer, as a dict."""
    payload: dict[str, Any] = {
        "content": "D'après vos symptômes, le connecteur de charge semble en cause.",
        "confidence": 0.85,
        "complexity": "complex",
        "suggestions": ["Nettoyer le port", "Tester un autre câble"],
        "actions": [{"type": "button", "label": "Voir les réparateurs", "action": "show_repairers"}],
        "emotional_context": {
            "detected_emotion": "concern",
            "response_tone": "reassuring",
            "adaptation_made": "ton rassurant",
        },
        "diagnostic_data": {
            "symptoms_detected": ["charging_port"],
            "diagnosis_stage": "diagnosis",
            "estimated_cost": "40-70€",
            "urgency_level": "medium",
            "confidence_diagnosis": 0.8,
            "suggested_solutions": ["Remplacement du connecteur de charge"],
        },
        "reasoning": "Le téléphone ne charge qu'avec un câble tordu.",
    }
    payload.update(overrides)
    return payload


def provider_json(**overrides: Any) -> str:
    return json.dumps(provider_payload(**overrides), ensure_ascii=False)


def make_classified(
    content: str = "Réponse de test",
    confidence: float = 0.7,
    symptoms: Optional[list[str]] = None,
    stage: Optional[str] = "symptom_collection",
    solutions: Optional[list[str]] = None,
    emotion: Optional[str] = "supportive",
    confidence_diagnosis: Optional[float] = None,
    suggestions: Optional[list[str]] = None,
    actions: Optional[list[Action]] = None,
    complexity: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> ClassifiedResponse:
    """Helper to create a ClassifiedResponse with sensible defaults."""
    return ClassifiedResponse(
        content=content,
        confidence=confidence,
        complexity=complexity,
        suggestions=suggestions if suggestions is not None else ["Question 1"],
        actions=actions or [],
        emotional_context=EmotionalContext(detected_emotion=emotion, response_tone="caring"),
        diagnostic_data=DiagnosticData(
            symptoms_detected=symptoms or [],
            diagnosis_stage=stage,
            confidence_diagnosis=confidence_diagnosis,
            suggested_solutions=solutions or [],
        ),
        metadata=metadata or {},
    )


@pytest.fixture
def state_machine():
    return SessionStateMachine()


@pytest.fixture
def classifier():
    return RuleClassifier()


@pytest.fixture
def store():
    store = InMemoryStore()
    yield store
    store.reset()


@pytest.fixture
def directory():
    return InMemoryRepairerDirectory()


@pytest.fixture
def rules_orchestrator():
    return AIOrchestrator(provider=None)


@pytest.fixture
def session_manager(store, directory, rules_orchestrator):
    return SessionManager(
        store=store,
        orchestrator=rules_orchestrator,
        repairers=directory,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def engine(session_manager):
    return ChatbotEngine(session_manager)
