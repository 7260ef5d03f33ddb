"""Tests for prompt construction and the welcome message."""

import pytest

from repairbot.config import settings
from repairbot.prompts.prompt_templates import (
    build_diagnostic_prompt,
    build_history_section,
    build_repairers_section,
    build_welcome_message,
    greeting_for_hour,
)
from repairbot.prompts.system_prompts import RESPONSE_FORMAT
from repairbot.schemas.conversation_schema import Message, SenderType
from repairbot.schemas.memory_schema import ConversationMemory, RepairerRef


def _messages(n: int) -> list[Message]:
    return [
        Message(sender_type=SenderType.USER if i % 2 == 0 else SenderType.BOT, content=f"m{i}")
        for i in range(n)
    ]


class TestHistorySection:
    def test_empty_history(self):
        assert "aucun message précédent" in build_history_section([])

    def test_most_recent_last(self):
        section = build_history_section(_messages(3))
        lines = section.splitlines()[1:]
        assert lines[0] == "1. Client: m0"
        assert lines[1] == f"2. {settings.assistant.name}: m1"
        assert lines[2] == "3. Client: m2"

    def test_window_keeps_latest(self):
        lines = build_history_section(_messages(20), window=15).splitlines()[1:]
        assert len(lines) == 15
        assert lines[0] == f"1. {settings.assistant.name}: m5"
        assert lines[-1] == f"15. {settings.assistant.name}: m19"


class TestRepairersSection:
    def test_empty_when_no_repairers(self):
        assert build_repairers_section([]) == ""

    def test_limit(self):
        repairers = [RepairerRef(name=f"R{i}", address="A") for i in range(8)]
        section = build_repairers_section(repairers, limit=5)
        assert "R4" in section
        assert "R5" not in section


class TestDiagnosticPrompt:
    def test_contains_message_and_format(self):
        prompt = build_diagnostic_prompt("Mon écran", [], ConversationMemory())
        assert '"Mon écran"' in prompt
        assert RESPONSE_FORMAT in prompt
        assert "RÉPARATEURS" not in prompt

    def test_includes_repairers_when_known(self):
        memory = ConversationMemory()
        memory.conversation_context.nearby_repairers = [RepairerRef(name="Atelier", address="A")]
        prompt = build_diagnostic_prompt("Mon écran", [], memory)
        assert "Atelier" in prompt


class TestWelcome:
    @pytest.mark.parametrize("hour, expected", [
        (0, "Bonjour"), (11, "Bonjour"), (12, "Bon après-midi"),
        (17, "Bon après-midi"), (18, "Bonsoir"), (23, "Bonsoir"),
    ])
    def test_greeting_bands(self, hour, expected):
        assert greeting_for_hour(hour) == expected

    def test_names_assistant_and_brand(self):
        message = build_welcome_message(9, has_location=False)
        assert settings.assistant.name in message
        assert settings.assistant.brand in message

    def test_location_sentence(self):
        assert "localisation" in build_welcome_message(9, has_location=True)
        assert "localisation" not in build_welcome_message(9, has_location=False)
