"""
AI-first classification with a deterministic rule fallback.

One provider attempt per message, bounded by a timeout. The attempt is
reduced to a ``ProviderOutcome`` (a validated response or the error that
prevented one) and the cascade is an explicit branch on that outcome:

    provider ok      -> provider response
    provider failed  -> RuleClassifier.classify(text)

The cascade only runs AI -> rules. The rule classifier always succeeds,
so ``classify`` never raises a provider error to its caller.
"""

import asyncio
import json
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from repairbot.config import settings
from repairbot.conversation.rule_classifier import RuleClassifier
from repairbot.logging_context import get_conversation_logger
from repairbot.prompts.prompt_templates import build_diagnostic_prompt
from repairbot.providers.llm import (
    LanguageModelProvider,
    ProviderError,
    ProviderMalformedOutput,
    ProviderUnavailable,
)
from repairbot.schemas.conversation_schema import Message
from repairbot.schemas.memory_schema import ConversationMemory
from repairbot.schemas.response_schema import ClassifiedResponse

logger = get_conversation_logger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of one provider attempt: exactly one of response / error is set."""

    response: Optional[ClassifiedResponse] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.response is not None


def parse_provider_output(raw: str, model_name: str) -> ProviderOutcome:
    """Validate raw completion text against the ``ClassifiedResponse`` schema."""
    text = raw.strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ProviderOutcome(error=ProviderMalformedOutput(f"invalid JSON: {exc.msg}"))
    if not isinstance(data, dict):
        return ProviderOutcome(error=ProviderMalformedOutput("top-level JSON is not an object"))

    try:
        response = ClassifiedResponse.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        return ProviderOutcome(
            error=ProviderMalformedOutput(f"schema violation in: {', '.join(fields)}")
        )

    response.metadata = {
        **response.metadata,
        "ai_model": f"{model_name}-advanced",
        "category": response.diagnostic_data.diagnosis_stage or "general",
    }
    if response.reasoning:
        response.metadata["reasoning"] = response.reasoning
    return ProviderOutcome(response=response)


class AIOrchestrator:
    """Builds the prompt, calls the provider once, and falls back to rules."""

    def __init__(
        self,
        provider: Optional[LanguageModelProvider] = None,
        classifier: Optional[RuleClassifier] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._provider = provider
        self._classifier = classifier or RuleClassifier()
        self._timeout = (
            settings.model.timeout_seconds if timeout_seconds is None else timeout_seconds
        )

    @property
    def classifier(self) -> RuleClassifier:
        return self._classifier

    def build_messages(
        self, text: str, history: list[Message], memory: ConversationMemory
    ) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": build_diagnostic_prompt(text, history, memory)},
            {"role": "user", "content": text},
        ]

    async def classify(
        self, text: str, history: list[Message], memory: ConversationMemory
    ) -> ClassifiedResponse:
        if self._provider is None:
            return self._classifier.classify(text)

        outcome = await self._call_provider(text, history, memory)
        if outcome.ok:
            logger.debug("Answered by provider %s", self._provider.model_name)
            return outcome.response  # type: ignore[return-value]

        logger.warning(
            "Provider failed (%s: %s), falling back to rules",
            type(outcome.error).__name__, outcome.error,
        )
        return self._classifier.classify(text)

    async def _call_provider(
        self, text: str, history: list[Message], memory: ConversationMemory
    ) -> ProviderOutcome:
        assert self._provider is not None
        messages = self.build_messages(text, history, memory)
        try:
            raw = await asyncio.wait_for(self._provider.complete(messages), timeout=self._timeout)
        except asyncio.TimeoutError:
            return ProviderOutcome(
                error=ProviderUnavailable(f"no answer within {self._timeout:.1f}s")
            )
        except ProviderError as exc:
            return ProviderOutcome(error=exc)
        except Exception as exc:  # provider boundary: every failure selects the rule path
            logger.exception("Unexpected provider failure")
            return ProviderOutcome(error=ProviderUnavailable(f"{type(exc).__name__}: {exc}"))
        return parse_provider_output(raw, self._provider.model_name)
