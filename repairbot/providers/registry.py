"""
Provider registry: build the configured language-model client by name.

Factories are registered under the ``LLM_PROVIDER`` names they serve.
``create_default_provider`` returns None when no API key is configured,
which makes the engine answer from the rule classifier alone.
"""

import logging
from typing import Any, Callable, Optional

from repairbot.config import settings
from repairbot.providers.llm import LanguageModelProvider, OpenAICompatibleProvider

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, Callable[..., LanguageModelProvider]] = {}


def register_provider(name: str, factory: Callable[..., LanguageModelProvider]) -> None:
    """Register a provider factory by name."""
    _PROVIDER_REGISTRY[name] = factory
    logger.debug("Provider registered: %s", name)


def create_provider(name: str, **kwargs: Any) -> LanguageModelProvider:
    """Create a provider instance by registered name.

    Raises:
        KeyError: If the provider name is not registered.
    """
    if name not in _PROVIDER_REGISTRY:
        registered = list(_PROVIDER_REGISTRY.keys())
        raise KeyError(f"Provider '{name}' not registered. Available: {registered}")
    return _PROVIDER_REGISTRY[name](**kwargs)


def get_registered_providers() -> list[str]:
    """Return names of all registered providers."""
    return list(_PROVIDER_REGISTRY.keys())


def create_default_provider() -> Optional[LanguageModelProvider]:
    """Build the provider named in settings, or None without an API key."""
    cfg = settings.model
    if not cfg.api_key:
        logger.info("No provider API key configured, answering with rules only")
        return None
    return create_provider(cfg.provider, api_key=cfg.api_key)


def _auto_register() -> None:
    """Register the built-in OpenAI-compatible endpoints. Called once at import time."""
    register_provider("openai", OpenAICompatibleProvider)
    register_provider(
        "openrouter",
        lambda **kwargs: OpenAICompatibleProvider(
            base_url=kwargs.pop("base_url", "https://openrouter.ai/api/v1"), **kwargs
        ),
    )


_auto_register()
