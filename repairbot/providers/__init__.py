from repairbot.providers.llm import (
    LanguageModelProvider,
    OpenAICompatibleProvider,
    ProviderError,
    ProviderMalformedOutput,
    ProviderUnavailable,
)
from repairbot.providers.registry import (
    create_default_provider,
    create_provider,
    get_registered_providers,
    register_provider,
)

__all__ = [
    "LanguageModelProvider", "OpenAICompatibleProvider",
    "ProviderError", "ProviderUnavailable", "ProviderMalformedOutput",
    "create_provider", "register_provider", "get_registered_providers",
    "create_default_provider",
]
