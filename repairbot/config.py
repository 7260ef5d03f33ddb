"""
Centralized configuration with environment variable overrides.

Assistant wording, classifier thresholds, memory windows, and provider
settings are configurable here. Nothing is hardcoded in engine logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from repairbot.logging_context import conversation_handler

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(conversation_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class AssistantConfig:
    """User-facing identity and canned wording."""

    name: str = os.getenv("ASSISTANT_NAME", "Ben")
    brand: str = os.getenv("BRAND_NAME", "RepairConnect")
    estimated_timeline: str = os.getenv("ESTIMATED_TIMELINE", "1-3 jours ouvrés")
    fallback_response: str = os.getenv(
        "FALLBACK_RESPONSE",
        "Désolé pour le problème technique ! Je suis toujours là pour vous aider. 😊",
    )


@dataclass(frozen=True)
class ModelConfig:
    """Language-model provider settings."""

    provider: str = os.getenv("LLM_PROVIDER", "openai")
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    base_url: str = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    api_key: str = os.getenv("OPENAI_API_KEY", "")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.3")
    max_tokens: int = _safe_int("LLM_MAX_TOKENS", "800")
    timeout_seconds: float = _safe_float("PROVIDER_TIMEOUT_SECONDS", "8.0")
    connect_timeout_seconds: float = _safe_float("PROVIDER_CONNECT_TIMEOUT_SECONDS", "3.0")


@dataclass(frozen=True)
class ClassifierConfig:
    """Rule classifier thresholds."""

    min_confidence: float = _safe_float("RULE_MIN_CONFIDENCE", "0.3")
    generic_confidence: float = _safe_float("RULE_GENERIC_CONFIDENCE", "0.6")
    max_follow_ups: int = _safe_int("RULE_MAX_FOLLOW_UPS", "3")


@dataclass(frozen=True)
class MemoryConfig:
    """Windows and limits applied while folding conversation memory."""

    history_window: int = _safe_int("HISTORY_WINDOW", "15")
    max_repairer_hints: int = _safe_int("MAX_REPAIRER_HINTS", "5")
    emotion_window: int = _safe_int("EMOTION_WINDOW", "3")
    max_suggestions: int = _safe_int("MAX_SUGGESTIONS", "4")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if config.model.max_tokens < 1:
        raise ValueError(f"LLM_MAX_TOKENS must be >= 1, got {config.model.max_tokens}")
    if config.model.timeout_seconds <= 0:
        raise ValueError(
            f"PROVIDER_TIMEOUT_SECONDS must be > 0, got {config.model.timeout_seconds}"
        )
    if config.model.connect_timeout_seconds <= 0:
        raise ValueError(
            "PROVIDER_CONNECT_TIMEOUT_SECONDS must be > 0, "
            f"got {config.model.connect_timeout_seconds}"
        )

    for rate_name, rate_value in [
        ("RULE_MIN_CONFIDENCE", config.classifier.min_confidence),
        ("RULE_GENERIC_CONFIDENCE", config.classifier.generic_confidence),
    ]:
        if not 0.0 <= rate_value <= 1.0:
            raise ValueError(f"{rate_name} must be between 0.0 and 1.0, got {rate_value}")

    for count_name, count_value in [
        ("RULE_MAX_FOLLOW_UPS", config.classifier.max_follow_ups),
        ("HISTORY_WINDOW", config.memory.history_window),
        ("EMOTION_WINDOW", config.memory.emotion_window),
        ("MAX_SUGGESTIONS", config.memory.max_suggestions),
    ]:
        if count_value < 1:
            raise ValueError(f"{count_name} must be >= 1, got {count_value}")

    if config.memory.max_repairer_hints < 0:
        raise ValueError(
            f"MAX_REPAIRER_HINTS must be >= 0, got {config.memory.max_repairer_hints}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[conversation_handler()],
    )
    logger.info("Configuration loaded for assistant '%s'", config.assistant.name)
    return config


# Singleton instance
settings = load_config()
