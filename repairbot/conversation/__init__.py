from repairbot.conversation.orchestrator import AIOrchestrator, ProviderOutcome
from repairbot.conversation.rule_classifier import IntentMatch, RuleClassifier
from repairbot.conversation.session_manager import (
    SessionAlreadyCompleted,
    SessionManager,
    SessionNotFound,
)
from repairbot.conversation.signals import SignalPipeline
from repairbot.conversation.state_machine import (
    InvalidTransitionError,
    SessionStateMachine,
    SessionTrigger,
)

__all__ = [
    "AIOrchestrator",
    "ProviderOutcome",
    "RuleClassifier",
    "IntentMatch",
    "SessionManager",
    "SessionNotFound",
    "SessionAlreadyCompleted",
    "SignalPipeline",
    "SessionStateMachine",
    "SessionTrigger",
    "InvalidTransitionError",
]
