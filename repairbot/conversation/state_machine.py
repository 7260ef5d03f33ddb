"""
Finite state machine for the conversation session lifecycle.

    created --ACTIVATED--> active --ENDED--> completed

``created`` is transient: a session is activated before ``start`` returns.
``active`` loops on itself for every processed message or location update.
``completed`` is terminal; nothing leads back to ``active``.

Usage:
    sm = SessionStateMachine()
    sm.transition(SessionTrigger.ACTIVATED)
    assert sm.current_state == ConversationStatus.ACTIVE
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from repairbot.schemas.conversation_schema import ConversationStatus

logger = logging.getLogger(__name__)


class SessionTrigger(str, Enum):
    """Events that cause state transitions."""
    ACTIVATED = "activated"
    MESSAGE_PROCESSED = "message_processed"
    LOCATION_UPDATED = "location_updated"
    ENDED = "ended"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: ConversationStatus
    to_state: ConversationStatus
    trigger: SessionTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: ConversationStatus
    entered_at: datetime
    trigger: Optional[SessionTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class SessionStateMachine:
    """
    Deterministic lifecycle controller for one conversation session.

    The machine can be rebuilt from a persisted status, so the session
    manager checks every operation against the stored state rather than
    trusting the caller.
    """

    TRANSITIONS: list[Transition] = [
        Transition(ConversationStatus.CREATED, ConversationStatus.ACTIVE,
                   SessionTrigger.ACTIVATED),
        Transition(ConversationStatus.ACTIVE, ConversationStatus.ACTIVE,
                   SessionTrigger.MESSAGE_PROCESSED),
        Transition(ConversationStatus.ACTIVE, ConversationStatus.ACTIVE,
                   SessionTrigger.LOCATION_UPDATED),
        Transition(ConversationStatus.ACTIVE, ConversationStatus.COMPLETED,
                   SessionTrigger.ENDED),
    ]

    def __init__(self, initial: ConversationStatus = ConversationStatus.CREATED) -> None:
        self._current_state = initial
        self._history: list[StateEntry] = [
            StateEntry(state=initial, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> ConversationStatus:
        return self._current_state

    def can_transition(self, trigger: SessionTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def transition(self, trigger: SessionTrigger) -> ConversationStatus:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new session state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Session transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[SessionTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state == ConversationStatus.COMPLETED
