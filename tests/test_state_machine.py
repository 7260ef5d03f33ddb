"""Tests for the session lifecycle state machine."""

import pytest

from repairbot.conversation.state_machine import (
    InvalidTransitionError,
    SessionStateMachine,
    SessionTrigger,
)
from repairbot.schemas.conversation_schema import ConversationStatus


class TestInitialState:
    def test_starts_in_created(self, state_machine):
        assert state_machine.current_state == ConversationStatus.CREATED

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()

    def test_only_activation_is_valid(self, state_machine):
        assert state_machine.get_valid_triggers() == [SessionTrigger.ACTIVATED]

    def test_cannot_process_before_activation(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(SessionTrigger.MESSAGE_PROCESSED)


class TestActiveLoop:
    def test_activation(self, state_machine):
        assert state_machine.transition(SessionTrigger.ACTIVATED) == ConversationStatus.ACTIVE

    def test_message_keeps_session_active(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        for _ in range(3):
            assert (
                state_machine.transition(SessionTrigger.MESSAGE_PROCESSED)
                == ConversationStatus.ACTIVE
            )

    def test_location_keeps_session_active(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        assert (
            state_machine.transition(SessionTrigger.LOCATION_UPDATED)
            == ConversationStatus.ACTIVE
        )

    def test_valid_triggers_when_active(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        assert set(state_machine.get_valid_triggers()) == {
            SessionTrigger.MESSAGE_PROCESSED,
            SessionTrigger.LOCATION_UPDATED,
            SessionTrigger.ENDED,
        }

    def test_cannot_activate_twice(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(SessionTrigger.ACTIVATED)


class TestCompletion:
    def test_end_is_terminal(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        assert state_machine.transition(SessionTrigger.ENDED) == ConversationStatus.COMPLETED
        assert state_machine.is_terminal()
        assert state_machine.get_valid_triggers() == []

    @pytest.mark.parametrize("trigger", list(SessionTrigger))
    def test_nothing_leaves_completed(self, trigger):
        sm = SessionStateMachine(ConversationStatus.COMPLETED)
        assert not sm.can_transition(trigger)
        with pytest.raises(InvalidTransitionError):
            sm.transition(trigger)

    def test_error_lists_valid_triggers(self):
        sm = SessionStateMachine(ConversationStatus.ACTIVE)
        sm.transition(SessionTrigger.ENDED)
        with pytest.raises(InvalidTransitionError, match="completed"):
            sm.transition(SessionTrigger.ENDED)


class TestRebuild:
    def test_rebuilt_from_persisted_status(self):
        sm = SessionStateMachine(ConversationStatus.ACTIVE)
        assert sm.can_transition(SessionTrigger.MESSAGE_PROCESSED)

    def test_state_trace(self, state_machine):
        state_machine.transition(SessionTrigger.ACTIVATED)
        state_machine.transition(SessionTrigger.MESSAGE_PROCESSED)
        state_machine.transition(SessionTrigger.ENDED)
        assert state_machine.get_state_trace() == ["created", "active", "active", "completed"]
