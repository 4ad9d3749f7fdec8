# fsmkit/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from fsmkit.core.events import Event
    from fsmkit.core.states import State


class FSMError(Exception):
    """
    Base exception class for errors raised by the state machine runtime.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(FSMError):
    """
    Raised when a transition table or machine configuration is malformed.
    """


class DuplicateTransitionError(ValidationError):
    """
    Raised when a second transition is registered for the same (state, event) pair.
    """

    def __init__(self, state_kind: Any, event_kind: Any) -> None:
        super().__init__(
            f"Transition for event {event_kind!r} in state {state_kind!r} is already registered",
            {"state_kind": state_kind, "event_kind": event_kind},
        )
        self.state_kind = state_kind
        self.event_kind = event_kind


class HookError(FSMError):
    """
    Raised when an entry, exit or transition hook fails while an event is processed.
    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, hook_name: str, event: "Event", state: "State") -> None:
        super().__init__(message, {"hook": hook_name, "event": event.name, "state": state.name})
        self.hook_name = hook_name
        self.event = event
        self.state = state


class HookTimeoutError(HookError):
    """
    Raised when a hook does not complete within the configured hook timeout.
    """


class NotifierClosedError(FSMError):
    """
    Raised when publishing to or subscribing on a closed state notifier.
    """


class MachineClosedError(FSMError):
    """
    Raised when an event is enqueued on a machine that has been closed.
    """
