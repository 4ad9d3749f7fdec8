# fsmkit/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""Asyncio finite state machine runtime with ordered hooks and state notifications."""

from fsmkit.config import MachineConfig
from fsmkit.core.errors import (
    DuplicateTransitionError,
    FSMError,
    HookError,
    HookTimeoutError,
    MachineClosedError,
    NotifierClosedError,
    ValidationError,
)
from fsmkit.core.events import Event
from fsmkit.core.states import State
from fsmkit.core.table import TransitionTable, TransitionTableBuilder
from fsmkit.core.transitions import Transition
from fsmkit.core.validations import Validator
from fsmkit.runtime.machine import StateMachine
from fsmkit.runtime.notifier import StateNotifier, Subscription

__all__ = [
    "DuplicateTransitionError",
    "Event",
    "FSMError",
    "HookError",
    "HookTimeoutError",
    "MachineClosedError",
    "MachineConfig",
    "NotifierClosedError",
    "State",
    "StateMachine",
    "StateNotifier",
    "Subscription",
    "Transition",
    "TransitionTable",
    "TransitionTableBuilder",
    "ValidationError",
    "Validator",
]
