# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum, auto
from typing import List

import pytest

from fsmkit.core.events import Event
from fsmkit.core.states import State
from fsmkit.core.table import TransitionTable
from fsmkit.core.transitions import Transition
from fsmkit.runtime.machine import StateMachine


class Mode(Enum):
    IDLE = auto()
    RUNNING = auto()


class Command(Enum):
    START = auto()
    STOP = auto()


class RecordingMachine(StateMachine):
    """StateMachine that records rejected events instead of only logging them."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rejected: List[tuple] = []
        self.hook_errors: List[tuple] = []

    def handle_invalid_event(self, event: Event) -> None:
        self.rejected.append((event.kind, self.state.kind))
        super().handle_invalid_event(event)

    def handle_hook_error(self, event, error) -> None:
        self.hook_errors.append((event.kind, error))


@pytest.fixture
def idle():
    return State(Mode.IDLE)


@pytest.fixture
def running():
    return State(Mode.RUNNING)


@pytest.fixture
def start_stop_table(idle, running):
    """(IDLE, START) -> RUNNING and (RUNNING, STOP) -> IDLE."""
    return TransitionTable(
        {
            Mode.IDLE: {Command.START: Transition(target=running)},
            Mode.RUNNING: {Command.STOP: Transition(target=idle)},
        }
    )


@pytest.fixture
def machine_factory(idle, start_stop_table):
    """Returns a factory building a RecordingMachine over the start/stop table."""

    def _factory(context=None, state=None, table=None, **kwargs):
        return RecordingMachine(
            context if context is not None else {},
            state or idle,
            table if table is not None else start_stop_table,
            **kwargs,
        )

    return _factory


@pytest.fixture
def trace():
    """A shared list hooks append their names to."""
    return []


@pytest.fixture
def kinds():
    """The (state kind, event kind) enum classes used by the start/stop table."""
    return Mode, Command
