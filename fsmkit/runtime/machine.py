# fsmkit/runtime/machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping, Optional, Union

from fsmkit.config import MachineConfig
from fsmkit.core.errors import HookError, MachineClosedError
from fsmkit.core.events import Event
from fsmkit.core.states import State
from fsmkit.core.table import TransitionTable
from fsmkit.core.transitions import Transition
from fsmkit.core.validations import Validator
from fsmkit.runtime.dispatcher import Dispatcher
from fsmkit.runtime.event_queue import EventQueue
from fsmkit.runtime.executor import TransitionExecutor
from fsmkit.runtime.notifier import StateCallback, StateNotifier, Subscription

logger = logging.getLogger(__name__)

TableLike = Union[TransitionTable, Mapping[Hashable, Mapping[Hashable, Transition]]]


class StateMachine:
    """
    A finite state machine driven by a queue of events.

    Events submitted with ``enqueue`` are processed strictly one at a time in
    submission order on the running asyncio loop. Each matched transition
    runs its hooks, switches state and then publishes the new state to
    subscribers. Events without a matching transition are passed to
    ``handle_invalid_event``; hook failures are passed to
    ``handle_hook_error``. Subclasses may override both.
    """

    def __init__(
        self,
        context: Any,
        state: State,
        table: TableLike,
        config: Optional[MachineConfig] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        """
        :param context: Initial context handed to the first hook.
        :param state: Initial state.
        :param table: A TransitionTable, or a nested mapping to build one from.
        :param config: Machine settings; defaults to MachineConfig().
        :param validator: Checks the table and initial state.
        :raises ValidationError: If the table or initial state is malformed.
        """
        self._config = config or MachineConfig()
        self._table = table if isinstance(table, TransitionTable) else TransitionTable(table)
        (validator or Validator()).check(self._table, state, self._config)

        self._notifier = StateNotifier()
        self._executor = TransitionExecutor(
            self._table,
            state,
            context,
            self._notifier,
            self.handle_invalid_event,
            self._config.hook_timeout,
        )
        self._dispatcher = Dispatcher(self._executor, EventQueue(), self.handle_hook_error)
        self._closed = False

    @property
    def state(self) -> State:
        """The current state."""
        return self._executor.state

    @property
    def context(self) -> Any:
        """The current context."""
        return self._executor.context

    @property
    def table(self) -> TransitionTable:
        return self._table

    @property
    def config(self) -> MachineConfig:
        return self._config

    @property
    def processing(self) -> bool:
        """True while an event is being processed."""
        return self._dispatcher.processing

    @property
    def pending(self) -> int:
        """Number of queued events not yet processed."""
        return self._dispatcher.pending

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, event: Event) -> None:
        """
        Submit an event. Returns immediately; the event is processed after
        all previously submitted events. Must be called from a coroutine or
        callback running on the event loop.

        :param event: The event to process.
        :raises MachineClosedError: If the machine has been closed.
        """
        if self._closed:
            raise MachineClosedError(f"{self._config.name} is closed; {event.name} rejected")
        self._dispatcher.submit(event)

    async def join(self) -> None:
        """Wait until every submitted event has been processed."""
        await self._dispatcher.join()

    def subscribe(self) -> Subscription:
        """Subscribe to state changes as an async iterator."""
        return self._notifier.subscribe()

    def listen(self, callback: StateCallback) -> Subscription:
        """Call ``callback`` with every new state."""
        return self._notifier.listen(callback)

    def close(self) -> None:
        """
        Close the state-change channel and stop accepting events. Events
        already queued are still processed but no longer published. Closing
        twice has no effect.
        """
        if self._closed:
            logger.debug("%s already closed", self._config.name)
            return
        self._closed = True
        self._notifier.close()
        logger.debug("%s closed with %d event(s) pending", self._config.name, self.pending)

    def handle_invalid_event(self, event: Event) -> None:
        """
        Called for events with no transition from the current state. State
        and context are left unchanged. The default logs the rejection.
        """
        logger.log(
            self._config.invalid_event_log_level,
            "%s: event %s not allowed in state %s",
            self._config.name,
            event.name,
            self.state.name,
        )

    def handle_hook_error(self, event: Event, error: HookError) -> None:
        """
        Called when a hook fails. The event has been abandoned and state and
        context rolled back; later events are still processed. The default
        logs the error with its traceback.
        """
        logger.error("%s: event %s abandoned: %s", self._config.name, event.name, error, exc_info=error)

    async def __aenter__(self) -> "StateMachine":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            await self.join()
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._config.name} state={self.state.name} pending={self.pending}>"
