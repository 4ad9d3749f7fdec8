# fsmkit/runtime/executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from fsmkit.core.errors import HookError, HookTimeoutError
from fsmkit.core.events import Event
from fsmkit.core.hooks import Hook, HookDeadlineExceeded, hook_name, run_hook
from fsmkit.core.states import State
from fsmkit.core.table import TransitionTable
from fsmkit.core.transitions import Transition
from fsmkit.runtime.notifier import StateNotifier

logger = logging.getLogger(__name__)


class TransitionExecutor:
    """
    Owns the current state and context and applies one event at a time.

    For a matched transition the hooks run in this order, each one receiving
    the context produced by the previous one:

    1. transition exit hook (still in the source state)
    2. source state's exit hook
    3. transition action
    4. switch to the target state
    5. transition entry hook
    6. target state's entry hook

    The new state is then published. If a hook fails, state and context are
    restored to their values from before the transition and nothing is
    published.
    """

    def __init__(
        self,
        table: TransitionTable,
        state: State,
        context: Any,
        notifier: StateNotifier,
        on_invalid_event: Callable[[Event], None],
        hook_timeout: Optional[float] = None,
    ) -> None:
        """
        :param table: Transition lookup table.
        :param state: Initial state.
        :param context: Initial context.
        :param notifier: Receives the new state after every transition.
        :param on_invalid_event: Called with events that match no transition.
        :param hook_timeout: Optional per-hook timeout in seconds.
        """
        self._table = table
        self._state = state
        self._context = context
        self._notifier = notifier
        self._on_invalid_event = on_invalid_event
        self._hook_timeout = hook_timeout

    @property
    def state(self) -> State:
        return self._state

    @property
    def context(self) -> Any:
        return self._context

    async def execute(self, event: Event) -> bool:
        """
        Apply an event to the current state.

        :param event: The event to process.
        :return: True if a transition ran, False if the event was rejected.
        :raises HookError: If any hook fails; state and context are rolled back.
        """
        transition = self._table.lookup(self._state.kind, event.kind)
        if transition is None:
            self._on_invalid_event(event)
            return False

        source, original_context = self._state, self._context
        try:
            await self._run_pipeline(transition, event)
        except (HookError, asyncio.CancelledError):
            self._state, self._context = source, original_context
            raise

        logger.debug("Transition %s --%s--> %s complete", source.name, event.name, self._state.name)
        if self._notifier.closed:
            logger.debug("Notifier closed, %s not published", self._state.name)
        else:
            await self._notifier.publish(self._state)
        return True

    async def _run_pipeline(self, transition: Transition, event: Event) -> None:
        await self._run_step("transition exit", transition.on_exit, event)
        await self._run_step("state exit", self._state.on_exit, event)
        await self._run_step("transition action", transition.action, event)

        self._state = transition.target

        await self._run_step("transition entry", transition.on_entry, event)
        await self._run_step("state entry", self._state.on_entry, event)

    async def _run_step(self, step: str, hook: Optional[Hook], event: Event) -> None:
        if hook is None:
            return

        name = hook_name(hook)
        logger.debug("Running %s hook %s in %s for %s", step, name, self._state.name, event.name)
        try:
            self._context = await run_hook(hook, self._context, self._hook_timeout)
        except HookDeadlineExceeded as e:
            raise HookTimeoutError(
                f"{step} hook {name} timed out after {e.timeout}s in state {self._state.name}",
                name,
                event,
                self._state,
            ) from e
        except Exception as e:
            raise HookError(
                f"{step} hook {name} failed in state {self._state.name}: {e}", name, event, self._state
            ) from e
