# fsmkit/runtime/dispatcher.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from fsmkit.core.errors import HookError
from fsmkit.core.events import Event
from fsmkit.runtime.event_queue import EventQueue
from fsmkit.runtime.executor import TransitionExecutor

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Feeds queued events to the executor one at a time.

    A single drain task is the only consumer of the queue. ``submit`` appends
    and starts the task if none is alive; events submitted while a transition
    is in flight (including from inside its hooks) wait their turn. The task
    exits once the queue is empty.
    """

    def __init__(
        self,
        executor: TransitionExecutor,
        queue: Optional[EventQueue] = None,
        on_hook_error: Optional[Callable[[Event, HookError], None]] = None,
    ) -> None:
        """
        :param executor: Applies each event.
        :param queue: Pending events; a fresh EventQueue by default.
        :param on_hook_error: Called when the executor raises HookError.
        """
        self._executor = executor
        self._queue = queue if queue is not None else EventQueue()
        self._on_hook_error = on_hook_error
        self._task: Optional[asyncio.Task] = None
        self._processing = False

    @property
    def processing(self) -> bool:
        """True while an event is inside the executor."""
        return self._processing

    @property
    def pending(self) -> int:
        """Number of events waiting in the queue."""
        return len(self._queue)

    @property
    def idle(self) -> bool:
        """True when no drain task is running."""
        return self._task is None

    def submit(self, event: Event) -> None:
        """
        Queue an event and make sure a drain task is running. Returns
        without waiting for the event to be processed.

        :raises RuntimeError: If called without a running event loop.
        """
        loop = asyncio.get_running_loop()
        self._queue.enqueue(event)
        logger.debug("Queued %s (%d pending)", event.name, len(self._queue))
        if self._task is None:
            self._task = loop.create_task(self._drain())

    async def join(self) -> None:
        """
        Wait until the queue is empty and no event is in flight.

        :raises RuntimeError: If awaited from inside a hook, which would never finish.
        """
        if self._task is not None and self._task is asyncio.current_task():
            raise RuntimeError("join() cannot be awaited from inside a hook")
        while self._task is not None:
            await asyncio.shield(self._task)

    def clear(self) -> int:
        """
        Drop every queued event that has not started processing.

        :return: Number of events dropped.
        """
        dropped = len(self._queue)
        self._queue.clear()
        return dropped

    async def _drain(self) -> None:
        try:
            while True:
                event = self._queue.dequeue()
                if event is None:
                    break
                self._processing = True
                try:
                    await self._executor.execute(event)
                except HookError as error:
                    self._handle_hook_error(event, error)
                except Exception:
                    logger.exception("Unexpected error while processing %s", event.name)
                finally:
                    self._processing = False
        finally:
            self._task = None

    def _handle_hook_error(self, event: Event, error: HookError) -> None:
        if self._on_hook_error is None:
            logger.error("Event %s abandoned: %s", event.name, error, exc_info=error)
            return
        try:
            self._on_hook_error(event, error)
        except Exception:
            logger.exception("Hook error handler failed for %s", event.name)
