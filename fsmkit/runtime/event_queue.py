# fsmkit/runtime/event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from fsmkit.core.events import Event


class EventQueue:
    """
    FIFO holding events that have been submitted but not yet processed.
    Only the dispatcher's drain task removes events, so no lock is needed
    while everything runs on one event loop.
    """

    def __init__(self) -> None:
        self._queue: Deque[Event] = deque()

    def enqueue(self, event: Event) -> None:
        """
        Add an event at the tail of the queue.

        :param event: The event to enqueue.
        """
        self._queue.append(event)

    def dequeue(self) -> Optional[Event]:
        """
        Remove and return the head event, or None if the queue is empty.
        """
        if self._queue:
            return self._queue.popleft()
        return None

    def clear(self) -> None:
        """
        Remove all events from the queue.
        """
        self._queue.clear()

    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)
