# fsmkit/runtime/notifier.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from fsmkit.core.errors import NotifierClosedError
from fsmkit.core.states import State

logger = logging.getLogger(__name__)

StateCallback = Callable[[State], Union[None, Awaitable[None]]]

_CLOSED = object()


class Subscription:
    """
    One subscriber's handle on a StateNotifier.

    A stream subscription buffers published states in its own queue and is
    consumed with ``async for``; iteration ends once the notifier is closed and
    the buffer is drained. A callback subscription invokes its callback from
    within ``publish`` instead.
    """

    def __init__(self, notifier: "StateNotifier", callback: Optional[StateCallback] = None) -> None:
        self._notifier = notifier
        self._callback = callback
        self._queue: Optional[asyncio.Queue] = asyncio.Queue() if callback is None else None
        self._active = True

    @property
    def active(self) -> bool:
        """False once cancelled or once the notifier closed."""
        return self._active

    def cancel(self) -> None:
        """Stop receiving states. Safe to call more than once."""
        if not self._active:
            return
        self._notifier._remove(self)
        self._complete()

    async def _deliver(self, state: State) -> None:
        if not self._active:
            return
        if self._callback is None:
            self._queue.put_nowait(state)
            return
        result = self._callback(state)
        if inspect.isawaitable(result):
            await result

    def _complete(self) -> None:
        self._active = False
        if self._queue is not None:
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        if self._queue is None:
            raise TypeError("Callback subscriptions cannot be iterated")
        return self

    async def __anext__(self) -> State:
        item = await self._queue.get()
        if item is _CLOSED:
            # Keep the sentinel so later iterations also stop.
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.cancel()


class StateNotifier:
    """
    Broadcast channel of State values. Every state is delivered to each
    subscriber registered at the time of ``publish``; late subscribers get no
    replay.
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        """
        Register a stream subscriber.

        :return: An async-iterable Subscription.
        :raises NotifierClosedError: If the notifier is closed.
        """
        return self._add(Subscription(self))

    def listen(self, callback: StateCallback) -> Subscription:
        """
        Register a callback subscriber. Async callbacks are awaited by ``publish``.

        :param callback: Called with every published state.
        :return: A Subscription whose ``cancel`` removes the callback.
        :raises NotifierClosedError: If the notifier is closed.
        """
        return self._add(Subscription(self, callback))

    async def publish(self, state: State) -> None:
        """
        Deliver a state to all current subscribers. A failing callback is
        logged and does not prevent delivery to the others.

        :raises NotifierClosedError: If the notifier is closed.
        """
        if self._closed:
            raise NotifierClosedError(f"Cannot publish {state.name}: notifier is closed")

        logger.debug("Publishing %s to %d subscriber(s)", state.name, len(self._subscriptions))
        for subscription in list(self._subscriptions):
            try:
                await subscription._deliver(state)
            except Exception:
                logger.exception("State subscriber failed while handling %s", state.name)

    def close(self) -> None:
        """
        Terminate the channel. Stream subscribers finish iterating after the
        states already buffered; closing twice has no effect.
        """
        if self._closed:
            logger.debug("Notifier already closed")
            return
        self._closed = True
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription._complete()

    def _add(self, subscription: Subscription) -> Subscription:
        if self._closed:
            raise NotifierClosedError("Cannot subscribe: notifier is closed")
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
