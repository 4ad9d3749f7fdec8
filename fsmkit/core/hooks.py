# fsmkit/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

# A hook takes the current context and returns a replacement context, or None
# to keep it. Coroutine functions are awaited.
Hook = Callable[[Any], Union[Any, Awaitable[Any]]]


class HookDeadlineExceeded(Exception):
    """
    Raised by ``run_hook`` when a hook outlives its timeout. Distinct from any
    TimeoutError the hook raises itself.
    """

    def __init__(self, timeout: float) -> None:
        super().__init__(f"hook did not finish within {timeout}s")
        self.timeout = timeout


def hook_name(hook: Hook) -> str:
    """Best-effort readable name of a hook callable, used in logs and errors."""
    return getattr(hook, "__qualname__", None) or getattr(hook, "__name__", None) or repr(hook)


async def run_hook(hook: Optional[Hook], context: Any, timeout: Optional[float] = None) -> Any:
    """
    Invoke a hook with the context and return the context that should be
    used from now on.

    :param hook: Sync or async callable; None is a no-op.
    :param context: The current context.
    :param timeout: Seconds to wait for an awaitable result; None waits forever.
    :return: The hook's replacement context, or ``context`` if it returned None.
    :raises HookDeadlineExceeded: If the awaitable did not finish in time.
    """
    if hook is None:
        return context

    result = hook(context)
    if inspect.isawaitable(result):
        if timeout is None:
            result = await result
        else:
            result = await _await_with_deadline(result, timeout)

    return context if result is None else result


async def _await_with_deadline(awaitable: Awaitable[Any], timeout: float) -> Any:
    task = asyncio.ensure_future(awaitable)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task not in done:
        task.cancel()
        await asyncio.wait({task})
        raise HookDeadlineExceeded(timeout)

    # Exceptions raised by the hook itself, TimeoutError included, propagate unchanged.
    return task.result()
