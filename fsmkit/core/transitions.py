# fsmkit/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from fsmkit.core.hooks import Hook
from fsmkit.core.states import State


@dataclass(frozen=True)
class Transition:
    """
    Defines the path taken when an event arrives in a given state: the target
    state plus up to three hooks.

    :param target: The state the machine switches to.
    :param on_exit: Runs first, while the machine is still in the source state.
    :param action: Runs after the source state's exit hook, before the switch.
    :param on_entry: Runs after the switch, before the target state's entry hook.
    """

    target: State
    on_exit: Optional[Hook] = field(default=None, compare=False)
    action: Optional[Hook] = field(default=None, compare=False)
    on_entry: Optional[Hook] = field(default=None, compare=False)

    def hooks(self) -> Iterator[Tuple[str, Optional[Hook]]]:
        """Yield (field name, hook) pairs for every hook slot."""
        yield "on_exit", self.on_exit
        yield "action", self.action
        yield "on_entry", self.on_entry
