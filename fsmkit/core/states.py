# fsmkit/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Optional

from fsmkit.core.events import kind_name
from fsmkit.core.hooks import Hook


@dataclass(frozen=True)
class State:
    """
    Represents a mode the machine can occupy. Every state may carry an
    entry hook and an exit hook; both receive the machine context and may
    return a replacement for it.

    States are never mutated; a transition replaces the current state with
    its target.
    """

    kind: Hashable
    on_entry: Optional[Hook] = field(default=None, compare=False)
    on_exit: Optional[Hook] = field(default=None, compare=False)

    @property
    def name(self) -> str:
        """The name of the state kind."""
        return kind_name(self.kind)

    def __repr__(self) -> str:
        return f"State({self.name})"
