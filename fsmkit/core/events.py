# fsmkit/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from enum import Enum
from typing import Hashable


def kind_name(kind: Hashable) -> str:
    """Readable name for a state or event kind."""
    if isinstance(kind, Enum):
        return kind.name
    return str(kind)


@dataclass(frozen=True)
class Event:
    """
    Represents a trigger submitted to the state machine. An event carries
    nothing but its kind; the kind is the key used to look up transitions.
    """

    kind: Hashable

    @property
    def name(self) -> str:
        """The name of the event kind."""
        return kind_name(self.kind)
