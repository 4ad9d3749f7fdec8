# fsmkit/core/table.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Hashable, Iterator, Mapping, Optional, Tuple

from fsmkit.core.errors import DuplicateTransitionError
from fsmkit.core.transitions import Transition


class TransitionTable:
    """
    Read-only mapping from state kind to event kind to Transition.

    The table is built once and never changes afterwards. Lookups are exact
    matches on (state kind, event kind); there are no wildcard rows, so every
    state registers its own handlers.
    """

    def __init__(self, rows: Optional[Mapping[Hashable, Mapping[Hashable, Transition]]] = None) -> None:
        """
        Copy ``rows`` into frozen views.

        :param rows: Nested mapping ``{state_kind: {event_kind: Transition}}``.
        """
        frozen: Dict[Hashable, Mapping[Hashable, Transition]] = {}
        for state_kind, row in (rows or {}).items():
            frozen[state_kind] = MappingProxyType(dict(row))
        self._rows: Mapping[Hashable, Mapping[Hashable, Transition]] = MappingProxyType(frozen)

    def lookup(self, state_kind: Hashable, event_kind: Hashable) -> Optional[Transition]:
        """
        Return the transition registered for the pair, or None.
        """
        row = self._rows.get(state_kind)
        if row is None:
            return None
        return row.get(event_kind)

    def state_kinds(self) -> Tuple[Hashable, ...]:
        """State kinds that have at least one outgoing row."""
        return tuple(self._rows)

    def events_for(self, state_kind: Hashable) -> Mapping[Hashable, Transition]:
        """Read-only view of the transitions leaving ``state_kind``."""
        return self._rows.get(state_kind, MappingProxyType({}))

    @property
    def rows(self) -> Mapping[Hashable, Mapping[Hashable, Transition]]:
        return self._rows

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return self.lookup(*pair) is not None

    def __iter__(self) -> Iterator[Tuple[Hashable, Hashable, Transition]]:
        for state_kind, row in self._rows.items():
            for event_kind, transition in row.items():
                yield state_kind, event_kind, transition

    def __len__(self) -> int:
        return sum(len(row) for row in self._rows.values())

    def __repr__(self) -> str:
        return f"TransitionTable({len(self)} transitions over {len(self._rows)} states)"


class TransitionTableBuilder:
    """
    Collects transitions one pair at a time and produces a TransitionTable.
    Registering the same (state kind, event kind) pair twice is an error.
    """

    def __init__(self) -> None:
        self._rows: Dict[Hashable, Dict[Hashable, Transition]] = {}

    def add(self, state_kind: Hashable, event_kind: Hashable, transition: Transition) -> "TransitionTableBuilder":
        """
        Register a transition.

        :param state_kind: Kind of the source state.
        :param event_kind: Kind of the triggering event.
        :param transition: The transition to take.
        :return: This builder, for chaining.
        :raises DuplicateTransitionError: If the pair is already registered.
        """
        row = self._rows.setdefault(state_kind, {})
        if event_kind in row:
            raise DuplicateTransitionError(state_kind, event_kind)
        row[event_kind] = transition
        return self

    def build(self) -> TransitionTable:
        """Freeze the collected rows into a table."""
        return TransitionTable(self._rows)
