# fsmkit/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Hashable, List, Optional, Type

from fsmkit.core.errors import ValidationError
from fsmkit.core.events import kind_name
from fsmkit.core.states import State
from fsmkit.core.table import TransitionTable
from fsmkit.core.transitions import Transition

if TYPE_CHECKING:
    from fsmkit.config import MachineConfig


class Validator:
    """
    Construction-time checks of the initial state and transition table.
    Rule violations are collected so that a single ValidationError reports
    all of them.
    """

    def validate(self, table: TransitionTable, initial_state: Any, config: "MachineConfig") -> List[str]:
        """
        Run every rule and return the list of violations.

        :param table: The transition table to check.
        :param initial_state: The state the machine starts in.
        :param config: Supplies the optional enum classes kinds must belong to.
        :return: Human-readable error messages, empty if everything is valid.
        """
        errors: List[str] = []

        if not isinstance(initial_state, State):
            errors.append(f"Initial state must be a State, got {type(initial_state).__name__}")
        else:
            errors.extend(_check_state(initial_state, "Initial state"))
            errors.extend(_check_kind(initial_state.kind, config.state_kinds, "Initial state kind"))

        for state_kind, event_kind, transition in table:
            where = f"({kind_name(state_kind)}, {kind_name(event_kind)})"
            errors.extend(_check_kind(state_kind, config.state_kinds, f"State kind of {where}"))
            errors.extend(_check_kind(event_kind, config.event_kinds, f"Event kind of {where}"))

            if not isinstance(transition, Transition):
                errors.append(f"Entry {where} must be a Transition, got {type(transition).__name__}")
                continue
            for slot, hook in transition.hooks():
                if hook is not None and not callable(hook):
                    errors.append(f"Transition {where} hook '{slot}' is not callable")
            if not isinstance(transition.target, State):
                errors.append(f"Transition {where} target must be a State")
                continue
            errors.extend(_check_state(transition.target, f"Target of {where}"))
            errors.extend(_check_kind(transition.target.kind, config.state_kinds, f"Target kind of {where}"))

        return errors

    def check(self, table: TransitionTable, initial_state: Any, config: "MachineConfig") -> None:
        """
        Validate and raise on the first report.

        :raises ValidationError: If any rule fails.
        """
        errors = self.validate(table, initial_state, config)
        if errors:
            raise ValidationError("\n".join(errors), {"errors": errors})


def _check_state(state: State, label: str) -> List[str]:
    errors = []
    if state.on_entry is not None and not callable(state.on_entry):
        errors.append(f"{label} {state.name} has a non-callable entry hook")
    if state.on_exit is not None and not callable(state.on_exit):
        errors.append(f"{label} {state.name} has a non-callable exit hook")
    return errors


def _check_kind(kind: Hashable, enum_cls: Optional[Type[Enum]], label: str) -> List[str]:
    if enum_cls is None or isinstance(kind, enum_cls):
        return []
    return [f"{label} {kind!r} is not a member of {enum_cls.__name__}"]
