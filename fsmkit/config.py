# fsmkit/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Type

from fsmkit.core.errors import ValidationError


@dataclass(frozen=True)
class MachineConfig:
    """
    Per-machine settings.

    :param name: Label used in log records and ``repr``.
    :param hook_timeout: Seconds each hook may take before it fails with
        HookTimeoutError. None means hooks may run indefinitely.
    :param invalid_event_log_level: Level at which rejected events are logged.
    :param state_kinds: Optional enum class every state kind must belong to.
    :param event_kinds: Optional enum class every event kind must belong to.
    """

    name: str = "StateMachine"
    hook_timeout: Optional[float] = None
    invalid_event_log_level: int = logging.WARNING
    state_kinds: Optional[Type[Enum]] = None
    event_kinds: Optional[Type[Enum]] = None

    def __post_init__(self) -> None:
        if self.hook_timeout is not None and self.hook_timeout <= 0:
            raise ValidationError(
                f"hook_timeout must be positive, got {self.hook_timeout}", {"hook_timeout": self.hook_timeout}
            )
