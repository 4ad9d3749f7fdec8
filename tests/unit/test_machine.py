# tests/unit/test_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
import logging

import pytest

from fsmkit.config import MachineConfig
from fsmkit.core.errors import MachineClosedError, NotifierClosedError, ValidationError
from fsmkit.core.events import Event
from fsmkit.core.states import State
from fsmkit.core.transitions import Transition
from fsmkit.runtime.machine import StateMachine


@pytest.mark.asyncio
async def test_initial_properties(machine_factory):
    machine = machine_factory(context={"count": 0})
    assert machine.state.name == "IDLE"
    assert machine.context == {"count": 0}
    assert machine.pending == 0
    assert not machine.processing
    assert not machine.closed
    assert len(machine.table) == 2
    assert "IDLE" in repr(machine)


def test_nested_mapping_is_accepted_as_table():
    machine = StateMachine(None, State("A"), {"A": {"go": Transition(target=State("B"))}})
    assert machine.table.lookup("A", "go").target.kind == "B"


def test_invalid_table_rejected_at_construction():
    with pytest.raises(ValidationError):
        StateMachine(None, State("A"), {"A": {"go": "B"}})


def test_declared_kinds_enforced(machine_factory, kinds):
    mode, command = kinds
    machine_factory(config=MachineConfig(state_kinds=mode, event_kinds=command))
    with pytest.raises(ValidationError):
        machine_factory(config=MachineConfig(state_kinds=command))


@pytest.mark.asyncio
async def test_enqueue_processes_asynchronously(machine_factory, kinds):
    _, command = kinds
    machine = machine_factory()
    machine.enqueue(Event(command.START))

    assert machine.state.name == "IDLE"
    assert machine.pending == 1

    await machine.join()
    assert machine.state.name == "RUNNING"
    assert machine.pending == 0


@pytest.mark.asyncio
async def test_invalid_event_is_logged(machine_factory, kinds, caplog):
    mode, command = kinds
    machine = machine_factory(config=MachineConfig(name="Pump"))

    with caplog.at_level(logging.WARNING, logger="fsmkit.runtime.machine"):
        machine.enqueue(Event(command.STOP))
        await machine.join()

    assert "Pump: event STOP not allowed in state IDLE" in caplog.text
    assert machine.rejected == [(command.STOP, mode.IDLE)]


@pytest.mark.asyncio
async def test_invalid_event_log_level_is_configurable(caplog):
    machine = StateMachine(None, State("A"), {}, config=MachineConfig(invalid_event_log_level=logging.DEBUG))
    with caplog.at_level(logging.INFO, logger="fsmkit.runtime.machine"):
        machine.enqueue(Event("x"))
        await machine.join()
    assert "not allowed" not in caplog.text


@pytest.mark.asyncio
async def test_listen_and_subscribe_receive_new_states(machine_factory, kinds):
    _, command = kinds
    machine = machine_factory()
    heard = []
    machine.listen(heard.append)
    subscription = machine.subscribe()

    machine.enqueue(Event(command.START))
    machine.enqueue(Event(command.STOP))
    await machine.join()
    machine.close()

    assert [s.name for s in heard] == ["RUNNING", "IDLE"]
    assert [s.name async for s in subscription] == ["RUNNING", "IDLE"]


@pytest.mark.asyncio
async def test_hook_error_rolls_back_and_processing_continues(machine_factory, idle, running):
    def boom(ctx):
        raise RuntimeError("bad hook")

    table = {idle.kind: {"go": Transition(target=running, action=boom), "ok": Transition(target=running)}}
    machine = machine_factory(context="ctx", table=table)
    machine.enqueue(Event("go"))
    machine.enqueue(Event("ok"))
    await machine.join()

    assert [(kind, error.hook_name) for kind, error in machine.hook_errors] == [("go", boom.__qualname__)]
    assert machine.state == running
    assert machine.context == "ctx"


@pytest.mark.asyncio
async def test_default_hook_error_handler_logs(idle, running, caplog):
    def boom(ctx):
        raise RuntimeError("bad hook")

    machine = StateMachine(None, idle, {idle.kind: {"go": Transition(target=running, on_entry=boom)}})
    machine.enqueue(Event("go"))
    await machine.join()

    assert machine.state == idle
    assert "event go abandoned" in caplog.text
    assert not machine.processing


@pytest.mark.asyncio
async def test_close_rejects_new_events_and_is_idempotent(machine_factory, kinds):
    _, command = kinds
    machine = machine_factory()
    subscription = machine.subscribe()
    machine.close()
    machine.close()

    assert machine.closed
    assert [s async for s in subscription] == []
    with pytest.raises(MachineClosedError):
        machine.enqueue(Event(command.START))
    with pytest.raises(NotifierClosedError):
        machine.subscribe()


@pytest.mark.asyncio
async def test_events_queued_before_close_still_run(machine_factory, kinds):
    _, command = kinds
    machine = machine_factory()
    heard = []
    machine.listen(heard.append)

    machine.enqueue(Event(command.START))
    machine.close()
    await machine.join()

    assert machine.state.name == "RUNNING"
    assert heard == []


@pytest.mark.asyncio
async def test_async_context_manager_drains_then_closes(machine_factory, kinds):
    _, command = kinds
    machine = machine_factory()

    async with machine as m:
        m.enqueue(Event(command.START))

    assert machine.closed
    assert machine.state.name == "RUNNING"


@pytest.mark.asyncio
async def test_join_inside_hook_is_rejected(machine_factory, idle, running):
    async def joins(ctx):
        await machine.join()

    machine = machine_factory(table={idle.kind: {"go": Transition(target=running, action=joins)}})
    machine.enqueue(Event("go"))
    await machine.join()

    assert len(machine.hook_errors) == 1
    assert isinstance(machine.hook_errors[0][1].__cause__, RuntimeError)
    assert machine.state == idle


def test_enqueue_without_loop_leaves_no_queued_event(machine_factory, kinds):
    mode, command = kinds
    machine = machine_factory()
    heard = []
    machine.listen(heard.append)

    with pytest.raises(RuntimeError):
        machine.enqueue(Event(command.START))
    assert machine.pending == 0

    async def later():
        machine.enqueue(Event(command.STOP))
        await machine.join()

    asyncio.run(later())

    assert machine.state.kind is mode.IDLE
    assert heard == []
    assert machine.rejected == [(command.STOP, mode.IDLE)]
