import pytest

from j1939stack.can_bus import LoopbackBus
from j1939stack.enums import PGN, FailSafeMode, SendStatus, ValveState
from j1939stack.structs import J1939
from j1939stack.valve_commands import (
    read_auxiliary_valve_command,
    read_general_purpose_valve_command,
    send_auxiliary_valve_command,
    send_general_purpose_valve_command,
)

ADDRESS = 0x80


def _node():
    bus = LoopbackBus()
    node = J1939(bus=bus)
    node.information_this_ecu.this_ecu_address = ADDRESS
    return node, bus


@pytest.mark.parametrize("valve_number", range(16))
def test_auxiliary_valve_command_pgn_per_valve(valve_number):
    node, bus = _node()
    assert send_auxiliary_valve_command(node, valve_number, 10, 0, 0) == SendStatus.OK
    frame = bus.read_message()
    assert (frame.can_id >> 8) & 0xFFFF == PGN[f"AUXILIARY_VALVE_COMMAND_{valve_number}"]
    assert frame.can_id & 0xFF == ADDRESS


def test_auxiliary_valve_command_wire_layout_and_round_trip():
    node, bus = _node()
    send_auxiliary_valve_command(
        node, 5, 200, FailSafeMode.ACTIVATED, ValveState.EXTEND
    )
    frame = bus.read_message()
    data = frame.data
    assert data[0] == 200
    assert data[1] == 0xFF
    assert data[2] >> 6 == FailSafeMode.ACTIVATED
    assert (data[2] >> 4) & 0b11 == 0b11
    assert data[2] & 0x0F == ValveState.EXTEND
    assert data[3:] == b"\xff" * 5

    other = J1939()
    valve = (frame.can_id >> 8) & 0x0F
    read_auxiliary_valve_command(other, frame.can_id & 0xFF, valve, data)
    command = other.from_other_ecu_auxiliary_valve_command[5]
    assert command.standard_flow == 200
    assert command.fail_safe_mode == FailSafeMode.ACTIVATED
    assert command.valve_state == ValveState.EXTEND
    assert command.from_ecu_address == ADDRESS
    assert other.from_other_ecu_auxiliary_valve_command[4].standard_flow == 0


def test_read_auxiliary_valve_command_ignores_reserved_bits():
    other = J1939()
    read_auxiliary_valve_command(other, 0x21, 2, bytes([50, 0xFF, 0x72, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF]))
    command = other.from_other_ecu_auxiliary_valve_command[2]
    assert command.fail_safe_mode == FailSafeMode.ACTIVATED
    assert command.valve_state == ValveState.RETRACT
    assert command.standard_flow == 50


@pytest.mark.parametrize("valve_number", [-1, 16])
def test_invalid_valve_number_rejected(valve_number):
    node, _ = _node()
    with pytest.raises(ValueError):
        send_auxiliary_valve_command(node, valve_number, 0, 0, 0)
    with pytest.raises(ValueError):
        read_auxiliary_valve_command(node, 0x21, valve_number, bytes(8))


def test_general_purpose_valve_command_wire_layout_and_round_trip():
    node, bus = _node()
    status = send_general_purpose_valve_command(
        node, 0x25, 120, FailSafeMode.BLOCKED, ValveState.FLOATING, 0x1234
    )
    assert status == SendStatus.OK
    frame = bus.read_message()
    assert frame.can_id >> 16 == 0x0CC4
    assert (frame.can_id >> 8) & 0xFF == 0x25
    assert frame.can_id & 0xFF == ADDRESS
    data = frame.data
    assert data[0] == 120
    assert data[1] == 0xFF
    assert data[2] & 0x0F == ValveState.FLOATING
    assert int.from_bytes(data[3:5], "little") == 0x1234
    assert data[5:] == b"\xff" * 3

    other = J1939()
    read_general_purpose_valve_command(other, frame.can_id & 0xFF, data)
    command = other.from_other_ecu_general_purpose_valve_command
    assert command.standard_flow == 120
    assert command.fail_safe_mode == FailSafeMode.BLOCKED
    assert command.valve_state == ValveState.FLOATING
    assert command.extended_flow == 0x1234
    assert command.from_ecu_address == ADDRESS


def test_send_without_bus_raises():
    node = J1939()
    with pytest.raises(RuntimeError):
        send_general_purpose_valve_command(node, 0x25, 0, 0, 0, 0)