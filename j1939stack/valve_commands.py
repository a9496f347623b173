"""ISO 11783-7 valve commands: auxiliary valve command and general purpose valve command."""

from __future__ import annotations

from .enums import SendStatus
from .structs import J1939, VALVE_COUNT, AuxiliaryValveCommand, GeneralPurposeValveCommand
from .transport import _bus, _frame_id

__all__ = [
    "send_auxiliary_valve_command",
    "read_auxiliary_valve_command",
    "send_general_purpose_valve_command",
    "read_general_purpose_valve_command",
]

_HEAD_AUXILIARY_VALVE = 0x0CFE
_AUXILIARY_VALVE_COMMAND_BASE = 0x30
_HEAD_GENERAL_PURPOSE_VALVE_COMMAND = 0x0CC4
_RESERVED_BITS = 0b11 << 4


def _check_valve(valve_number: int) -> None:
    if not 0 <= valve_number < VALVE_COUNT:
        raise ValueError(f"valve number must be between 0 and {VALVE_COUNT - 1}")


def _state_byte(fail_safe_mode: int, valve_state: int) -> int:
    return ((fail_safe_mode << 6) | _RESERVED_BITS | valve_state) & 0xFF


def send_auxiliary_valve_command(
    j1939: J1939, valve_number: int, standard_flow: int, fail_safe_mode: int, valve_state: int
) -> SendStatus:
    """Broadcast a command to auxiliary valve ``valve_number`` (PGN 0xFE30 to 0xFE3F)."""
    _check_valve(valve_number)
    can_id = _frame_id(j1939, _HEAD_AUXILIARY_VALVE, _AUXILIARY_VALVE_COMMAND_BASE + valve_number)
    data = (
        bytes((standard_flow & 0xFF, 0xFF, _state_byte(fail_safe_mode, valve_state)))
        + b"\xff" * 5
    )
    return _bus(j1939).send_message(can_id, data)


def read_auxiliary_valve_command(j1939: J1939, sa: int, valve_number: int, data) -> None:
    """Store an auxiliary valve command received from another ECU."""
    _check_valve(valve_number)
    j1939.from_other_ecu_auxiliary_valve_command[valve_number] = AuxiliaryValveCommand(
        standard_flow=data[0],
        fail_safe_mode=data[2] >> 6,
        valve_state=data[2] & 0x0F,
        from_ecu_address=sa,
    )


def send_general_purpose_valve_command(
    j1939: J1939,
    da: int,
    standard_flow: int,
    fail_safe_mode: int,
    valve_state: int,
    extended_flow: int,
) -> SendStatus:
    """Send a general purpose valve command to ``da`` (PGN 0xC400)."""
    can_id = _frame_id(j1939, _HEAD_GENERAL_PURPOSE_VALVE_COMMAND, da)
    data = (
        bytes((standard_flow & 0xFF, 0xFF, _state_byte(fail_safe_mode, valve_state)))
        + (extended_flow & 0xFFFF).to_bytes(2, "little")
        + b"\xff" * 3
    )
    return _bus(j1939).send_message(can_id, data)


def read_general_purpose_valve_command(j1939: J1939, sa: int, data) -> None:
    """Store a general purpose valve command received from another ECU."""
    j1939.from_other_ecu_general_purpose_valve_command = GeneralPurposeValveCommand(
        standard_flow=data[0],
        fail_safe_mode=data[2] >> 6,
        valve_state=data[2] & 0x0F,
        extended_flow=data[3] | (data[4] << 8),
        from_ecu_address=sa,
    )