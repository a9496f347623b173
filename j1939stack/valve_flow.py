"""ISO 11783-7 valve feedback: estimated flow and measured position of auxiliary and general purpose valves."""

from __future__ import annotations

from .enums import PGN, SendStatus
from .structs import (
    J1939,
    AuxiliaryValveEstimatedFlow,
    AuxiliaryValveMeasuredPosition,
    GeneralPurposeValveEstimatedFlow,
)
from .transport import _bus, _frame_id, send_request
from .valve_commands import _check_valve, _state_byte

__all__ = [
    "send_request_auxiliary_valve_estimated_flow",
    "response_request_auxiliary_valve_estimated_flow",
    "read_response_request_auxiliary_estimated_flow",
    "send_request_auxiliary_valve_measured_position",
    "response_request_auxiliary_valve_measured_position",
    "read_response_request_auxiliary_valve_measured_position",
    "send_request_general_purpose_valve_estimated_flow",
    "response_request_general_purpose_valve_estimated_flow",
    "read_response_request_general_purpose_valve_estimated_flow",
]

_HEAD_AUXILIARY_ESTIMATED_FLOW = 0x0CFE
_AUXILIARY_ESTIMATED_FLOW_BASE = 0x10
_HEAD_MEASURED_POSITION = 0x0CFF
_MEASURED_POSITION_BASE = 0x20
_HEAD_GENERAL_PURPOSE_ESTIMATED_FLOW = 0x0CC6
_MEASURED_POSITION_RESERVED_BITS = 0xF0


def _word(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "little")


def send_request_auxiliary_valve_estimated_flow(j1939: J1939, da: int, valve_number: int) -> SendStatus:
    """Ask ``da`` for the estimated flow of auxiliary valve ``valve_number`` (PGN 0xFE10 to 0xFE1F)."""
    _check_valve(valve_number)
    return send_request(j1939, da, PGN.AUXILIARY_VALVE_ESTIMATED_FLOW_0 + valve_number)


def response_request_auxiliary_valve_estimated_flow(j1939: J1939, valve_number: int) -> SendStatus:
    """Broadcast the estimated flow of this ECU's auxiliary valve ``valve_number``."""
    _check_valve(valve_number)
    flow = j1939.this_auxiliary_valve_estimated_flow[valve_number]
    can_id = _frame_id(
        j1939, _HEAD_AUXILIARY_ESTIMATED_FLOW, _AUXILIARY_ESTIMATED_FLOW_BASE + valve_number
    )
    data = (
        bytes(
            (
                flow.extend_estimated_flow_standard & 0xFF,
                flow.retract_estimated_flow_standard & 0xFF,
                _state_byte(flow.fail_safe_mode, flow.valve_state),
                (flow.limit << 5) & 0xFF,
            )
        )
        + b"\xff" * 4
    )
    return _bus(j1939).send_message(can_id, data)


def read_response_request_auxiliary_estimated_flow(
    j1939: J1939, sa: int, valve_number: int, data
) -> None:
    """Store the estimated flow of another ECU's auxiliary valve ``valve_number``."""
    _check_valve(valve_number)
    j1939.from_other_ecu_auxiliary_valve_estimated_flow[valve_number] = AuxiliaryValveEstimatedFlow(
        extend_estimated_flow_standard=data[0],
        retract_estimated_flow_standard=data[1],
        valve_state=data[2] & 0x0F,
        fail_safe_mode=data[2] >> 6,
        limit=data[3] >> 5,
        from_ecu_address=sa,
    )


def send_request_auxiliary_valve_measured_position(j1939: J1939, da: int, valve_number: int) -> SendStatus:
    """Ask ``da`` for the measured position of auxiliary valve ``valve_number`` (PGN 0xFF20 to 0xFF2F)."""
    _check_valve(valve_number)
    return send_request(j1939, da, PGN.AUXILIARY_VALVE_MEASURED_POSITION_0 + valve_number)


def response_request_auxiliary_valve_measured_position(j1939: J1939, valve_number: int) -> SendStatus:
    """Broadcast the measured position of this ECU's auxiliary valve ``valve_number``."""
    _check_valve(valve_number)
    position = j1939.this_auxiliary_valve_measured_position[valve_number]
    can_id = _frame_id(j1939, _HEAD_MEASURED_POSITION, _MEASURED_POSITION_BASE + valve_number)
    data = (
        _word(position.measured_position_percent)
        + bytes(((_MEASURED_POSITION_RESERVED_BITS | position.valve_state) & 0xFF,))
        + _word(position.measured_position_micrometer)
        + b"\xff" * 3
    )
    return _bus(j1939).send_message(can_id, data)


def read_response_request_auxiliary_valve_measured_position(
    j1939: J1939, sa: int, valve_number: int, data
) -> None:
    """Store the measured position of another ECU's auxiliary valve ``valve_number``."""
    _check_valve(valve_number)
    j1939.from_other_ecu_auxiliary_valve_measured_position[valve_number] = (
        AuxiliaryValveMeasuredPosition(
            measured_position_percent=data[0] | (data[1] << 8),
            valve_state=data[2] & 0x0F,
            measured_position_micrometer=data[3] | (data[4] << 8),
            from_ecu_address=sa,
        )
    )


def send_request_general_purpose_valve_estimated_flow(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its general purpose valve estimated flow (PGN 0xC600)."""
    return send_request(j1939, da, PGN.GENERAL_PURPOSE_VALVE_ESTIMATED_FLOW)


def response_request_general_purpose_valve_estimated_flow(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's general purpose valve estimated flow to ``da``."""
    flow = j1939.this_general_purpose_valve_estimated_flow
    can_id = _frame_id(j1939, _HEAD_GENERAL_PURPOSE_ESTIMATED_FLOW, da)
    data = (
        bytes(
            (
                flow.extend_estimated_flow_standard & 0xFF,
                flow.retract_estimated_flow_standard & 0xFF,
                _state_byte(flow.fail_safe_mode, flow.valve_state),
                (flow.limit << 5) & 0xFF,
            )
        )
        + _word(flow.extend_estimated_flow_extended)
        + _word(flow.retract_estimated_flow_extended)
    )
    return _bus(j1939).send_message(can_id, data)


def read_response_request_general_purpose_valve_estimated_flow(j1939: J1939, sa: int, data) -> None:
    """Store the general purpose valve estimated flow of another ECU."""
    j1939.from_other_ecu_general_purpose_valve_estimated_flow = GeneralPurposeValveEstimatedFlow(
        extend_estimated_flow_standard=data[0],
        retract_estimated_flow_standard=data[1],
        valve_state=data[2] & 0x0F,
        fail_safe_mode=data[2] >> 6,
        limit=data[3] >> 5,
        extend_estimated_flow_extended=data[4] | (data[5] << 8),
        retract_estimated_flow_extended=data[6] | (data[7] << 8),
        from_ecu_address=sa,
    )