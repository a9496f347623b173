"""SAE J1939-21 transport layer: requests, acknowledgements and multi-packet transfers."""

from __future__ import annotations

import dataclasses
from typing import Optional

from .enums import ControlByte, SendStatus
from .structs import J1939, MAX_TP_DT, Acknowledgement, TransportConnection

__all__ = [
    "BROADCAST_ADDRESS",
    "send_acknowledgement",
    "read_acknowledgement",
    "send_request",
    "send_tp_connection_management",
    "read_tp_connection_management",
    "send_tp_data_transfer",
    "begin_transfer",
]

BROADCAST_ADDRESS = 0xFF
TP_BYTES_PER_PACKAGE = 7
TP_PACKAGE_DELAY_MS = 100

_HEAD_ACKNOWLEDGEMENT = 0x18E8
_HEAD_REQUEST = 0x18EA
_HEAD_TP_CM = 0x1CEC
_HEAD_TP_DT = 0x1CEB


def _bus(j1939: J1939):
    if j1939.bus is None:
        raise RuntimeError("the J1939 node has no CAN bus attached")
    return j1939.bus


def _frame_id(j1939: J1939, head: int, da: int) -> int:
    """Build a 29-bit ID from priority/PF ``head``, destination and this ECU's address."""
    source = j1939.information_this_ecu.this_ecu_address & 0xFF
    return (head << 16) | ((da & 0xFF) << 8) | source


def _pgn_bytes(pgn: int) -> bytes:
    return (pgn & 0xFFFFFF).to_bytes(3, "little")


def send_acknowledgement(
    j1939: J1939, da: int, control_byte: int, group_function_value: int, pgn: int
) -> SendStatus:
    """Answer a PGN request of another ECU with an acknowledgement (PGN 0xE800)."""
    address = j1939.information_this_ecu.this_ecu_address & 0xFF
    data = (
        bytes((control_byte & 0xFF, group_function_value & 0xFF, 0xFF, 0xFF, address))
        + _pgn_bytes(pgn)
    )
    return _bus(j1939).send_message(_frame_id(j1939, _HEAD_ACKNOWLEDGEMENT, da), data)


def read_acknowledgement(j1939: J1939, sa: int, data) -> None:
    """Store an acknowledgement received from another ECU."""
    j1939.from_other_ecu_acknowledgement = Acknowledgement(
        control_byte=data[0],
        group_function_value=data[1],
        address=data[4],
        pgn_of_requested_info=int.from_bytes(bytes(data[5:8]), "little"),
        from_ecu_address=sa,
    )


def send_request(j1939: J1939, da: int, pgn: int) -> SendStatus:
    """Request the parameter group ``pgn`` from another ECU (PGN 0xEA00)."""
    return _bus(j1939).send_request(_frame_id(j1939, _HEAD_REQUEST, da), _pgn_bytes(pgn))


def send_tp_connection_management(j1939: J1939, da: int) -> SendStatus:
    """Announce the transfer held in ``this_ecu_tp_cm`` (PGN 0xEC00)."""
    cm = j1939.this_ecu_tp_cm
    size = cm.total_message_size & 0xFFFF
    data = (
        bytes((cm.control_byte & 0xFF, size & 0xFF, size >> 8, cm.number_of_packages & 0xFF, 0xFF))
        + _pgn_bytes(cm.pgn_of_the_packeted_message)
    )
    return _bus(j1939).send_message(_frame_id(j1939, _HEAD_TP_CM, da), data)


def read_tp_connection_management(j1939: J1939, sa: int, data) -> None:
    """Store a connection management message; answer RTS with CTS, and CTS with data."""
    cm = TransportConnection(
        control_byte=data[0],
        total_message_size=data[1] | (data[2] << 8),
        number_of_packages=data[3],
        pgn_of_the_packeted_message=int.from_bytes(bytes(data[5:8]), "little"),
        from_ecu_address=sa,
    )
    j1939.from_other_ecu_tp_cm = cm

    if cm.control_byte == ControlByte.TP_CM_RTS:
        j1939.this_ecu_tp_cm = dataclasses.replace(cm, control_byte=int(ControlByte.TP_CM_CTS))
        send_tp_connection_management(j1939, sa)

    if cm.control_byte == ControlByte.TP_CM_CTS:
        send_tp_data_transfer(j1939, sa)


def send_tp_data_transfer(j1939: J1939, da: int) -> SendStatus:
    """Send the loaded transfer as numbered packages of seven bytes (PGN 0xEB00).

    Unused bytes of the last package are 0xFF. Stops at the first failed send.
    """
    cm = j1939.this_ecu_tp_cm
    buffer = j1939.this_ecu_tp_dt.data
    total = min(cm.total_message_size, len(buffer))
    bus = _bus(j1939)
    can_id = _frame_id(j1939, _HEAD_TP_DT, da)
    status = SendStatus.OK
    for sequence in range(1, cm.number_of_packages + 1):
        start = (sequence - 1) * TP_BYTES_PER_PACKAGE
        chunk = bytes(buffer[start:min(start + TP_BYTES_PER_PACKAGE, total)])
        package = bytes((sequence & 0xFF,)) + chunk.ljust(TP_BYTES_PER_PACKAGE, b"\xff")
        status = bus.send_message(can_id, package)
        bus.delay(TP_PACKAGE_DELAY_MS)
        if status != SendStatus.OK:
            return status
    return status


def begin_transfer(
    j1939: J1939, da: int, pgn: int, payload, number_of_packages: Optional[int] = None
) -> SendStatus:
    """Load ``payload`` and start a multi-packet transfer of ``pgn`` to ``da``.

    A broadcast (``da == 0xFF``) is announced with BAM and sent at once; otherwise
    an RTS is sent and the data follows when the receiver answers with CTS.
    Without ``number_of_packages`` the count is the payload size divided by
    eight, rounded up.
    """
    payload = bytes(payload)
    if len(payload) > MAX_TP_DT:
        raise ValueError(f"a transfer holds at most {MAX_TP_DT} bytes")
    if number_of_packages is None:
        number_of_packages = -(-len(payload) // 8)
    if not 0 <= number_of_packages <= 0xFF:
        raise ValueError("number of packages must be between 0 and 255")

    j1939.this_ecu_tp_dt.data[: len(payload)] = payload
    cm = j1939.this_ecu_tp_cm
    cm.total_message_size = len(payload)
    cm.number_of_packages = number_of_packages
    cm.pgn_of_the_packeted_message = pgn
    cm.control_byte = int(
        ControlByte.TP_CM_BAM if da == BROADCAST_ADDRESS else ControlByte.TP_CM_RTS
    )

    status = send_tp_connection_management(j1939, da)
    if status != SendStatus.OK:
        return status
    if cm.control_byte == ControlByte.TP_CM_BAM:
        return send_tp_data_transfer(j1939, da)
    return status