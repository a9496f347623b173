"""SAE J1939-73 memory access: DM14 request, DM15 response and DM16 binary data transfer."""

from __future__ import annotations

from .enums import PGN, DM15Status, SendStatus
from .storage import access_memory
from .structs import DM15, J1939
from .transport import _bus, _frame_id, begin_transfer

__all__ = [
    "send_request_dm14",
    "read_request_dm14",
    "send_response_dm15",
    "read_response_dm15",
    "send_binary_data_transfer_dm16",
    "read_binary_data_transfer_dm16",
]

_HEAD_DM14 = 0x18D9
_HEAD_DM15 = 0x18D8
_HEAD_DM16 = 0x18D7
_DM16_SINGLE_FRAME_LIMIT = 8


def _memory_frame(length: int, mode_bits: int, pointer: int, extension: int, key: int) -> bytes:
    return (
        bytes((length & 0xFF, ((length >> 3) | mode_bits | 0b1) & 0xFF))
        + (pointer & 0xFFFFFF).to_bytes(3, "little")
        + bytes((extension & 0xFF,))
        + (key & 0xFFFF).to_bytes(2, "little")
    )


def send_request_dm14(
    j1939: J1939,
    da: int,
    number_of_requested_bytes: int,
    pointer_type: int,
    command: int,
    pointer: int,
    pointer_extension: int,
    key: int,
) -> SendStatus:
    """Ask ``da`` for memory access (PGN 0xD900)."""
    data = _memory_frame(
        number_of_requested_bytes,
        (pointer_type << 4) | (command << 1),
        pointer,
        pointer_extension,
        key,
    )
    return _bus(j1939).send_message(_frame_id(j1939, _HEAD_DM14, da), data)


def read_request_dm14(j1939: J1939, da: int, data) -> SendStatus:
    """Serve a memory request from ``da``.

    The memory handler's answer goes back as DM15. When that is sent, the
    data follows as DM16 and a closing DM15 reports completion or failure.
    """
    if len(data) < 8:
        raise ValueError("a DM14 request needs 8 bytes")
    access = access_memory(
        ((data[1] & 0xE0) << 3) | data[0],
        (data[1] >> 4) & 0x01,
        (data[1] >> 1) & 0x07,
        int.from_bytes(bytes(data[2:5]), "little"),
        data[5],
        data[6] | (data[7] << 8),
    )

    def respond(status: int) -> SendStatus:
        return send_response_dm15(
            j1939,
            da,
            access.number_of_allowed_bytes,
            status,
            access.edc_parameter,
            access.edcp_extension,
            access.seed,
        )

    status = respond(access.status)
    if status == SendStatus.OK:
        sent = send_binary_data_transfer_dm16(
            j1939, da, access.number_of_allowed_bytes & 0xFF, access.raw_binary_data
        )
        outcome = (
            DM15Status.OPERATION_COMPLETED if sent == SendStatus.OK else DM15Status.OPERATION_FAILED
        )
        status = respond(outcome)
    return status


def send_response_dm15(
    j1939: J1939,
    da: int,
    number_of_allowed_bytes: int,
    status: int,
    edc_parameter: int,
    edcp_extension: int,
    seed: int,
) -> SendStatus:
    """Answer a DM14 request (PGN 0xD800)."""
    data = _memory_frame(
        number_of_allowed_bytes, (0b1 << 4) | (status << 1), edc_parameter, edcp_extension, seed
    )
    return _bus(j1939).send_message(_frame_id(j1939, _HEAD_DM15, da), data)


def read_response_dm15(j1939: J1939, sa: int, data) -> None:
    """Store a memory access response received from another ECU."""
    j1939.from_other_ecu_dm.dm15 = DM15(
        number_of_allowed_bytes=((data[1] & 0xE0) << 3) | data[0],
        status=(data[1] >> 1) & 0x07,
        edc_parameter=int.from_bytes(bytes(data[2:5]), "little"),
        edcp_extension=data[5],
        seed=data[6] | (data[7] << 8),
        from_ecu_address=sa,
    )


def send_binary_data_transfer_dm16(
    j1939: J1939, da: int, number_of_occurrences: int, raw_binary_data
) -> SendStatus:
    """Send ``number_of_occurrences`` bytes of binary data (PGN 0xD700).

    Up to seven bytes fit in one frame; more go by transport protocol.
    """
    if not 0 <= number_of_occurrences <= 0xFF:
        raise ValueError("number of occurrences must be between 0 and 255")
    raw = bytes(raw_binary_data[:number_of_occurrences])
    if len(raw) < number_of_occurrences:
        raise ValueError("not enough binary data for the number of occurrences")
    payload = bytes((number_of_occurrences,)) + raw
    if number_of_occurrences < _DM16_SINGLE_FRAME_LIMIT:
        return _bus(j1939).send_message(_frame_id(j1939, _HEAD_DM16, da), payload)
    return begin_transfer(j1939, da, PGN.DM16, payload)


def read_binary_data_transfer_dm16(j1939: J1939, sa: int, data) -> None:
    """Store binary data received from another ECU: a count byte, then the data."""
    dm16 = j1939.from_other_ecu_dm.dm16
    count = data[0]
    dm16.number_of_occurrences = count
    dm16.from_ecu_address = sa
    dm16.raw_binary_data[:] = bytes(len(dm16.raw_binary_data))
    stored = min(count, len(dm16.raw_binary_data))
    dm16.raw_binary_data[:stored] = bytes(data[1:1 + stored]).ljust(stored, b"\0")