"""SAE J1939-71 identification messages: software, ECU and component identification."""

from __future__ import annotations

from .enums import PGN, SendStatus
from .structs import J1939, MAX_IDENTIFICATION
from .transport import _bus, _frame_id, begin_transfer, send_request

__all__ = [
    "send_request_software_identification",
    "response_request_software_identification",
    "read_response_request_software_identification",
    "send_request_ecu_identification",
    "response_request_ecu_identification",
    "read_response_request_ecu_identification",
    "send_request_component_identification",
    "response_request_component_identification",
    "read_response_request_component_identification",
]

_PRIORITY_HEAD = 0x1800
_SINGLE_FRAME_SOFTWARE_FIELDS = 9
_SOFTWARE_BYTES_IN_FRAME = 7
_RESERVED = b"\xff" * 4


def _single_frame_id(j1939: J1939, pgn: int) -> int:
    """ID of a broadcast PDU2 message: priority 6, the PGN, this ECU as source."""
    return _frame_id(j1939, _PRIORITY_HEAD | ((pgn >> 8) & 0xFF), pgn & 0xFF)


def _check_length(length: int) -> None:
    if length > MAX_IDENTIFICATION:
        raise ValueError(f"an identification field holds at most {MAX_IDENTIFICATION} bytes")


def _respond_fields(j1939: J1939, da: int, pgn: int, length: int, fields) -> SendStatus:
    """Send four equally long fields, in one frame when each is a single byte."""
    if length < 2:
        data = bytes(bytes(field[:1]).ljust(1, b"\0")[0] for field in fields) + _RESERVED
        return _bus(j1939).send_message(_single_frame_id(j1939, pgn), data)
    _check_length(length)
    payload = b"".join(bytes(field[:length]).ljust(length, b"\0") for field in fields)
    return begin_transfer(j1939, da, pgn, payload)


def _read_fields(data, length: int, buffers) -> None:
    """Copy field ``k`` from ``data[k*length:]`` into each buffer; short data reads as zero."""
    for index, buffer in enumerate(buffers):
        stored = min(length, len(buffer))
        start = index * length
        buffer[:stored] = bytes(data[start:start + stored]).ljust(stored, b"\0")


def send_request_software_identification(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its software identification (PGN 0xFEDA)."""
    return send_request(j1939, da, PGN.SOFTWARE_IDENTIFICATION)


def response_request_software_identification(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's software identification.

    Fewer than nine fields fit in one frame; more are sent with the
    transport protocol (BAM when ``da`` is the broadcast address).
    """
    software = j1939.information_this_ecu.this_identifications.software_identification
    count = software.number_of_fields
    if count < _SINGLE_FRAME_SOFTWARE_FIELDS:
        fields = bytes(software.identifications[:_SOFTWARE_BYTES_IN_FRAME])
        data = bytes((count & 0xFF,)) + fields.ljust(_SOFTWARE_BYTES_IN_FRAME, b"\0")
        return _bus(j1939).send_message(
            _single_frame_id(j1939, PGN.SOFTWARE_IDENTIFICATION), data
        )
    _check_length(count)
    payload = bytes((count,)) + bytes(software.identifications[:count]).ljust(count, b"\0")
    return begin_transfer(j1939, da, PGN.SOFTWARE_IDENTIFICATION, payload)


def read_response_request_software_identification(j1939: J1939, sa: int, data) -> None:
    """Store another ECU's software identification: a count byte, then the fields."""
    software = j1939.from_other_ecu_identifications.software_identification
    count = data[0]
    software.number_of_fields = count
    software.from_ecu_address = sa
    stored = min(count, len(software.identifications))
    software.identifications[:stored] = bytes(data[1:1 + stored]).ljust(stored, b"\0")


def send_request_ecu_identification(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its ECU identification (PGN 0xFDC5)."""
    return send_request(j1939, da, PGN.ECU_IDENTIFICATION)


def response_request_ecu_identification(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's part number, serial number, location and type."""
    ecu = j1939.information_this_ecu.this_identifications.ecu_identification
    fields = (ecu.ecu_part_number, ecu.ecu_serial_number, ecu.ecu_location, ecu.ecu_type)
    return _respond_fields(j1939, da, PGN.ECU_IDENTIFICATION, ecu.length_of_each_field, fields)


def read_response_request_ecu_identification(j1939: J1939, sa: int, data) -> None:
    """Store another ECU's identification, split by the configured field length."""
    ecu = j1939.from_other_ecu_identifications.ecu_identification
    _read_fields(
        data,
        ecu.length_of_each_field,
        (ecu.ecu_part_number, ecu.ecu_serial_number, ecu.ecu_location, ecu.ecu_type),
    )
    ecu.from_ecu_address = sa


def send_request_component_identification(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its component identification (PGN 0xFEEB)."""
    return send_request(j1939, da, PGN.COMPONENT_IDENTIFICATION)


def response_request_component_identification(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's product date, model name, serial number and unit name."""
    component = j1939.information_this_ecu.this_identifications.component_identification
    fields = (
        component.component_product_date,
        component.component_model_name,
        component.component_serial_number,
        component.component_unit_name,
    )
    return _respond_fields(
        j1939, da, PGN.COMPONENT_IDENTIFICATION, component.length_of_each_field, fields
    )


def read_response_request_component_identification(j1939: J1939, sa: int, data) -> None:
    """Store another ECU's component identification, split by the configured field length."""
    component = j1939.from_other_ecu_identifications.component_identification
    _read_fields(
        data,
        component.length_of_each_field,
        (
            component.component_product_date,
            component.component_model_name,
            component.component_serial_number,
            component.component_unit_name,
        ),
    )
    component.from_ecu_address = sa