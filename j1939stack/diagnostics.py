"""SAE J1939-73 diagnostics: active (DM1) and previously active (DM2) trouble codes, DM3 clear."""

from __future__ import annotations

from .enums import PGN, SendStatus
from .structs import DM1, J1939, MAX_DM_FIELD
from .transport import _bus, _frame_id, begin_transfer, send_request

__all__ = [
    "send_request_dm1",
    "response_request_dm1",
    "read_response_request_dm1",
    "send_request_dm2",
    "response_request_dm2",
    "read_response_request_dm2",
    "send_request_dm3",
    "response_request_dm3",
]

_HEAD_DIAGNOSTIC = 0x18FE
_LAMP_BYTES = 2
_DTC_BYTES = 4
_TP_BYTES_PER_PACKAGE = 7
_RESERVED = b"\xff\xff"


def _encode_dtc(dm: DM1, index: int) -> bytes:
    spn = dm.spn[index]
    return bytes(
        value & 0xFF
        for value in (
            spn,
            spn >> 8,
            ((spn >> 11) & 0xE0) | dm.fmi[index],
            (dm.spn_conversion_method[index] << 7) | dm.occurrence_count[index],
        )
    )


def _respond(j1939: J1939, da: int, pgn: int, dm: DM1, active: int) -> SendStatus:
    """Send lamps and trouble codes, in one frame for fewer than two codes."""
    lamps = dm.lamp_bytes()
    if active < 2:
        data = lamps + _encode_dtc(dm, 0) + _RESERVED
        return _bus(j1939).send_message(_frame_id(j1939, _HEAD_DIAGNOSTIC, pgn & 0xFF), data)

    total = active * _DTC_BYTES + _LAMP_BYTES
    packages = -(-total // _TP_BYTES_PER_PACKAGE)
    codes = b"".join(_encode_dtc(dm, index) for index in range(min(active, MAX_DM_FIELD)))
    payload = (lamps + codes).ljust(total, b"\0")
    return begin_transfer(j1939, da, pgn, payload, packages)


def _read_dtcs(dm: DM1, previous: int, sa: int, data, active: int) -> int:
    """Decode lamps and up to MAX_DM_FIELD codes into ``dm``; return the new active count."""
    count = min(active, MAX_DM_FIELD)
    needed = _LAMP_BYTES + _DTC_BYTES * count
    if len(data) < max(needed, _LAMP_BYTES):
        raise ValueError(f"{count} trouble codes need {needed} bytes")

    if active < previous:
        dm.spn[:] = [0] * len(dm.spn)

    dm.set_lamps(data)
    for index in range(count):
        offset = index * _DTC_BYTES
        dm.spn[index] = (
            ((data[offset + 4] & 0xE0) << 11) | (data[offset + 3] << 8) | data[offset + 2]
        )
        dm.fmi[index] = data[offset + 4] & 0x1F
        dm.spn_conversion_method[index] = data[offset + 5] >> 7
        dm.occurrence_count[index] = data[offset + 5] & 0x7F
        dm.from_ecu_address[index] = sa

    # A single code with SPN 0 means every code has been cleared.
    if active == 1 and dm.spn[0] == 0:
        return 0
    return max(previous, active)


def send_request_dm1(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its active trouble codes (PGN 0xFECA)."""
    return send_request(j1939, da, PGN.DM1)


def response_request_dm1(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's active trouble codes; two or more go by transport protocol."""
    return _respond(j1939, da, PGN.DM1, j1939.this_dm.dm1, j1939.this_dm.errors_dm1_active)


def read_response_request_dm1(j1939: J1939, sa: int, data, errors_dm1_active: int) -> None:
    """Store the active trouble codes reported by another ECU."""
    dm = j1939.from_other_ecu_dm
    dm.errors_dm1_active = _read_dtcs(dm.dm1, dm.errors_dm1_active, sa, data, errors_dm1_active)


def send_request_dm2(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` for its previously active trouble codes (PGN 0xFECB)."""
    return send_request(j1939, da, PGN.DM2)


def response_request_dm2(j1939: J1939, da: int) -> SendStatus:
    """Send this ECU's previously active trouble codes."""
    return _respond(j1939, da, PGN.DM2, j1939.this_dm.dm2, j1939.this_dm.errors_dm2_active)


def read_response_request_dm2(j1939: J1939, sa: int, data, errors_dm2_active: int) -> None:
    """Store the previously active trouble codes reported by another ECU."""
    dm = j1939.from_other_ecu_dm
    dm.errors_dm2_active = _read_dtcs(dm.dm2, dm.errors_dm2_active, sa, data, errors_dm2_active)


def send_request_dm3(j1939: J1939, da: int) -> SendStatus:
    """Ask ``da`` to clear its previously active trouble codes (PGN 0xFECC)."""
    return send_request(j1939, da, PGN.DM3)


def response_request_dm3(j1939: J1939, da: int) -> SendStatus:
    """Clear this ECU's previously active codes and send the now empty DM2."""
    j1939.this_dm.dm2 = DM1()
    j1939.this_dm.errors_dm2_active = 0
    return response_request_dm2(j1939, da)