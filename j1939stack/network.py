"""SAE J1939-81 network management: address claim, commanded address and address delete."""

from __future__ import annotations

import contextlib

from .enums import PGN, SendStatus
from .storage import save_bytes
from .structs import J1939, Name
from .transport import BROADCAST_ADDRESS, _bus, _frame_id, begin_transfer, send_request

__all__ = [
    "send_request_address_claimed",
    "response_request_address_claimed",
    "read_response_request_address_claimed",
    "send_address_not_claimed",
    "read_address_not_claimed",
    "send_commanded_address",
    "read_commanded_address",
    "send_address_delete",
    "read_address_delete",
]

NULL_ADDRESS = 0xFE
_HEAD_ADDRESS_CLAIMED = 0x18EE
_HEAD_ADDRESS_DELETE = 0x0002
_ADDRESS_NOT_CLAIMED_ID = 0x18EEFFFE


def _forget_peers(j1939: J1939) -> None:
    j1939.other_ecu_address[:] = b"\xff" * len(j1939.other_ecu_address)
    j1939.number_of_cannot_claim_address = 0
    j1939.number_of_other_ecu = 0


def _forget_address(j1939: J1939, old_address: int) -> None:
    # The bound shrinks as entries are removed, exactly as the peer count does.
    index = 0
    while index < j1939.number_of_other_ecu:
        if j1939.other_ecu_address[index] == old_address:
            j1939.other_ecu_address[index] = 0xFF
            j1939.number_of_other_ecu -= 1
        index += 1


def send_request_address_claimed(j1939: J1939, da: int) -> SendStatus:
    """Forget all known peers and ask ``da`` for its NAME and address."""
    _forget_peers(j1939)
    return send_request(j1939, da, PGN.ADDRESS_CLAIMED)


def response_request_address_claimed(j1939: J1939) -> SendStatus:
    """Broadcast this ECU's NAME and address; due at every start-up."""
    can_id = _frame_id(j1939, _HEAD_ADDRESS_CLAIMED, BROADCAST_ADDRESS)
    return _bus(j1939).send_message(can_id, j1939.information_this_ecu.this_name.to_bytes())


def read_response_request_address_claimed(j1939: J1939, sa: int, data) -> None:
    """Store another ECU's claimed NAME and remember its address.

    A claim of this ECU's own address is answered with Address Not Claimed.
    """
    if j1939.information_this_ecu.this_ecu_address == sa:
        send_address_not_claimed(j1939)

    j1939.from_other_ecu_name = Name.from_bytes(data, sa)
    known = j1939.other_ecu_address[: j1939.number_of_other_ecu]
    if sa not in known and j1939.number_of_other_ecu < len(j1939.other_ecu_address):
        j1939.other_ecu_address[j1939.number_of_other_ecu] = sa
        j1939.number_of_other_ecu += 1


def send_address_not_claimed(j1939: J1939) -> SendStatus:
    """Report an address conflict from the null address."""
    return _bus(j1939).send_message(
        _ADDRESS_NOT_CLAIMED_ID, j1939.information_this_ecu.this_name.to_bytes()
    )


def read_address_not_claimed(j1939: J1939, sa: int, data) -> None:
    """Store the NAME of an ECU that could not claim an address and count it."""
    j1939.from_other_ecu_name = Name.from_bytes(data, sa)
    j1939.number_of_cannot_claim_address = (j1939.number_of_cannot_claim_address + 1) & 0xFF


def send_commanded_address(j1939: J1939, da: int, new_address: int, name: Name) -> SendStatus:
    """Command the ECU with ``name`` to take ``new_address`` (PGN 0xFED8, nine bytes)."""
    payload = name.to_bytes() + bytes((new_address & 0xFF,))
    return begin_transfer(j1939, da, PGN.COMMANDED_ADDRESS, payload, 2)


def read_commanded_address(j1939: J1939, data) -> None:
    """Take the NAME and address carried by a commanded address message.

    The old address is released on the bus, the new information is saved to
    ``j1939.storage_path`` and the new claim is broadcast.
    """
    if len(data) < 9:
        raise ValueError("a commanded address needs 9 bytes")
    information = j1939.information_this_ecu
    send_address_delete(j1939, BROADCAST_ADDRESS, information.this_ecu_address)

    decoded = Name.from_bytes(data, information.this_name.from_ecu_address)
    information.this_name = decoded
    information.this_ecu_address = data[8]
    # A failed save does not stop the new address from being taken.
    with contextlib.suppress(OSError):
        save_bytes(j1939.storage_path, information.to_bytes())

    response_request_address_claimed(j1939)


def send_address_delete(j1939: J1939, da: int, old_address: int) -> SendStatus:
    """Forget ``old_address`` locally and tell ``da`` it is no longer in use."""
    _forget_address(j1939, old_address)
    data = bytes((old_address & 0xFF,)) + b"\xff" * 7
    return _bus(j1939).send_message(_frame_id(j1939, _HEAD_ADDRESS_DELETE, da), data)


def read_address_delete(j1939: J1939, data) -> None:
    """Forget the address named in an address delete message."""
    _forget_address(j1939, data[0])