"""A J1939 node: start-up, close-down, message dispatch and request handling."""

from __future__ import annotations

from .diagnostics import (
    read_response_request_dm1,
    read_response_request_dm2,
    response_request_dm1,
    response_request_dm2,
    response_request_dm3,
)
from .enums import PGN, ControlByte, GroupFunctionValue
from .identification import (
    read_response_request_component_identification,
    read_response_request_ecu_identification,
    read_response_request_software_identification,
    response_request_component_identification,
    response_request_ecu_identification,
    response_request_software_identification,
)
from .memory_access import read_binary_data_transfer_dm16, read_request_dm14, read_response_dm15
from .network import (
    _forget_peers,
    read_address_delete,
    read_address_not_claimed,
    read_commanded_address,
    read_response_request_address_claimed,
    response_request_address_claimed,
    send_request_address_claimed,
)
from .storage import load_bytes, save_bytes
from .structs import (
    J1939,
    MAX_IDENTIFICATION,
    MAX_TP_DT,
    EcuInformation,
    TransportConnection,
    TransportData,
)
from .transport import (
    BROADCAST_ADDRESS,
    TP_BYTES_PER_PACKAGE,
    _bus,
    read_acknowledgement,
    read_tp_connection_management,
    send_acknowledgement,
)
from .valve_commands import read_auxiliary_valve_command, read_general_purpose_valve_command
from .valve_flow import (
    read_response_request_auxiliary_estimated_flow,
    read_response_request_auxiliary_valve_measured_position,
    read_response_request_general_purpose_valve_estimated_flow,
    response_request_auxiliary_valve_estimated_flow,
    response_request_auxiliary_valve_measured_position,
    response_request_general_purpose_valve_estimated_flow,
)

__all__ = [
    "listen_for_messages",
    "startup_ecu",
    "closedown_ecu",
    "read_request",
    "read_tp_data_transfer",
]

NULL_ADDRESS = 0xFE

_ACKNOWLEDGED_ONLY = frozenset(
    {
        PGN.ACKNOWLEDGEMENT,
        PGN.COMMANDED_ADDRESS,
        PGN.ADDRESS_DELETE,
        PGN.REQUEST,
        PGN.TP_CM,
        PGN.TP_DT,
    }
)


def startup_ecu(j1939: J1939) -> None:
    """Load this ECU's saved information, then claim its address and ask for all others.

    A missing file is created and read as all zeros. Raises OSError when the
    file can neither be read nor created.
    """
    raw = load_bytes(j1939.storage_path, EcuInformation.size)
    information = EcuInformation.from_bytes(raw)
    j1939.information_this_ecu = information

    for identifications in (information.this_identifications, j1939.from_other_ecu_identifications):
        identifications.ecu_identification.length_of_each_field = MAX_IDENTIFICATION
        identifications.component_identification.length_of_each_field = MAX_IDENTIFICATION

    _forget_peers(j1939)
    response_request_address_claimed(j1939)
    send_request_address_claimed(j1939, BROADCAST_ADDRESS)


def closedown_ecu(j1939: J1939) -> None:
    """Save this ECU's NAME, address and identifications; raises OSError on failure."""
    save_bytes(j1939.storage_path, j1939.information_this_ecu.to_bytes())


def read_request(j1939: J1939, sa: int, data) -> None:
    """Answer a PGN request from ``sa``; unknown PGNs are acknowledged as not supported."""
    pgn = data[0] | (data[1] << 8) | (data[2] << 16)

    def acknowledge(control_byte: int, cause: int) -> None:
        send_acknowledgement(j1939, sa, control_byte, cause, pgn)

    if pgn in _ACKNOWLEDGED_ONLY:
        acknowledge(ControlByte.ACKNOWLEDGEMENT_PGN_SUPPORTED, GroupFunctionValue.NORMAL)
    elif pgn == PGN.ADDRESS_CLAIMED:
        response_request_address_claimed(j1939)
    elif pgn == PGN.DM1:
        response_request_dm1(j1939, sa)
    elif pgn == PGN.DM2:
        response_request_dm2(j1939, sa)
        acknowledge(ControlByte.ACKNOWLEDGEMENT_PGN_SUPPORTED, GroupFunctionValue.NORMAL)
    elif pgn == PGN.DM3:
        response_request_dm3(j1939, sa)
    elif PGN.AUXILIARY_VALVE_ESTIMATED_FLOW_0 <= pgn <= PGN.AUXILIARY_VALVE_ESTIMATED_FLOW_15:
        response_request_auxiliary_valve_estimated_flow(j1939, pgn & 0xF)
    elif pgn == PGN.GENERAL_PURPOSE_VALVE_ESTIMATED_FLOW:
        response_request_general_purpose_valve_estimated_flow(j1939, sa)
    elif PGN.AUXILIARY_VALVE_MEASURED_POSITION_0 <= pgn <= PGN.AUXILIARY_VALVE_MEASURED_POSITION_15:
        response_request_auxiliary_valve_measured_position(j1939, pgn & 0xF)
    elif pgn == PGN.SOFTWARE_IDENTIFICATION:
        response_request_software_identification(j1939, sa)
    elif pgn == PGN.ECU_IDENTIFICATION:
        response_request_ecu_identification(j1939, sa)
    elif pgn == PGN.COMPONENT_IDENTIFICATION:
        response_request_component_identification(j1939, sa)
    else:
        acknowledge(ControlByte.ACKNOWLEDGEMENT_PGN_NOT_SUPPORTED, GroupFunctionValue.NO_CAUSE)


def read_tp_data_transfer(j1939: J1939, sa: int, data) -> None:
    """Collect one transport package; on the last one, hand the whole message on.

    A complete RTS transfer is closed with an end-of-message acknowledgement.
    Afterwards the received transfer state is cleared.
    """
    sequence = data[0]
    if sequence == 0:
        raise ValueError("transport packages are numbered from 1")
    received = j1939.from_other_ecu_tp_dt
    received.sequence_number = sequence
    received.from_ecu_address = sa
    start = (sequence - 1) * TP_BYTES_PER_PACKAGE
    chunk = bytes(data[1:1 + TP_BYTES_PER_PACKAGE]).ljust(TP_BYTES_PER_PACKAGE, b"\0")
    received.data[start:start + TP_BYTES_PER_PACKAGE] = chunk

    cm = j1939.from_other_ecu_tp_cm
    if cm.number_of_packages == 0 or cm.number_of_packages != sequence:
        return

    pgn = cm.pgn_of_the_packeted_message
    total = cm.total_message_size
    length = min(sequence * TP_BYTES_PER_PACKAGE, total)
    complete = bytes(received.data[:length]).ljust(MAX_TP_DT, b"\0")
    dtc_count = (max(total - 2, 0) // 4) & 0xFF

    try:
        if cm.control_byte == ControlByte.TP_CM_RTS:
            send_acknowledgement(
                j1939, sa, ControlByte.TP_CM_END_OF_MSG_ACK, GroupFunctionValue.NORMAL, pgn
            )
        if pgn == PGN.COMMANDED_ADDRESS:
            read_commanded_address(j1939, complete)
        elif pgn == PGN.DM1:
            read_response_request_dm1(j1939, sa, complete, dtc_count)
        elif pgn == PGN.DM2:
            read_response_request_dm2(j1939, sa, complete, dtc_count)
        elif pgn == PGN.DM16:
            read_binary_data_transfer_dm16(j1939, sa, complete)
        elif pgn == PGN.SOFTWARE_IDENTIFICATION:
            read_response_request_software_identification(j1939, sa, complete)
        elif pgn == PGN.ECU_IDENTIFICATION:
            read_response_request_ecu_identification(j1939, sa, complete)
        elif pgn == PGN.COMPONENT_IDENTIFICATION:
            read_response_request_component_identification(j1939, sa, complete)
    finally:
        j1939.from_other_ecu_tp_dt = TransportData()
        j1939.from_other_ecu_tp_cm = TransportConnection()


def listen_for_messages(j1939: J1939) -> bool:
    """Read one frame from the bus and dispatch it.

    Every new frame is kept as the latest ID and data. Returns True when the
    frame was meant for this ECU and handled, False otherwise.
    """
    frame = _bus(j1939).read_message()
    if frame is None:
        return False

    can_id, data = frame.can_id, frame.data
    j1939.can_id = can_id
    j1939.data[:] = data
    j1939.id_and_data_is_updated = True

    id0 = (can_id >> 24) & 0xFF
    id1 = (can_id >> 16) & 0xFF
    da = (can_id >> 8) & 0xFF
    sa = can_id & 0xFF
    own = j1939.information_this_ecu.this_ecu_address
    to_us = da == own
    head = (id0, id1)

    if head == (0x18, 0xEA) and (to_us or da == BROADCAST_ADDRESS):
        read_request(j1939, sa, data)
    elif head == (0x18, 0xD9) and to_us:
        read_request_dm14(j1939, sa, data)
    elif head == (0x18, 0xE8) and to_us:
        read_acknowledgement(j1939, sa, data)
    elif head == (0x18, 0xD8) and to_us:
        read_response_dm15(j1939, sa, data)
    elif head == (0x18, 0xD7) and to_us:
        read_binary_data_transfer_dm16(j1939, sa, data)
    elif head == (0x1C, 0xEC) and to_us:
        read_tp_connection_management(j1939, sa, data)
    elif head == (0x1C, 0xEB) and to_us:
        read_tp_data_transfer(j1939, sa, data)
    elif head == (0x18, 0xEE) and da == BROADCAST_ADDRESS and sa != NULL_ADDRESS:
        read_response_request_address_claimed(j1939, sa, data)
    elif head == (0x18, 0xEE) and da == BROADCAST_ADDRESS and sa == NULL_ADDRESS:
        read_address_not_claimed(j1939, sa, data)
    elif head == (0x18, 0xFE) and da == 0xCA:
        read_response_request_dm1(j1939, sa, data, 1)
    elif head == (0x18, 0xFE) and da == 0xCB:
        read_response_request_dm2(j1939, sa, data, 1)
    elif head == (0x18, 0xFE) and da == 0xDA:
        read_response_request_software_identification(j1939, sa, data)
    elif head == (0x18, 0xFD) and da == 0xC5:
        read_response_request_ecu_identification(j1939, sa, data)
    elif head == (0x18, 0xFE) and da == 0xEB:
        read_response_request_component_identification(j1939, sa, data)
    elif head == (0x0C, 0xFE) and 0x10 <= da <= 0x1F:
        read_response_request_auxiliary_estimated_flow(j1939, sa, da & 0xF, data)
    elif head == (0x0C, 0xC6) and to_us:
        read_response_request_general_purpose_valve_estimated_flow(j1939, sa, data)
    elif head == (0x0C, 0xFF) and 0x20 <= da <= 0x2F:
        read_response_request_auxiliary_valve_measured_position(j1939, sa, da & 0xF, data)
    elif head == (0x0C, 0xFE) and 0x30 <= da <= 0x3F:
        read_auxiliary_valve_command(j1939, sa, da & 0xF, data)
    elif head == (0x0C, 0xC4) and to_us:
        read_general_purpose_valve_command(j1939, sa, data)
    elif head == (0x00, 0x02) and (to_us or da == BROADCAST_ADDRESS):
        read_address_delete(j1939, data)
    else:
        return False
    return True