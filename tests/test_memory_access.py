import pytest

from j1939stack.can_bus import LoopbackBus
from j1939stack.enums import PGN, ControlByte, DM15Status, SendStatus
from j1939stack.memory_access import (
    read_binary_data_transfer_dm16,
    read_request_dm14,
    read_response_dm15,
    send_binary_data_transfer_dm16,
    send_request_dm14,
    send_response_dm15,
)
from j1939stack.structs import J1939


def make_node(address=0x80):
    node = J1939(bus=LoopbackBus())
    node.information_this_ecu.this_ecu_address = address
    return node


def drain(node):
    frames = []
    while (frame := node.bus.read_message()) is not None:
        frames.append(frame)
    return frames


def head(frame):
    return frame.can_id >> 16


def test_dm14_request_frame_layout():
    node = make_node(0x80)
    assert send_request_dm14(node, 0x25, 5, 1, 2, 0x123456, 7, 0xBEEF) == SendStatus.OK
    (frame,) = drain(node)
    assert frame.can_id == (0x18D9 << 16) | (0x25 << 8) | 0x80
    assert frame.data[0] == 5
    assert frame.data[1] & 0x01 == 1
    assert (frame.data[1] >> 4) & 0x01 == 1
    assert frame.data[2:5] == (0x123456).to_bytes(3, "little")
    assert frame.data[5] == 7
    assert frame.data[6:8] == (0xBEEF).to_bytes(2, "little")


def test_dm15_round_trip():
    sender = make_node(0x80)
    send_response_dm15(sender, 0x30, 5, DM15Status.OPERATION_COMPLETED, 0x123456, 7, 0xABCD)
    (frame,) = drain(sender)
    assert head(frame) == 0x18D8

    receiver = make_node(0x30)
    read_response_dm15(receiver, 0x80, frame.data)
    dm15 = receiver.from_other_ecu_dm.dm15
    assert dm15.number_of_allowed_bytes == 5
    assert dm15.status == DM15Status.OPERATION_COMPLETED
    assert dm15.edc_parameter == 0x123456
    assert dm15.edcp_extension == 7
    assert dm15.seed == 0xABCD
    assert dm15.from_ecu_address == 0x80


def test_dm16_single_frame_round_trip():
    sender = make_node(0x80)
    assert send_binary_data_transfer_dm16(sender, 0x30, 3, b"abc") == SendStatus.OK
    (frame,) = drain(sender)
    assert head(frame) == 0x18D7
    assert frame.data[:4] == b"\x03abc"

    receiver = make_node(0x30)
    read_binary_data_transfer_dm16(receiver, 0x80, frame.data)
    dm16 = receiver.from_other_ecu_dm.dm16
    assert dm16.number_of_occurrences == 3
    assert bytes(dm16.raw_binary_data[:3]) == b"abc"
    assert not any(dm16.raw_binary_data[3:])


def test_dm16_read_clears_previous_data():
    node = make_node()
    read_binary_data_transfer_dm16(node, 0x10, b"\x05hello")
    read_binary_data_transfer_dm16(node, 0x10, b"\x02hi")
    assert bytes(node.from_other_ecu_dm.dm16.raw_binary_data[:5]) == b"hi\0\0\0"


def test_dm16_large_broadcast_round_trip():
    sender = make_node(0x80)
    raw = bytes(range(20))
    send_binary_data_transfer_dm16(sender, 0xFF, len(raw), raw)
    cm, *packages = drain(sender)
    assert cm.data[0] == ControlByte.TP_CM_BAM
    assert cm.data[5:8] == int(PGN.DM16).to_bytes(3, "little")
    total = cm.data[1] | (cm.data[2] << 8)
    assert total == len(raw) + 1

    payload = b"".join(p.data[1:] for p in packages)[:total]
    receiver = make_node(0x30)
    read_binary_data_transfer_dm16(receiver, 0x80, payload)
    assert bytes(receiver.from_other_ecu_dm.dm16.raw_binary_data[: len(raw)]) == raw


@pytest.mark.parametrize("count, raw", [(256, bytes(256)), (-1, b""), (5, b"abc")])
def test_dm16_rejects_bad_counts(count, raw):
    with pytest.raises(ValueError):
        send_binary_data_transfer_dm16(make_node(), 0x30, count, raw)


def test_dm14_request_to_one_ecu_answers_with_dm15_rts_dm15():
    node = make_node(0x80)
    request = bytes((5, 0b11, 0, 0, 0, 0, 0xFF, 0xFF))
    assert read_request_dm14(node, 0x30, request) == SendStatus.OK
    frames = drain(node)
    assert [head(f) for f in frames] == [0x18D8, 0x1CEC, 0x18D8]
    assert all((f.can_id >> 8) & 0xFF == 0x30 for f in frames)
    assert frames[1].data[0] == ControlByte.TP_CM_RTS
    assert bytes(node.this_ecu_tp_dt.data[1:8]) == b"Look at"


def test_dm14_request_broadcast_delivers_memory_text():
    node = make_node(0x80)
    read_request_dm14(node, 0xFF, bytes((5, 0b11, 0, 0, 0, 0, 0xFF, 0xFF)))
    frames = drain(node)
    cm = next(f for f in frames if head(f) == 0x1CEC)
    packages = [f for f in frames if head(f) == 0x1CEB]
    total = cm.data[1] | (cm.data[2] << 8)
    payload = b"".join(p.data[1:] for p in packages)[:total]

    receiver = make_node(0x30)
    read_binary_data_transfer_dm16(receiver, 0x80, payload)
    text = bytes(receiver.from_other_ecu_dm.dm16.raw_binary_data)
    assert text.startswith(b'Look at "FLASH_EEPROM_RAM_Memory.c"')
    assert receiver.from_other_ecu_dm.dm16.number_of_occurrences == total - 1


def test_dm14_request_too_short():
    with pytest.raises(ValueError):
        read_request_dm14(make_node(), 0x30, b"\x01\x02")