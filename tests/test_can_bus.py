import time

import pytest

from j1939stack.can_bus import CallbackBus, CanFrame, LoopbackBus, format_traffic
from j1939stack.enums import SendStatus


def test_loopback_round_trip():
    bus = LoopbackBus()
    data = bytes(range(1, 9))
    assert bus.send_message(0x18EEFF80, data) == SendStatus.OK
    assert bus.read_message() == CanFrame(0x18EEFF80, data)


def test_loopback_empty_returns_none():
    assert LoopbackBus().read_message() is None


def test_loopback_frame_read_once():
    bus = LoopbackBus()
    bus.send_message(0x100, b"\x01")
    assert bus.read_message().can_id == 0x100
    assert bus.read_message() is None


def test_loopback_keeps_order():
    bus = LoopbackBus()
    for can_id in (1, 2, 3):
        bus.send_message(can_id, bytes(8))
    assert [bus.read_message().can_id for _ in range(3)] == [1, 2, 3]


def test_short_message_is_zero_padded():
    bus = LoopbackBus()
    bus.send_message(5, b"\xaa\xbb")
    assert bus.read_message().data == b"\xaa\xbb" + bytes(6)


def test_request_is_three_bytes_and_read_padded():
    seen = []
    bus = LoopbackBus(traffic=lambda can_id, data, tx: seen.append((can_id, data, tx)))
    bus.send_request(0x18EAFF00, b"\x00\xee\x00")
    assert seen == [(0x18EAFF00, b"\x00\xee\x00", True)]
    frame = bus.read_message()
    assert frame.data == b"\x00\xee\x00" + bytes(5)
    assert seen[-1] == (0x18EAFF00, frame.data, False)


def test_request_with_wrong_length_raises():
    with pytest.raises(ValueError):
        LoopbackBus().send_request(1, b"\x00\x01")


def test_message_too_long_raises():
    with pytest.raises(ValueError):
        LoopbackBus().send_message(1, bytes(9))


def test_traffic_not_reported_without_new_message():
    seen = []
    bus = LoopbackBus(traffic=lambda *args: seen.append(args))
    assert bus.read_message() is None
    assert seen == []


def test_loopback_ring_overwrites_after_256_frames():
    bus = LoopbackBus()
    for can_id in range(257):
        bus.send_message(can_id, bytes(8))
    assert bus.read_message().can_id == 256
    assert bus.read_message().can_id == 1


def test_callback_bus_send_and_read():
    sent = []
    incoming = [(0x0CFE3080, b"\x10\x20"), None]
    bus = CallbackBus(lambda can_id, data: sent.append((can_id, data)), lambda: incoming.pop(0))
    assert bus.send_message(0x42, b"\x01") == SendStatus.OK
    assert sent == [(0x42, b"\x01" + bytes(7))]
    assert bus.read_message() == CanFrame(0x0CFE3080, b"\x10\x20" + bytes(6))
    assert bus.read_message() is None


def test_callback_bus_delay_waits_requested_time():
    bus = CallbackBus(lambda *a: None, lambda: None)
    start = time.monotonic()
    result = bus.delay(30)
    elapsed = time.monotonic() - start
    assert result is None
    assert elapsed >= 0.025


def test_format_traffic_pads_to_eight():
    line = format_traffic(0x18EEFF80, bytes([1, 2, 0xAB]), True)
    assert line == "TX\t18EEFF80\t1\t2\tAB\t0\t0\t0\t0\t0\t"


def test_format_traffic_receive_prefix_and_field_count():
    line = format_traffic(0x1, bytes(8), False)
    assert line.startswith("RX\t00000001\t")
    assert line.count("\t") == 10