"""CAN transmit/receive layer used by the J1939 stack."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable, NamedTuple, Optional, Union

from .enums import SendStatus

__all__ = [
    "CanFrame",
    "CanBus",
    "LoopbackBus",
    "CallbackBus",
    "format_traffic",
    "FRAME_LENGTH",
    "REQUEST_LENGTH",
]

FRAME_LENGTH = 8
REQUEST_LENGTH = 3
_LOOPBACK_SLOTS = 256

TrafficCallback = Callable[[int, bytes, bool], None]


class CanFrame(NamedTuple):
    """An extended-ID CAN frame as seen by the stack."""

    can_id: int
    data: bytes


def _pad(data) -> bytes:
    return bytes(data).ljust(FRAME_LENGTH, b"\0")


def format_traffic(can_id: int, data, is_tx: bool) -> str:
    """Render one frame as a tab separated traffic line (without newline)."""
    values = list(data) + [0] * max(0, FRAME_LENGTH - len(data))
    fields = ["TX" if is_tx else "RX", f"{can_id & 0xFFFFFFFF:08X}"]
    fields.extend(f"{value:X}" for value in values)
    return "\t".join(fields) + "\t"


class CanBus(ABC):
    """Base of all CAN back ends; reports traffic to an optional callback."""

    def __init__(self, traffic: Optional[TrafficCallback] = None) -> None:
        self.traffic = traffic

    @abstractmethod
    def _transmit(self, can_id: int, data: bytes) -> SendStatus:
        """Put a frame of ``len(data)`` bytes on the bus."""

    @abstractmethod
    def _receive(self) -> Optional[CanFrame]:
        """Take the next unread frame from the bus, if any."""

    def _report(self, can_id: int, data: bytes, is_tx: bool) -> None:
        if self.traffic is not None:
            self.traffic(can_id, data, is_tx)

    def send_message(self, can_id: int, data) -> SendStatus:
        """Send an eight byte frame; shorter data is padded with zeros."""
        if len(data) > FRAME_LENGTH:
            raise ValueError(f"a CAN frame holds at most {FRAME_LENGTH} bytes")
        payload = _pad(data)
        status = self._transmit(can_id, payload)
        self._report(can_id, payload, True)
        return status

    def send_request(self, can_id: int, pgn) -> SendStatus:
        """Send a three byte PGN request frame."""
        if len(pgn) != REQUEST_LENGTH:
            raise ValueError(f"a PGN request carries exactly {REQUEST_LENGTH} bytes")
        payload = bytes(pgn)
        status = self._transmit(can_id, payload)
        self._report(can_id, payload, True)
        return status

    def read_message(self) -> Optional[CanFrame]:
        """Return the next new frame, or None when nothing new has arrived."""
        frame = self._receive()
        if frame is None:
            return None
        frame = CanFrame(frame.can_id, _pad(frame.data[:FRAME_LENGTH]))
        self._report(frame.can_id, frame.data, False)
        return frame

    def delay(self, milliseconds: int) -> None:
        """Wait between transport packages; the default back end does not wait."""


class LoopbackBus(CanBus):
    """Feeds every sent frame back as a received one, through a 256-slot ring."""

    def __init__(self, traffic: Optional[TrafficCallback] = None) -> None:
        super().__init__(traffic)
        self._slots: list[Optional[CanFrame]] = [None] * _LOOPBACK_SLOTS
        self._transmit_index = 0
        self._receive_index = 0

    def _transmit(self, can_id: int, data: bytes) -> SendStatus:
        self._slots[self._transmit_index] = CanFrame(can_id, bytes(data))
        self._transmit_index = (self._transmit_index + 1) % _LOOPBACK_SLOTS
        return SendStatus.OK

    def _receive(self) -> Optional[CanFrame]:
        frame = self._slots[self._receive_index]
        if frame is None:
            return None
        self._slots[self._receive_index] = None
        self._receive_index = (self._receive_index + 1) % _LOOPBACK_SLOTS
        return frame


ReadResult = Optional[Union[CanFrame, tuple]]


class CallbackBus(CanBus):
    """Hands frames to user functions, e.g. a socket, USB or hardware driver.

    ``send(can_id, data)`` receives the frame bytes; ``read()`` returns
    ``None`` or a ``(can_id, data)`` pair for a new frame.
    """

    def __init__(
        self,
        send: Callable[[int, bytes], object],
        read: Callable[[], ReadResult],
        traffic: Optional[TrafficCallback] = None,
    ) -> None:
        super().__init__(traffic)
        self._send = send
        self._read = read

    def _transmit(self, can_id: int, data: bytes) -> SendStatus:
        self._send(can_id, data)
        return SendStatus.OK

    def _receive(self) -> Optional[CanFrame]:
        result = self._read()
        if result is None:
            return None
        can_id, data = result
        return CanFrame(can_id, bytes(data))

    def delay(self, milliseconds: int) -> None:
        """Block for the given number of milliseconds."""
        time.sleep(milliseconds / 1000)