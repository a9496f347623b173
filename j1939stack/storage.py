"""Persistence of ECU records and the memory handler behind DM14 requests."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .enums import DM15Status

__all__ = ["MemoryAccess", "save_bytes", "load_bytes", "access_memory"]

_DEBUG_MEMORY_TEXT = b'Look at "FLASH_EEPROM_RAM_Memory.c"\0'
_DEBUG_ALLOWED_BYTES = 40


def save_bytes(path: str | os.PathLike, data) -> None:
    """Write ``data`` to ``path``, replacing its contents; raises OSError on failure."""
    with open(path, "wb") as file:
        file.write(bytes(data))


def load_bytes(path: str | os.PathLike, length: int) -> bytes:
    """Read ``length`` bytes from ``path``, zero padded.

    A missing file is created empty, so the result is then all zeros.
    Raises OSError when the file can neither be read nor created.
    """
    try:
        with open(path, "rb") as file:
            content = file.read(length)
    except FileNotFoundError:
        with open(path, "wb"):
            pass
        content = b""
    return content.ljust(length, b"\0")


@dataclass
class MemoryAccess:
    """Outcome of a memory request, in the terms of a DM15 response."""

    number_of_allowed_bytes: int
    status: int
    edc_parameter: int
    edcp_extension: int
    seed: int
    raw_binary_data: bytes


def access_memory(
    number_of_requested_bytes: int,
    pointer_type: int,
    command: int,
    pointer: int,
    pointer_extension: int,
    key: int,
) -> MemoryAccess:
    """Serve a DM14 memory request.

    Without a memory back end this answers with a fixed debugging text,
    allows 40 bytes and tells the requester to proceed.
    """
    return MemoryAccess(
        number_of_allowed_bytes=_DEBUG_ALLOWED_BYTES,
        status=DM15Status.PROCEED,
        edc_parameter=pointer,
        edcp_extension=pointer_extension,
        seed=key,
        raw_binary_data=_DEBUG_MEMORY_TEXT.ljust(_DEBUG_ALLOWED_BYTES, b"\0"),
    )