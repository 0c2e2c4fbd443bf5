# must_monitor/services/register_extractor.py

from __future__ import annotations

from typing import List

from must_monitor.models.command import HEADER_BYTES, TRAILER_BYTES, frame_length


class FrameLengthError(ValueError):
    """Raw frame size does not match the requested register count."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Invalid frame length, expected {expected} got {actual}")
        self.expected = expected
        self.actual = actual


def extract(raw_frame: bytes, register_count: int) -> List[str]:
    """
    Split a response frame into `register_count` four-digit hex strings.

    The first three bytes (address, function, byte count) and the last two
    (CRC) are dropped by position; nothing in them is parsed.
    """
    required = frame_length(register_count)
    if len(raw_frame) != required:
        raise FrameLengthError(required, len(raw_frame))

    out: List[str] = []
    high = ""
    last = len(raw_frame) - TRAILER_BYTES
    for i, byte in enumerate(raw_frame):
        if i < HEADER_BYTES or i >= last:
            continue
        if i % 2 == 1:
            high = f"{byte:02X}"
        else:
            out.append(high + f"{byte:02X}")
            high = ""

    return out
