# must_monitor/services/checksum.py

from __future__ import annotations


def checksum(data: bytes) -> bytes:
    """
    Vendor CRC used by the Must charger/inverter serial protocol.

    Bit-serial CRC-16 kept as two 8-bit accumulators, both seeded with 0xFF
    and reduced with 0x01/0xA0. Returns the two raw bytes (low, high) to
    append to a frame.
    """
    lo = 0xFF
    hi = 0xFF

    for b in data:
        lo ^= b
        for _ in range(8):
            carry_hi = hi & 1
            carry_lo = lo & 1
            hi >>= 1
            lo >>= 1
            if carry_hi:
                lo |= 0x80
            if carry_lo:
                hi ^= 0xA0
                lo ^= 0x01

    return bytes([lo, hi])


def hex_to_bytes(hex_text: str) -> bytes:
    """Decode spaced hex text ("04 03 3B 61 00 15"), padding an odd nibble."""
    cleaned = hex_text.replace(" ", "")
    if len(cleaned) % 2 != 0:
        cleaned += "0"
    return bytes.fromhex(cleaned)


def build_frame(hex_text: str) -> bytes:
    data = hex_to_bytes(hex_text)
    return data + checksum(data)
