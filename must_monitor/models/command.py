# must_monitor/models/command.py
from dataclasses import dataclass

from must_monitor.services.checksum import checksum


READ_HOLDING_REGISTERS = 0x03
DEFAULT_ADDRESS = 0x04

# Response framing: address, function, byte count ... CRC low, CRC high
HEADER_BYTES = 3
TRAILER_BYTES = 2


def frame_length(register_count: int) -> int:
    return HEADER_BYTES + register_count * 2 + TRAILER_BYTES


@dataclass(frozen=True)
class Command:
    name: str
    register_start: int
    register_count: int
    address: int = DEFAULT_ADDRESS
    function: int = READ_HOLDING_REGISTERS

    @property
    def payload(self) -> bytes:
        return bytes([
            self.address & 0xFF,
            self.function & 0xFF,
            (self.register_start >> 8) & 0xFF,
            self.register_start & 0xFF,
            (self.register_count >> 8) & 0xFF,
            self.register_count & 0xFF,
        ])

    @property
    def frame(self) -> bytes:
        payload = self.payload
        return payload + checksum(payload)

    @property
    def expected_length(self) -> int:
        return frame_length(self.register_count)


CHARGER_REGISTER_START = 0x3B61
CHARGER_REGISTER_COUNT = 21
INVERTER_REGISTER_START = 0x6271
INVERTER_REGISTER_COUNT = 74


def charger_command(address: int = DEFAULT_ADDRESS) -> Command:
    return Command("charger", CHARGER_REGISTER_START, CHARGER_REGISTER_COUNT, address=address)


def inverter_command(address: int = DEFAULT_ADDRESS) -> Command:
    return Command("inverter", INVERTER_REGISTER_START, INVERTER_REGISTER_COUNT, address=address)
