# must_monitor/services/transport.py

from __future__ import annotations

import logging
from typing import Optional, Protocol

import serial


class TransportOpenError(RuntimeError):
    """Raised when the serial port cannot be opened or configured."""


class Transport(Protocol):
    """
    Duplex byte channel used by the frame assembler.

    read_available() never blocks: it returns whatever is already buffered,
    possibly b"".
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    def write(self, data: bytes) -> int: ...

    def read_available(self, max_bytes: Optional[int] = None) -> bytes: ...


class SerialTransport:
    """pyserial-backed transport: 8 data bits, no parity, 1 stop bit, no flow control."""

    def __init__(self, port: str = "/dev/ttyUSB0", baud: int = 19200, log: logging.Logger | None = None):
        self.port = port
        self.baud = baud
        self.log = log or logging.getLogger(__name__)
        self._ser: serial.Serial | None = None

    @property
    def is_open(self) -> bool:
        return self._ser is not None and self._ser.is_open

    def open(self) -> None:
        if self.is_open:
            return
        try:
            # timeout=0 puts reads in non-blocking mode
            self._ser = serial.Serial(
                port=self.port,
                baudrate=self.baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=0,
                write_timeout=1.0,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            self._ser = None
            raise TransportOpenError(f"Cannot open serial port {self.port}: {exc}") from exc
        self.log.debug("Opened %s at %d baud", self.port, self.baud)

    def close(self) -> None:
        if self._ser is None:
            return
        try:
            self._ser.close()
        finally:
            self._ser = None
            self.log.debug("Closed %s", self.port)

    def _require_open(self) -> serial.Serial:
        if self._ser is None:
            raise RuntimeError(f"Serial port {self.port} is not open")
        return self._ser

    def write(self, data: bytes) -> int:
        ser = self._require_open()
        written = ser.write(data) or 0
        ser.flush()
        return written

    def read_available(self, max_bytes: Optional[int] = None) -> bytes:
        ser = self._require_open()
        waiting = ser.in_waiting
        if not waiting:
            return b""
        if max_bytes is not None:
            waiting = min(waiting, max_bytes)
        return ser.read(waiting)
