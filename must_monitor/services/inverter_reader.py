# must_monitor/services/inverter_reader.py

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Sequence

import serial

from must_monitor.config import TimingConfig
from must_monitor.models.command import Command, charger_command, inverter_command
from must_monitor.services.frame_assembler import (
    Clock,
    SystemClock,
    read_large_frame,
    read_small_frame,
)
from must_monitor.services.register_extractor import FrameLengthError, extract
from must_monitor.services.telemetry_decoder import (
    TelemetryRecord,
    decode_charger,
    decode_inverter,
)
from must_monitor.services.transport import Transport


Decoder = Callable[[Sequence[str]], Optional[TelemetryRecord]]


class InverterReader:
    """
    One-shot reader for a Must charger/inverter.

    read_all() owns the transport for the whole cycle: it opens the port,
    sends the charger command, waits inter_command_delay, sends the inverter
    command, and always closes the port before returning. Inside a
    `with reader:` block the port is held by the block instead, so read_all()
    neither reopens nor closes it and may be called repeatedly. Only
    TransportOpenError escapes; missing or malformed frames just leave their
    fields out of the merged record.
    """

    def __init__(
        self,
        transport: Transport,
        timing: TimingConfig | None = None,
        log: Any = None,
        *,
        address: int = 4,
        clock: Clock | None = None,
    ):
        self.transport = transport
        self.timing = timing or TimingConfig()
        self.log = log or logging.getLogger(__name__)
        self.clock = clock or SystemClock()
        self.charger_cmd = charger_command(address)
        self.inverter_cmd = inverter_command(address)
        self.last_status: dict[str, bool] = {}
        self._held = False

    # ----------------------------------------------------------------------

    def __enter__(self) -> "InverterReader":
        self.transport.open()
        self._held = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._held = False
        self.transport.close()

    # ----------------------------------------------------------------------

    def _decode(self, command: Command, raw: Optional[bytes], decoder: Decoder) -> Optional[TelemetryRecord]:
        if raw is None:
            self.log.info("%s: no frame received", command.name)
            return None

        try:
            registers = extract(raw, command.register_count)
        except FrameLengthError as exc:
            self.log.error("%s: assembler returned a malformed frame: %s", command.name, exc)
            return None

        record = decoder(registers)
        if record is None:
            self.log.warning(
                "%s: register count %d does not match schema",
                command.name,
                len(registers),
            )
        return record

    def _safe_read(self, command: Command, read: Callable[[], Optional[bytes]]) -> Optional[bytes]:
        """Run one frame read; I/O errors mid-cycle count as a missing frame."""
        try:
            return read()
        except (serial.SerialException, OSError) as exc:
            self.log.warning("%s: serial I/O error: %s", command.name, exc)
            return None

    def read_charger(self, cancel: Optional[threading.Event] = None) -> Optional[TelemetryRecord]:
        t = self.timing
        raw = self._safe_read(self.charger_cmd, lambda: read_small_frame(
            self.transport,
            self.charger_cmd,
            clock=self.clock,
            attempts=t.small_frame_attempts,
            interval=t.small_frame_interval,
            cancel=cancel,
        ))
        return self._decode(self.charger_cmd, raw, decode_charger)

    def read_inverter(self, cancel: Optional[threading.Event] = None) -> Optional[TelemetryRecord]:
        t = self.timing
        raw = self._safe_read(self.inverter_cmd, lambda: read_large_frame(
            self.transport,
            self.inverter_cmd,
            clock=self.clock,
            timeout_ms=t.large_frame_timeout_ms,
            interval=t.large_frame_interval,
            chunk_size=t.large_frame_chunk,
            cancel=cancel,
        ))
        return self._decode(self.inverter_cmd, raw, decode_inverter)

    # ----------------------------------------------------------------------

    def read_all(self, cancel: Optional[threading.Event] = None) -> TelemetryRecord:
        result: TelemetryRecord = {}
        charger = None
        inverter = None

        owns_port = not self._held
        if owns_port:
            self.transport.open()
        try:
            charger = self.read_charger(cancel)

            if cancel is not None and cancel.is_set():
                self.log.info("Read cancelled; skipping inverter command")
            else:
                self.clock.sleep(self.timing.inter_command_delay)
                inverter = self.read_inverter(cancel)
        finally:
            if owns_port:
                self.transport.close()

        if charger:
            result.update(charger)
        if inverter:
            result.update(inverter)

        self.last_status = {
            "charger": charger is not None,
            "inverter": inverter is not None,
        }
        self.log.debug(
            "Read cycle done: charger=%s inverter=%s fields=%d",
            charger is not None,
            inverter is not None,
            len(result),
        )
        return result
