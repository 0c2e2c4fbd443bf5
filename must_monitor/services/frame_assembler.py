# must_monitor/services/frame_assembler.py

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Protocol

from must_monitor.models.command import Command
from must_monitor.services.transport import Transport


log = logging.getLogger(__name__)


# ============================================================================
# Clock
# ============================================================================

class Clock(Protocol):
    def now(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Monotonic wall clock backed by time.sleep()."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


# ============================================================================
# Bounded-retry assembly (small responses)
# ============================================================================

def read_small_frame(
    transport: Transport,
    command: Command,
    *,
    clock: Clock | None = None,
    attempts: int = 40,
    interval: float = 0.1,
    cancel: Optional[threading.Event] = None,
) -> Optional[bytes]:
    """
    Write `command` and poll up to `attempts` times, `interval` seconds apart,
    until a single poll returns the whole response.

    Each poll is judged on its own bytes; a short poll is discarded, not
    carried into the next attempt. Returns exactly command.expected_length
    bytes, or None when the attempts run out.
    """
    clock = clock or SystemClock()
    expected = command.expected_length

    transport.write(command.frame)

    for attempt in range(1, attempts + 1):
        if _cancelled(cancel):
            log.debug("Small frame read cancelled after %d attempt(s)", attempt - 1)
            return None

        chunk = transport.read_available()
        if len(chunk) >= expected:
            log.debug("Small frame complete after %d attempt(s) (%d bytes)", attempt, len(chunk))
            return bytes(chunk[:expected])

        if chunk:
            log.debug("Small frame poll %d: discarding %d/%d bytes", attempt, len(chunk), expected)
        clock.sleep(interval)

    log.debug("Small frame incomplete after %d attempts (%d bytes expected)", attempts, expected)
    return None



# ============================================================================
# Wall-clock timeout assembly (large responses)
# ============================================================================

def read_large_frame(
    transport: Transport,
    command: Command,
    *,
    clock: Clock | None = None,
    timeout_ms: float = 600,
    interval: float = 0.02,
    chunk_size: int = 512,
    cancel: Optional[threading.Event] = None,
) -> Optional[bytes]:
    """
    Write `command` and accumulate chunks of up to `chunk_size` bytes until
    command.expected_length bytes have arrived or `timeout_ms` has elapsed since
    the write.
    """
    clock = clock or SystemClock()
    expected = command.expected_length

    transport.write(command.frame)
    start = clock.now()

    buffer = bytearray()
    while True:
        if _cancelled(cancel):
            log.debug("Large frame read cancelled with %d/%d bytes", len(buffer), expected)
            return None

        chunk = transport.read_available(chunk_size)
        if chunk:
            buffer.extend(chunk)

        if len(buffer) >= expected:
            log.debug("Large frame complete (%d bytes)", len(buffer))
            return bytes(buffer[:expected])

        elapsed_ms = (clock.now() - start) * 1000
        if elapsed_ms > timeout_ms:
            log.debug(
                "Large frame timed out after %.0f ms: %d/%d bytes",
                elapsed_ms,
                len(buffer),
                expected,
            )
            return None

        clock.sleep(interval)
