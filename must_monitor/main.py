# must_monitor/main.py

from datetime import datetime, timezone
import json
import logging

from .cli import build_parser
from .config import Config
from .logging import ConsoleLog, StructuredLog, RunLogEntry

from .services.checksum import build_frame
from .services.inverter_reader import InverterReader
from .services.output_formatter import emit_json, emit_human
from .services.transport import SerialTransport, TransportOpenError


EXIT_OK = 0
EXIT_USAGE = 1
EXIT_TRANSPORT = 2
EXIT_NO_DATA = 10


def run_frame(hex_parts: list[str], as_json: bool) -> int:
    hex_text = " ".join(hex_parts)
    try:
        frame = build_frame(hex_text)
    except ValueError as exc:
        logging.getLogger("must_monitor").error("Invalid hex frame %r: %s", hex_text, exc)
        return EXIT_USAGE

    text = frame.hex(" ").upper()
    if as_json:
        print(json.dumps({"frame": text, "checksum": frame[-2:].hex(" ").upper()}))
    else:
        print(text)
    return EXIT_OK


def run_read(app_cfg, args, log, structured_logger: StructuredLog) -> int:
    port = args.port or app_cfg.serial.port
    baud = args.baud or app_cfg.serial.baud

    transport = SerialTransport(port, baud)
    reader = InverterReader(
        transport,
        app_cfg.timing,
        log,
        address=app_cfg.serial.address,
    )

    now = datetime.now(timezone.utc)
    log.debug("Reading %s at %d baud (address %d)", port, baud, app_cfg.serial.address)

    try:
        record = reader.read_all()
    except TransportOpenError as exc:
        log.error("%s", exc)
        structured_logger.write(
            RunLogEntry(
                timestamp=now.isoformat(),
                port=port,
                charger_ok=False,
                inverter_ok=False,
                record=None,
                error=str(exc),
            )
        )
        return EXIT_TRANSPORT

    status = reader.last_status
    structured_logger.write(
        RunLogEntry(
            timestamp=now.isoformat(),
            port=port,
            charger_ok=status.get("charger", False),
            inverter_ok=status.get("inverter", False),
            record=record or None,
        )
    )

    if not args.quiet:
        if args.json:
            emit_json(record, port)
        else:
            emit_human(record, port)

    if not record:
        log.warning("No telemetry received from %s", port)
        return EXIT_NO_DATA
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "frame":
        return run_frame(args.hex, args.json)

    app_cfg = Config.load(args.config)
    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )
    if args.debug:
        logging.getLogger("serial").setLevel(logging.INFO)

    if args.command == "read":
        return run_read(app_cfg, args, log, structured_logger)

    raise ValueError(f"Unsupported command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
