# must_monitor/cli.py
import argparse

def build_parser():
    parser = argparse.ArgumentParser(
        prog="must-monitor",
        description="Must charger/inverter serial telemetry reader"
    )

    parser.add_argument(
        "--config",
        default="must_monitor.conf",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress stdout output (cron-friendly)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # One-shot read cycle
    cmd_read = sub.add_parser("read", help="Read charger and inverter telemetry once")
    cmd_read.add_argument(
        "--port",
        help="Override [serial] port",
    )
    cmd_read.add_argument(
        "--baud",
        type=int,
        help="Override [serial] baud",
    )

    # Framing helper
    cmd_frame = sub.add_parser(
        "frame",
        help="Print a hex command with its checksum appended",
    )
    cmd_frame.add_argument(
        "hex",
        nargs="+",
        help='Command bytes as hex text, e.g. "04 03 3B 61 00 15"',
    )

    return parser
