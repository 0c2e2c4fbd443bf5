# must_monitor/config.py
from dataclasses import dataclass, field
from pathlib import Path
import configparser


@dataclass
class SerialConfig:
    port: str = "/dev/ttyUSB0"
    baud: int = 19200
    address: int = 4


@dataclass
class TimingConfig:
    small_frame_attempts: int = 40
    small_frame_interval: float = 0.1
    large_frame_timeout_ms: float = 600.0
    large_frame_interval: float = 0.02
    large_frame_chunk: int = 512
    inter_command_delay: float = 0.03


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    serial: SerialConfig
    timing: TimingConfig
    logging: LoggingConfig


class Config:
    def __init__(self, path: str):
        self.path = Path(path)
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        read = self.parser.read(self.path)
        if not read:
            raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str) -> AppConfig:
        cfg = cls(path)

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _as_int(value: str) -> int:
            # accepts "4" as well as "0x04"
            return int(value.strip(), 0)

        # --- Serial ---
        if "serial" not in p:
            raise ValueError("[serial] section missing from config")

        serial_sec = p["serial"]
        serial_kwargs = {}
        if "port" in serial_sec:
            port = serial_sec["port"].strip()
            if not port:
                raise ValueError("[serial] port must not be empty")
            serial_kwargs["port"] = port
        if "baud" in serial_sec:
            serial_kwargs["baud"] = int(serial_sec["baud"])
        if "address" in serial_sec:
            address = _as_int(serial_sec["address"])
            if not 0 <= address <= 0xFF:
                raise ValueError(f"[serial] address out of range: {address}")
            serial_kwargs["address"] = address
        serial_cfg = SerialConfig(**serial_kwargs)

        # --- Timing ---
        timing_kwargs = {}
        if "timing" in p:
            timing_sec = p["timing"]
            if "small_frame_attempts" in timing_sec:
                timing_kwargs["small_frame_attempts"] = int(timing_sec["small_frame_attempts"])
            if "small_frame_interval" in timing_sec:
                timing_kwargs["small_frame_interval"] = float(timing_sec["small_frame_interval"])
            if "large_frame_timeout_ms" in timing_sec:
                timing_kwargs["large_frame_timeout_ms"] = float(timing_sec["large_frame_timeout_ms"])
            if "large_frame_interval" in timing_sec:
                timing_kwargs["large_frame_interval"] = float(timing_sec["large_frame_interval"])
            if "large_frame_chunk" in timing_sec:
                timing_kwargs["large_frame_chunk"] = int(timing_sec["large_frame_chunk"])
            if "inter_command_delay" in timing_sec:
                timing_kwargs["inter_command_delay"] = float(timing_sec["inter_command_delay"])
        timing_cfg = TimingConfig(**timing_kwargs)

        # --- Logging ---
        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            serial=serial_cfg,
            timing=timing_cfg,
            logging=logging_cfg,
        )
