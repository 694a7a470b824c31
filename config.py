"""
Configuration for the telemetry service.
Loads settings from environment variables; main.py lets CLI flags override them.
"""
import os
from pathlib import Path

from history import DEFAULT_HISTORY_SIZE
from sensors import HTU21D_ADDRESS

DEFAULT_PAGE = Path(__file__).resolve().parent / "templates" / "index.html"


def _env_int(name, default, base=10):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw, base)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Config:
    """Service settings: port, interval and history_size, plus logging."""

    def __init__(self):
        self.port: int = _env_int("TELEMETRY_PORT", 80)
        self.interval: float = _env_float("TELEMETRY_INTERVAL", 1.0)
        self.history_size: int = _env_int("TELEMETRY_HISTORY_SIZE", DEFAULT_HISTORY_SIZE)
        # base 0 accepts "0x40" as well as "64"
        self.i2c_address: int = _env_int("TELEMETRY_I2C_ADDRESS", HTU21D_ADDRESS, base=0)

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_file: str = os.getenv("TELEMETRY_LOG_FILE", "telemetry.log")
        self.page_path: Path = Path(os.getenv("TELEMETRY_PAGE") or DEFAULT_PAGE)

        self.validate()

    def update(self, **overrides):
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(self, key):
                raise ValueError(f"Unknown option: {key}")
            setattr(self, key, value)
        self.validate()
        return self

    def validate(self):
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be in 0..65535, got {self.port}")
        if self.interval <= 0:
            raise ValueError(f"interval must be > 0, got {self.interval}")
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")

    def __repr__(self) -> str:
        return (
            f"Config(port={self.port}, interval={self.interval}, "
            f"history_size={self.history_size}, i2c_address=0x{self.i2c_address:02x}, "
            f"log_level='{self.log_level}')"
        )
