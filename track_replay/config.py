"""
Configuration for track replay.

Loaded from YAML; each top-level section maps onto a dataclass. A missing
file falls back to defaults.
"""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ClockConfig:
    speed: float = 1.0
    frame_interval_ms: float = 16.0


@dataclass
class FleetConfig:
    """Synthetic fleet replayed by the demo source."""
    layer_id: str = "vessels"
    title: str = "Vessels"
    origin_lat: float = 25.033
    origin_lng: float = 121.5654
    base_heading_deg: float = 90.0
    speed_kn: float = 10.0
    minutes: float = 10.0
    hz: float = 10.0
    lateral_spacing_m: float = 80.0


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None
    max_size_mb: int = 50
    backup_count: int = 5


@dataclass
class ReplayConfig:
    clock: ClockConfig = field(default_factory=ClockConfig)
    fleet: FleetConfig = field(default_factory=FleetConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ReplayConfig":
        data = data or {}
        return cls(
            clock=ClockConfig(**(data.get("clock") or {})),
            fleet=FleetConfig(**(data.get("fleet") or {})),
            server=ServerConfig(**(data.get("server") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(config_path: str) -> ReplayConfig:
    """Load configuration from a YAML file."""
    config_file = Path(config_path)

    if not config_file.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return ReplayConfig()

    with open(config_file) as f:
        data = yaml.safe_load(f)

    logger.info(f"Loaded configuration from {config_path}")
    return ReplayConfig.from_dict(data)
