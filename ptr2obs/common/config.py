"""Configuration file loading and management"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ptr2obs.common.layout import DEFAULT_REGIONS
from ptr2obs.common.types import Region


@dataclass
class ObsConfig:
    """obs-websocket connection settings"""
    endpoint: str = "ws://localhost:4455"
    connect_timeout: float = 10.0
    handshake_timeout: float = 10.0
    event_subscriptions: int = 33  # Opaque subscription bitmask sent in Identify


@dataclass
class SupervisorConfig:
    """Reconnect supervisor timing"""
    backoff_seconds: float = 5.0
    check_interval_seconds: float = 1.0


@dataclass
class ZonesConfig:
    """Zone trigger settings"""
    poll_interval_ms: int = 100
    dead_zone: int = 5
    trigger_region: str = "DP3-1"
    left_threshold: int = 250
    right_threshold: int = 1650
    left_command: str = "Move Camera Right"
    right_command: str = "Move Camera Left"


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Complete application configuration"""
    obs: ObsConfig = field(default_factory=ObsConfig)
    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    zones: ZonesConfig = field(default_factory=ZonesConfig)
    regions: List[Region] = field(default_factory=lambda: list(DEFAULT_REGIONS))
    display: Optional[str] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/ptr2obs/config.yml",
        "/etc/ptr2obs/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary (empty for an empty file)

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
            ValueError: If the document is not a mapping
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def regions_parse(regions_data: List[Dict[str, Any]]) -> List[Region]:
        """
        Parse region table entries

        Args:
            regions_data: List of {name, x, y, width, height} mappings

        Returns:
            Regions in configured order

        Raises:
            KeyError: If a region is missing a field
            ValueError: If the table is empty or a region has non-positive size
        """
        if not regions_data:
            raise ValueError("Region table must list at least one region")
        regions: List[Region] = []
        for entry in regions_data:
            region = Region(
                name=str(entry["name"]),
                x=int(entry["x"]),
                y=int(entry["y"]),
                width=int(entry["width"]),
                height=int(entry["height"]),
            )
            if region.width <= 0 or region.height <= 0:
                raise ValueError(f"Region {region.name} must have positive width and height")
            regions.append(region)
        return regions

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Every section and key is optional; missing values keep their defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object
        """
        obs_data = data.get("obs") or {}
        defaults_obs = ObsConfig()
        obs = ObsConfig(
            endpoint=obs_data.get("endpoint", defaults_obs.endpoint),
            connect_timeout=float(obs_data.get("connect_timeout", defaults_obs.connect_timeout)),
            handshake_timeout=float(
                obs_data.get("handshake_timeout", defaults_obs.handshake_timeout)
            ),
            event_subscriptions=int(
                obs_data.get("event_subscriptions", defaults_obs.event_subscriptions)
            ),
        )

        supervisor_data = data.get("supervisor") or {}
        defaults_supervisor = SupervisorConfig()
        supervisor = SupervisorConfig(
            backoff_seconds=float(
                supervisor_data.get("backoff_seconds", defaults_supervisor.backoff_seconds)
            ),
            check_interval_seconds=float(
                supervisor_data.get(
                    "check_interval_seconds", defaults_supervisor.check_interval_seconds
                )
            ),
        )

        zones_data = data.get("zones") or {}
        defaults_zones = ZonesConfig()
        zones = ZonesConfig(
            poll_interval_ms=int(zones_data.get("poll_interval_ms", defaults_zones.poll_interval_ms)),
            dead_zone=int(zones_data.get("dead_zone", defaults_zones.dead_zone)),
            trigger_region=zones_data.get("trigger_region", defaults_zones.trigger_region),
            left_threshold=int(zones_data.get("left_threshold", defaults_zones.left_threshold)),
            right_threshold=int(zones_data.get("right_threshold", defaults_zones.right_threshold)),
            left_command=zones_data.get("left_command", defaults_zones.left_command),
            right_command=zones_data.get("right_command", defaults_zones.right_command),
        )

        regions_data = data.get("regions")
        regions = (
            ConfigLoader.regions_parse(regions_data)
            if regions_data is not None
            else list(DEFAULT_REGIONS)
        )

        logging_data = data.get("logging") or {}
        defaults_logging = LoggingConfig()
        logging = LoggingConfig(
            level=logging_data.get("level", defaults_logging.level),
            file=logging_data.get("file"),
            format=logging_data.get("format", defaults_logging.format),
        )

        return Config(
            obs=obs,
            supervisor=supervisor,
            zones=zones,
            regions=regions,
            display=data.get("display"),
            logging=logging,
        )

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults when none exists.

        Returns:
            Parsed Config object

        Raises:
            FileNotFoundError: If an explicit config file does not exist
            ValueError: If config file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()

        data = ConfigLoader.yaml_load(file_path)
        return ConfigLoader.config_parse(data)

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> Config:
        """
        Load configuration and apply command-line overrides

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values

        Returns:
            Config object with overrides applied

        Example:
            config = ConfigLoader.configWithOverrides_load(
                endpoint="ws://127.0.0.1:4455",
                log_level="DEBUG",
            )
        """
        config = ConfigLoader.config_load(file_path)

        if overrides.get("endpoint") is not None:
            config.obs.endpoint = overrides["endpoint"]
        if overrides.get("display") is not None:
            config.display = overrides["display"]
        if overrides.get("log_level") is not None:
            config.logging.level = overrides["log_level"]

        return config
