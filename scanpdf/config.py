"""Scan pipeline configuration module.

This module provides:
- ScanConfig: Dataclass for all scan run options
- YAML settings loader and SCANPDF_* environment overrides
- Validation and clamping of numeric options
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .constants import (
    DEFAULT_ACK_DELAY,
    DEFAULT_DPI,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LED_PATH,
    DEFAULT_NOTIFY_SOCKET,
    DEFAULT_RAMDISK,
    DEFAULT_SCAN_OPTIONS,
    DEFAULT_UPLOAD_ATTEMPTS,
    DEFAULT_UPLOAD_DIR,
    DEFAULT_UPLOAD_TARGET,
    DEFAULT_WORKERS,
    MAX_DPI,
    MAX_WORKERS,
    MIN_DPI,
    MIN_WORKERS,
    PROBE_TIMEOUT_SECONDS,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("settings") / "config.yaml"
ENV_PREFIX = "SCANPDF_"


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML configuration file with error handling.

    Args:
        config_path: Path to YAML config file

    Returns:
        Configuration dict, or empty dict if the file does not exist

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed
    """
    if not config_path.exists():
        logger.debug("Config file not found: %s", config_path)
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config file {config_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read config file {config_path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return loaded


def _parse_scan_options(raw: Any) -> list[tuple[str, list[str]]]:
    """Convert the YAML ``scanner.options`` list into (token, arguments) pairs."""
    if not isinstance(raw, list):
        raise ConfigurationError("scanner.options must be a list of {token, args} entries")
    options: list[tuple[str, list[str]]] = []
    for entry in raw:
        if not isinstance(entry, dict) or "token" not in entry or "args" not in entry:
            raise ConfigurationError(f"Invalid scanner option entry: {entry!r}")
        args = entry["args"]
        if isinstance(args, str):
            args = [args]
        options.append((str(entry["token"]), [str(arg) for arg in args]))
    return options


# (section, key) in the YAML file -> dataclass field
_YAML_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("scanner", "dpi", "dpi"),
    ("scanner", "command", "scanner_command"),
    ("scanner", "ack_delay", "ack_delay"),
    ("processing", "workers", "workers"),
    ("processing", "jpeg_quality", "jpeg_quality"),
    ("output", "prefix", "prefix"),
    ("output", "ramdisk", "ramdisk"),
    ("output", "timezone", "timezone"),
    ("upload", "target", "upload_target"),
    ("upload", "remote_dir", "upload_dir"),
    ("upload", "attempts", "upload_attempts"),
    ("upload", "probe_timeout", "probe_timeout"),
    ("status", "led_path", "led_path"),
    ("status", "notify_socket", "notify_socket"),
)

# SCANPDF_<NAME> -> (dataclass field, converter)
_ENV_FIELDS: tuple[tuple[str, str, Any], ...] = (
    ("DPI", "dpi", int),
    ("CORES", "workers", int),
    ("PREFIX", "prefix", str),
    ("JPEG_QUALITY", "jpeg_quality", int),
    ("RAMDISK", "ramdisk", Path),
    ("UPLOAD_TARGET", "upload_target", str),
    ("UPLOAD_DIR", "upload_dir", str),
    ("UPLOAD_ATTEMPTS", "upload_attempts", int),
    ("LED_PATH", "led_path", str),
    ("NOTIFY_SOCKET", "notify_socket", str),
    ("SCANNER_COMMAND", "scanner_command", str),
    ("TIMEZONE", "timezone", str),
)


def _clamp(name: str, value: int, lower: int, upper: int) -> int:
    clamped = max(lower, min(upper, value))
    if clamped != value:
        logger.warning("%s=%d out of range, clamped to %d", name, value, clamped)
    return clamped


@dataclass
class ScanConfig:
    """Scan run configuration with validation.

    Configuration Sources (in order of precedence):
    1. Constructor / CLI arguments via from_cli() (highest priority)
    2. SCANPDF_* environment variables (``.env`` is loaded by the CLI)
    3. YAML settings file via from_yaml()
    4. Default values (lowest priority)

    Example:
        >>> config = ScanConfig(dpi=300, prefix="invoices")
        >>> config.validate()

        >>> config = ScanConfig.load(args)  # YAML + environment + CLI
    """

    # ==================== Scanner ====================
    dpi: int = DEFAULT_DPI
    scanner_command: str = "scanimage"
    ack_delay: float = DEFAULT_ACK_DELAY
    scan_options: list[tuple[str, list[str]]] = field(
        default_factory=lambda: [(token, list(args)) for token, args in DEFAULT_SCAN_OPTIONS]
    )

    # ==================== Processing ====================
    workers: int = DEFAULT_WORKERS
    jpeg_quality: int = DEFAULT_JPEG_QUALITY

    # ==================== Output ====================
    prefix: str = ""
    ramdisk: Path = field(default_factory=lambda: Path(DEFAULT_RAMDISK))
    # IANA zone for document timestamps, None for the host's local time
    timezone: str | None = None

    # ==================== Upload ====================
    upload_target: str = DEFAULT_UPLOAD_TARGET
    upload_dir: str = DEFAULT_UPLOAD_DIR
    upload_attempts: int = DEFAULT_UPLOAD_ATTEMPTS
    probe_timeout: float = PROBE_TIMEOUT_SECONDS

    # ==================== Status Signalling ====================
    led_path: Path | None = field(default_factory=lambda: Path(DEFAULT_LED_PATH))
    notify_socket: Path | None = field(default_factory=lambda: Path(DEFAULT_NOTIFY_SOCKET))

    def __post_init__(self) -> None:
        """Convert path strings to Path objects."""
        if isinstance(self.ramdisk, str):
            self.ramdisk = Path(self.ramdisk)
        if isinstance(self.led_path, str):
            self.led_path = Path(self.led_path) if self.led_path else None
        if isinstance(self.notify_socket, str):
            self.notify_socket = Path(self.notify_socket) if self.notify_socket else None
        if not self.timezone:
            self.timezone = None

    # ==================== Loading ====================

    @classmethod
    def _yaml_kwargs(cls, config_path: Path) -> dict[str, Any]:
        yaml_config = _load_yaml_config(config_path)

        kwargs: dict[str, Any] = {}
        for section, key, field_name in _YAML_FIELDS:
            values = yaml_config.get(section) or {}
            if key in values:
                kwargs[field_name] = values[key]

        scanner_section = yaml_config.get("scanner") or {}
        if "options" in scanner_section:
            kwargs["scan_options"] = _parse_scan_options(scanner_section["options"])
        return kwargs

    @classmethod
    def _env_kwargs(cls, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
        env = os.environ if environ is None else environ

        kwargs: dict[str, Any] = {}
        for suffix, field_name, convert in _ENV_FIELDS:
            raw = env.get(ENV_PREFIX + suffix)
            if raw is None:
                continue
            try:
                kwargs[field_name] = convert(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {ENV_PREFIX}{suffix}: {raw!r}") from e
        return kwargs

    @classmethod
    def from_yaml(cls, config_path: Path, **overrides: Any) -> ScanConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file
            **overrides: Values to override from file

        Returns:
            ScanConfig instance

        Example:
            >>> config = ScanConfig.from_yaml(Path("settings/config.yaml"), dpi=300)
        """
        kwargs = cls._yaml_kwargs(config_path)
        kwargs.update(overrides)
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ScanConfig:
        """Create configuration from SCANPDF_* environment variables."""
        kwargs = cls._env_kwargs(environ)
        kwargs.update(overrides)
        return cls(**kwargs)

    @staticmethod
    def _get_arg(args: argparse.Namespace, name: str, default: Any = None) -> Any:
        """Safely get argument value from namespace."""
        return getattr(args, name, default)

    @classmethod
    def _extract_cli_kwargs(cls, args: argparse.Namespace) -> dict[str, Any]:
        """Extract configuration kwargs from CLI arguments.

        Args:
            args: Parsed CLI arguments

        Returns:
            Dictionary of config kwargs
        """
        # Format: (cli_name, config_name, transform_func)
        mappings: list[tuple[str, str, Any]] = [
            ("dpi", "dpi", None),
            ("cores", "workers", None),
            ("prefix", "prefix", None),
        ]

        kwargs: dict[str, Any] = {}
        for cli_name, config_name, transform in mappings:
            value = cls._get_arg(args, cli_name)
            if value is not None:
                kwargs[config_name] = transform(value) if transform else value
        return kwargs

    @classmethod
    def from_cli(cls, args: argparse.Namespace) -> ScanConfig:
        """Create configuration from CLI arguments only.

        Example:
            >>> args = parser.parse_args(["--dpi", "300"])
            >>> ScanConfig.from_cli(args).dpi
            300
        """
        return cls(**cls._extract_cli_kwargs(args))

    @classmethod
    def load(
        cls,
        args: argparse.Namespace | None = None,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ScanConfig:
        """Merge every configuration source and validate the result.

        Args:
            args: Parsed CLI arguments (``--config`` selects the YAML file)
            config_path: YAML file used when ``args`` does not name one
            environ: Environment mapping, defaults to ``os.environ``

        Returns:
            Validated ScanConfig instance
        """
        if args is not None and cls._get_arg(args, "config"):
            config_path = Path(args.config)
        kwargs = cls._yaml_kwargs(config_path or DEFAULT_CONFIG_PATH)
        kwargs.update(cls._env_kwargs(environ))
        if args is not None:
            kwargs.update(cls._extract_cli_kwargs(args))

        config = cls(**kwargs)
        config.validate()
        return config

    # ==================== Validation ====================

    def validate(self) -> None:
        """Validate configuration and clamp numeric ranges.

        - dpi is clamped to 72..600
        - workers is clamped to 1..32
        - '/' is removed from prefix

        Raises:
            ConfigurationError: If a value cannot be used at all
        """
        try:
            self.dpi = _clamp("dpi", int(self.dpi), MIN_DPI, MAX_DPI)
            self.workers = _clamp("workers", int(self.workers), MIN_WORKERS, MAX_WORKERS)
            self.upload_attempts = int(self.upload_attempts)
            self.jpeg_quality = int(self.jpeg_quality)
            self.ack_delay = float(self.ack_delay)
            self.probe_timeout = float(self.probe_timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric option: {e}") from e

        self.prefix = str(self.prefix or "").replace("/", "")

        if self.upload_attempts < 1:
            raise ConfigurationError(f"upload_attempts must be at least 1, got {self.upload_attempts}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigurationError(f"jpeg_quality must be between 1 and 100, got {self.jpeg_quality}")
        if self.ack_delay < 0:
            raise ConfigurationError(f"ack_delay must not be negative, got {self.ack_delay}")
        if not self.upload_target:
            raise ConfigurationError("upload_target must not be empty")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigurationError(f"Unknown timezone: {self.timezone!r}") from e

        logger.debug(
            "Configuration validated: dpi=%d, workers=%d, prefix=%r, target=%s",
            self.dpi,
            self.workers,
            self.prefix,
            self.upload_target,
        )
