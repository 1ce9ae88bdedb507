"""Tests for ScanConfig loading, precedence and validation."""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from scanpdf.config import ScanConfig
from scanpdf.constants import DEFAULT_SCAN_OPTIONS
from scanpdf.exceptions import ConfigurationError


def _args(**values) -> argparse.Namespace:
    defaults = {"dpi": None, "cores": None, "prefix": None, "config": None}
    defaults.update(values)
    return argparse.Namespace(**defaults)


@pytest.fixture
def yaml_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        """
scanner:
  dpi: 300
  ack_delay: 0.2
  options:
    - {token: "--mode ", args: ["--mode=Gray"]}
processing:
  workers: 4
output:
  prefix: yaml
upload:
  target: nas
  attempts: 5
status:
  led_path: ""
""",
        encoding="utf-8",
    )
    return path


class TestScanConfigDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = ScanConfig()
        config.validate()
        assert config.dpi == 200
        assert config.workers == 3
        assert config.prefix == ""
        assert config.jpeg_quality == 70
        assert config.upload_attempts == 3
        assert config.ramdisk == Path("/dev/shm")
        assert config.scan_options == [(token, list(args)) for token, args in DEFAULT_SCAN_OPTIONS]

    def test_timezone_defaults_to_local_time(self):
        assert ScanConfig().timezone is None


class TestScanConfigValidation:
    """Tests for clamping and rejection."""

    @pytest.mark.parametrize(("dpi", "expected"), [(10, 72), (72, 72), (300, 300), (1200, 600)])
    def test_dpi_is_clamped(self, dpi: int, expected: int):
        config = ScanConfig(dpi=dpi)
        config.validate()
        assert config.dpi == expected

    @pytest.mark.parametrize(("workers", "expected"), [(0, 1), (-3, 1), (8, 8), (64, 32)])
    def test_workers_are_clamped(self, workers: int, expected: int):
        config = ScanConfig(workers=workers)
        config.validate()
        assert config.workers == expected

    def test_prefix_slashes_removed(self):
        config = ScanConfig(prefix="../in/voices/")
        config.validate()
        assert config.prefix == "..invoices"

    def test_zero_upload_attempts_rejected(self):
        with pytest.raises(ConfigurationError, match="upload_attempts"):
            ScanConfig(upload_attempts=0).validate()

    def test_quality_out_of_range_rejected(self):
        with pytest.raises(ConfigurationError, match="jpeg_quality"):
            ScanConfig(jpeg_quality=101).validate()

    def test_non_numeric_rejected(self):
        with pytest.raises(ConfigurationError):
            ScanConfig(dpi="high").validate()  # type: ignore[arg-type]


class TestScanConfigSources:
    """Tests for YAML, environment and CLI sources."""

    def test_from_yaml(self, yaml_file: Path):
        config = ScanConfig.from_yaml(yaml_file)
        assert config.dpi == 300
        assert config.workers == 4
        assert config.prefix == "yaml"
        assert config.upload_target == "nas"
        assert config.upload_attempts == 5
        assert config.ack_delay == 0.2
        assert config.led_path is None
        assert config.scan_options == [("--mode ", ["--mode=Gray"])]

    def test_from_yaml_overrides(self, yaml_file: Path):
        assert ScanConfig.from_yaml(yaml_file, dpi=150).dpi == 150

    def test_missing_yaml_uses_defaults(self, tmp_path: Path):
        assert ScanConfig.from_yaml(tmp_path / "missing.yaml").dpi == 200

    def test_malformed_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("scanner: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="parse"):
            ScanConfig.from_yaml(path)

    def test_invalid_option_entry(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("scanner:\n  options:\n    - --mode=Color\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="scanner option"):
            ScanConfig.from_yaml(path)

    def test_from_env(self):
        config = ScanConfig.from_env({"SCANPDF_DPI": "400", "SCANPDF_CORES": "2", "SCANPDF_PREFIX": "env"})
        assert (config.dpi, config.workers, config.prefix) == (400, 2, "env")

    def test_invalid_env_value(self):
        with pytest.raises(ConfigurationError, match="SCANPDF_DPI"):
            ScanConfig.from_env({"SCANPDF_DPI": "lots"})

    def test_from_cli(self):
        config = ScanConfig.from_cli(_args(dpi=600, cores=5, prefix="cli"))
        assert (config.dpi, config.workers, config.prefix) == (600, 5, "cli")

    def test_precedence(self, yaml_file: Path):
        """CLI beats environment, environment beats YAML."""
        config = ScanConfig.load(
            _args(dpi=100, config=str(yaml_file)),
            environ={"SCANPDF_DPI": "250", "SCANPDF_CORES": "6"},
        )
        assert config.dpi == 100
        assert config.workers == 6
        assert config.prefix == "yaml"

    def test_load_validates(self, tmp_path: Path):
        config = ScanConfig.load(_args(dpi=5000, cores=100), config_path=tmp_path / "none.yaml", environ={})
        assert config.dpi == 600
        assert config.workers == 32

    def test_timezone_from_yaml_and_environment(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("output:\n  timezone: Europe/Berlin\n", encoding="utf-8")
        assert ScanConfig.load(config_path=path, environ={}).timezone == "Europe/Berlin"
        config = ScanConfig.load(config_path=path, environ={"SCANPDF_TIMEZONE": "America/Los_Angeles"})
        assert config.timezone == "America/Los_Angeles"

    def test_empty_timezone_means_local_time(self):
        assert ScanConfig(timezone="").timezone is None

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown timezone"):
            ScanConfig(timezone="Mars/Olympus_Mons").validate()
