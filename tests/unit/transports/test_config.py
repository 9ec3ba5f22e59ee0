"""Tests for adapter configuration."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pygrowattspf.registers.profiles import ProfileName
from pygrowattspf.transports.config import AdapterConfig


class TestAdapterConfigValidation:
    """Tests for AdapterConfig.validate."""

    def test_defaults_valid(self) -> None:
        """Test default settings for a 9600 8N1 SPF link."""
        config = AdapterConfig(port="/dev/ttyUSB0")
        config.validate()

        assert config.profile is ProfileName.EXTENDED
        assert config.baudrate == 9600
        assert config.retries == 0

    def test_port_required(self) -> None:
        with pytest.raises(ValueError, match="port is required"):
            AdapterConfig(port="").validate()

    def test_invalid_parity(self) -> None:
        with pytest.raises(ValueError, match="parity"):
            AdapterConfig(port="/dev/ttyUSB0", parity="X").validate()

    @pytest.mark.parametrize("unit_id", [0, 248])
    def test_invalid_unit_id(self, unit_id: int) -> None:
        with pytest.raises(ValueError, match="unit_id"):
            AdapterConfig(port="/dev/ttyUSB0", unit_id=unit_id).validate()

    @pytest.mark.parametrize("timeout", [0.0, 10.0])
    def test_invalid_timeout(self, timeout: float) -> None:
        with pytest.raises(ValueError, match="timeout"):
            AdapterConfig(port="/dev/ttyUSB0", timeout=timeout).validate()

    def test_negative_retries(self) -> None:
        with pytest.raises(ValueError, match="retries"):
            AdapterConfig(port="/dev/ttyUSB0", retries=-1).validate()


class TestAdapterConfigSerialization:
    """Tests for dict and file loading."""

    def test_to_dict_from_dict(self) -> None:
        """Test dictionary round trip keeps every setting."""
        config = AdapterConfig(port="/dev/ttyUSB1", profile=ProfileName.SCALED, unit_id=4)
        restored = AdapterConfig.from_dict(config.to_dict())

        assert restored == config
        assert config.to_dict()["profile"] == "scaled"

    def test_from_dict_unknown_profile(self) -> None:
        with pytest.raises(ValueError):
            AdapterConfig.from_dict({"port": "/dev/ttyUSB0", "profile": "hybrid"})

    def test_from_options_file_addon_shape(self, tmp_path: Path) -> None:
        """Test the add-on options.json shape."""
        path = tmp_path / "options.json"
        path.write_text(
            json.dumps({"inverter": {"usbDevice": "/dev/ttyACM0", "model": "packed"}}),
            encoding="utf-8",
        )

        config = AdapterConfig.from_options_file(path)

        assert config.port == "/dev/ttyACM0"
        assert config.profile is ProfileName.PACKED

    def test_from_options_file_flat(self, tmp_path: Path) -> None:
        """Test a flat options file."""
        path = tmp_path / "options.json"
        path.write_text(json.dumps({"port": "/dev/ttyUSB0", "baudrate": 19200}), encoding="utf-8")

        config = AdapterConfig.from_options_file(path)

        assert config.baudrate == 19200
        assert config.profile is ProfileName.EXTENDED

    def test_from_options_file_not_object(self, tmp_path: Path) -> None:
        path = tmp_path / "options.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ValueError, match="expected a JSON object"):
            AdapterConfig.from_options_file(path)
