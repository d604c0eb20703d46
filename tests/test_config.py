"""
Configuration Tests
===================
"""

import pytest
from pydantic import ValidationError

from surface_tracker.config import Settings, load_config


class TestLoadConfig:
    """Tests for YAML loading and environment overrides."""

    def test_defaults(self):
        settings = Settings()

        assert settings.sensor.height == 8
        assert settings.tracking.new_object_threshold == 140.0
        assert settings.tracking.delete_object_threshold == 80.0
        assert settings.tracking.calibration_window == 100
        assert settings.tracking.test_window == 20
        assert settings.source.backend == "websocket"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "sensor:\n"
            "  height: 16\n"
            "  width: 12\n"
            "tracking:\n"
            "  test_window: 10\n"
        )

        settings = load_config(str(path))

        assert settings.sensor.height == 16
        assert settings.sensor.width == 12
        assert settings.tracking.test_window == 10
        assert settings.tracking.calibration_window == 100

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("tracking:\n  new_object_threshold: 200\n")
        monkeypatch.setenv("SURFACE_NEW_OBJECT_THRESHOLD", "175.5")
        monkeypatch.setenv("SURFACE_SOURCE_BACKEND", "mock")
        monkeypatch.setenv("SURFACE_GRID_WIDTH", "4")

        settings = load_config(str(path))

        assert settings.tracking.new_object_threshold == 175.5
        assert settings.source.backend == "mock"
        assert settings.sensor.width == 4

    def test_port_env(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("")
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.setenv("SURFACE_PORT", "9000")

        assert load_config(str(path)).server.port == 9000

        monkeypatch.setenv("PORT", "8080")
        assert load_config(str(path)).server.port == 8080

    def test_negative_threshold_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("tracking:\n  delete_object_threshold: -5\n")

        with pytest.raises(ValidationError):
            load_config(str(path))
