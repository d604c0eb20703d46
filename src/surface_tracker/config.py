"""
Surface Tracker Configuration
=============================

This module handles configuration loading for the surface tracker.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SURFACE_SOURCE_URL              -> source.url
    SURFACE_SOURCE_BACKEND          -> source.backend
    SURFACE_MAX_QUEUE_SIZE          -> source.max_queue_size
    SURFACE_RECONNECT_BACKOFF_MS    -> source.reconnect_backoff_ms
    SURFACE_GRID_HEIGHT             -> sensor.height
    SURFACE_GRID_WIDTH              -> sensor.width
    SURFACE_NEW_OBJECT_THRESHOLD    -> tracking.new_object_threshold
    SURFACE_DELETE_OBJECT_THRESHOLD -> tracking.delete_object_threshold
    SURFACE_PORT                    -> server.port
    SURFACE_LOG_LEVEL               -> logging.level
    PORT                            -> server.port (Cloud Run)

All values are fixed for the lifetime of the process.

Example:
    from surface_tracker.config import settings

    print(settings.sensor.height, settings.sensor.width)
    print(settings.tracking.new_object_threshold)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="surface-tracker", description="Service name")
    version: str = Field(default="v0.1.0", description="Protocol version")


class SensorConfig(BaseModel):
    """Fixed load-cell grid dimensions."""

    height: int = Field(default=8, ge=1, description="Grid rows")
    width: int = Field(default=8, ge=1, description="Grid columns")


class TrackingConfig(BaseModel):
    """Object tracking thresholds and windows."""

    new_object_threshold: float = Field(
        default=140.0,
        ge=0,
        description="L1 delta that opens a test window; net weight for a new object",
    )
    delete_object_threshold: float = Field(
        default=80.0,
        ge=0,
        description="Net weight loss that triggers object removal",
    )
    calibration_window: int = Field(
        default=100,
        ge=1,
        description="Readings averaged into the baseline",
    )
    test_window: int = Field(
        default=20,
        ge=1,
        description="Readings averaged during a transient test",
    )
    log_every_n_readings: int = Field(
        default=100,
        ge=1,
        description="Log a tracker summary every N readings",
    )


class MockSourceConfig(BaseModel):
    """Mock sensor source configuration."""

    interval_seconds: float = Field(default=0.05, gt=0, description="Seconds between snapshots")
    noise_amplitude: float = Field(default=1.0, ge=0, description="Per-cell uniform noise")
    object_weight: float = Field(default=500.0, ge=0, description="Simulated object weight")
    place_after: int = Field(default=150, ge=0, description="Reading index of placement")
    remove_after: int = Field(default=300, ge=1, description="Reading index of removal")
    seed: int = Field(default=7, description="RNG seed")


class SourceConfig(BaseModel):
    """Snapshot source configuration."""

    backend: str = Field(
        default="websocket",
        description="Snapshot source: 'websocket' or 'mock'",
    )
    url: str = Field(
        default="ws://localhost:8000/ws/sensor",
        description="WebSocket URL of the sensor bridge",
    )
    reconnect_backoff_ms: int = Field(
        default=500,
        ge=100,
        description="Backoff in milliseconds between reconnect attempts",
    )
    max_reconnect_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum reconnection attempts (0 = unlimited)",
    )
    max_queue_size: int = Field(
        default=50,
        ge=1,
        description="Maximum size of internal reading buffer",
    )
    mock: MockSourceConfig = Field(default_factory=MockSourceConfig)


class PublishConfig(BaseModel):
    """Outbound channel configuration."""

    subscriber_queue_size: int = Field(
        default=100,
        ge=1,
        description="Per-subscriber queue bound for WebSocket clients",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the surface tracker.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    sensor: SensorConfig = Field(default_factory=SensorConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Source settings
    if env_url := os.environ.get("SURFACE_SOURCE_URL"):
        config_data.setdefault("source", {})["url"] = env_url
    if env_backend := os.environ.get("SURFACE_SOURCE_BACKEND"):
        config_data.setdefault("source", {})["backend"] = env_backend
    if env_queue := os.environ.get("SURFACE_MAX_QUEUE_SIZE"):
        config_data.setdefault("source", {})["max_queue_size"] = int(env_queue)
    if env_backoff := os.environ.get("SURFACE_RECONNECT_BACKOFF_MS"):
        config_data.setdefault("source", {})["reconnect_backoff_ms"] = int(env_backoff)

    # Sensor grid
    if env_height := os.environ.get("SURFACE_GRID_HEIGHT"):
        config_data.setdefault("sensor", {})["height"] = int(env_height)
    if env_width := os.environ.get("SURFACE_GRID_WIDTH"):
        config_data.setdefault("sensor", {})["width"] = int(env_width)

    # Threshold overrides
    if env_new := os.environ.get("SURFACE_NEW_OBJECT_THRESHOLD"):
        config_data.setdefault("tracking", {})["new_object_threshold"] = float(env_new)
    if env_delete := os.environ.get("SURFACE_DELETE_OBJECT_THRESHOLD"):
        config_data.setdefault("tracking", {})["delete_object_threshold"] = float(env_delete)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("SURFACE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("SURFACE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
