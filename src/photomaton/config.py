"""
Photomaton Configuration
========================

This module handles configuration loading for the photo booth and its proxy.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    GEMINI_API_KEY              -> stylize.api_key
    PHOTOMATON_API_KEY          -> stylize.api_key (takes precedence)
    PHOTOMATON_STYLIZE_BACKEND  -> stylize.backend
    PHOTOMATON_MODEL            -> stylize.model
    PHOTOMATON_PROXY_URL        -> stylize.proxy_url
    PHOTOMATON_TIMEOUT          -> stylize.timeout_seconds
    PHOTOMATON_CAMERA_INDEX     -> capture.camera_index
    PHOTOMATON_SAMPLE_COUNT     -> capture.default_sample_count
    PHOTOMATON_OUTPUT_DIR       -> export.output_dir
    PHOTOMATON_PREFERENCES_PATH -> export.preferences_path
    PHOTOMATON_PORT             -> server.port
    PHOTOMATON_LOG_LEVEL        -> logging.level
    PORT                        -> server.port (Cloud Run)

Example:
    from photomaton.config import settings

    print(settings.service.name)
    print(settings.stylize.backend)
    print(settings.capture.default_sample_count)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification, reported by the liveness check."""

    name: str = Field(default="photomaton-api", description="Service name")
    version: str = Field(default="2.0.0", description="Service version")


class StylizeConfig(BaseModel):
    """Remote stylize capability configuration."""

    backend: str = Field(
        default="gemini",
        description="Stylize backend: 'gemini' (direct), 'proxy' or 'mock'",
    )
    model: str = Field(
        default="gemini-2.0-flash-exp-image-generation",
        description="Image generation model name",
    )
    api_key: str = Field(
        default="",
        description="Credential for direct calls (never sent through the proxy)",
    )
    api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Base URL of the generative-image API",
    )
    proxy_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the trusted proxy",
    )
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-call timeout for remote requests",
    )
    default_style: str = Field(
        default="Watercolor Painting",
        description="Style applied when none is chosen",
    )
    style_prompt_template: str = Field(
        default=(
            "Transform this image into a {style} style. "
            "Preserve the main subject with high detail."
        ),
        description="Prompt built from a named style label",
    )


class CaptureConfig(BaseModel):
    """Frame source configuration."""

    camera_index: int = Field(default=0, ge=0, description="OpenCV camera index")
    camera_width: int = Field(default=1280, ge=0, description="Requested width (0 = native)")
    camera_height: int = Field(default=720, ge=0, description="Requested height (0 = native)")
    photo_jpeg_quality: int = Field(
        default=95,
        ge=1,
        le=100,
        description="JPEG quality for single-photo capture",
    )
    sample_jpeg_quality: int = Field(
        default=85,
        ge=1,
        le=100,
        description="JPEG quality for video samples (lower: multi-frame batch)",
    )
    default_sample_count: int = Field(
        default=10,
        ge=1,
        description="Frames sampled from a video when not specified",
    )
    min_sample_count: int = Field(default=1, ge=1, description="Lower clamp for sample count")
    max_sample_count: int = Field(default=30, ge=1, description="Upper clamp for sample count")

    @model_validator(mode="after")
    def _check_sample_bounds(self) -> "CaptureConfig":
        if self.min_sample_count > self.max_sample_count:
            raise ValueError("min_sample_count must be <= max_sample_count")
        return self


class PresentationConfig(BaseModel):
    """Result presentation configuration."""

    frame_delay_ms: int = Field(
        default=100,
        ge=1,
        description="Hold time per frame in assembled videos",
    )
    preview_fps: float = Field(
        default=5.0,
        gt=0,
        description="Playback rate of the sampled-frame preview animation",
    )
    video_fps: float = Field(default=10.0, gt=0, description="Encoded video frame rate")
    video_codec: str = Field(default="mp4v", description="FourCC for cv2.VideoWriter")
    video_extension: str = Field(default=".mp4", description="Container extension")


class ExportConfig(BaseModel):
    """Export destinations."""

    output_dir: str = Field(default="./output", description="Download directory")
    preferences_path: str = Field(
        default="~/.photomaton/preferences.yaml",
        description="Persisted GitHub repository and token",
    )
    pdf_margin_mm: float = Field(default=10.0, ge=0, description="PDF page margin")
    pdf_dpi: int = Field(default=150, ge=72, le=600, description="PDF raster resolution")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API root")
    github_path_prefix: str = Field(default="output", description="Upload directory in the repo")


class ServerConfig(BaseModel):
    """Proxy server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for Photomaton.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    stylize: StylizeConfig = Field(default_factory=StylizeConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
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
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Stylize settings
    if env_key := os.environ.get("PHOTOMATON_API_KEY") or os.environ.get("GEMINI_API_KEY"):
        config_data.setdefault("stylize", {})["api_key"] = env_key
    if env_backend := os.environ.get("PHOTOMATON_STYLIZE_BACKEND"):
        config_data.setdefault("stylize", {})["backend"] = env_backend
    if env_model := os.environ.get("PHOTOMATON_MODEL"):
        config_data.setdefault("stylize", {})["model"] = env_model
    if env_proxy := os.environ.get("PHOTOMATON_PROXY_URL"):
        config_data.setdefault("stylize", {})["proxy_url"] = env_proxy
    if env_timeout := os.environ.get("PHOTOMATON_TIMEOUT"):
        config_data.setdefault("stylize", {})["timeout_seconds"] = float(env_timeout)

    # Capture settings
    if env_camera := os.environ.get("PHOTOMATON_CAMERA_INDEX"):
        config_data.setdefault("capture", {})["camera_index"] = int(env_camera)
    if env_samples := os.environ.get("PHOTOMATON_SAMPLE_COUNT"):
        config_data.setdefault("capture", {})["default_sample_count"] = int(env_samples)

    # Export settings
    if env_out := os.environ.get("PHOTOMATON_OUTPUT_DIR"):
        config_data.setdefault("export", {})["output_dir"] = env_out
    if env_prefs := os.environ.get("PHOTOMATON_PREFERENCES_PATH"):
        config_data.setdefault("export", {})["preferences_path"] = env_prefs

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("PHOTOMATON_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("PHOTOMATON_LOG_LEVEL"):
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
