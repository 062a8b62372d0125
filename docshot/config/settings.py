"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(
        default=None, description="Directory for rotating log files (console only when unset)"
    )

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")
    browser_pool_size: int = Field(default=2, description="Browser instance pool size")
    browser_args: List[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--allow-file-access-from-files",
        ],
        description="Extra Chromium launch arguments",
    )

    # Document Configuration
    content_root_selector: str = Field(
        default="#markdown-content", description="Root element holding the rendered document"
    )
    live_done_flag: str = Field(
        default="__md2xLiveDone", description="Window flag set to true when live rendering is done"
    )

    # Settle Configuration
    live_render_timeout_ms: int = Field(
        default=20000, description="Maximum wait for the live render done signal"
    )
    asset_wait_timeout_ms: int = Field(
        default=10000, description="Maximum wait for fonts and images to load"
    )
    capture_settle_delay_ms: int = Field(
        default=50, description="Pause between consecutive captures in a sequence"
    )

    # Capture Configuration
    auto_split_threshold_px: int = Field(
        default=30000, description="Physical height above which split='auto' splits"
    )
    max_split_iterations: int = Field(
        default=10000, description="Hard ceiling on slices produced by one split plan"
    )
    min_device_scale_factor: float = Field(
        default=0.25, gt=0, description="Lowest scale factor the viewport scaler may apply"
    )
    scale_change_epsilon: float = Field(
        default=0.01, ge=0, description="Minimum scale change that re-applies the viewport"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("browser_args", mode="before")
    @classmethod
    def parse_browser_args(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse browser arguments from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["--a", "--b"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "--a,--b"
            return [arg.strip() for arg in v.split(",") if arg.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="DOCSHOT_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
