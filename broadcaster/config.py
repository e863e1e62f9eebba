"""
Configuration management for the Broadcaster TV client.
Uses pydantic-settings for environment variable loading.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    app_name: str = "Broadcaster TV"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Remote-control server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS Configuration
    # Default allows all origins so a phone on the LAN can act as the remote
    cors_origins: list[str] = ["*"]

    # Rate Limiting for remote-control commands
    remote_rate_limit_per_minute: int = 120

    # Broadcaster server defaults
    default_server_port: int = 12121
    production_server_host: str = "https://tv.tedcharles.net"
    production_server_port: int = 443

    # Directory client timeouts (seconds)
    request_timeout: float = 10.0
    resource_timeout: float = 30.0

    # Playback timing (seconds)
    channel_refresh_interval: float = 300.0  # 5 minutes
    settle_delay: float = 0.5
    retry_delay: float = 2.0
    max_retries: int = 3
    overlay_duration: float = 2.0
    guide_clock_interval: float = 1.0

    # Guide layout
    pixels_per_minute: float = 10.0
    row_height: float = 90.0
    channel_column_width: float = 200.0
    guide_scroll_context: float = 400.0
    guide_timezone: str = "UTC"

    # Persistence
    database_path: str = "data/broadcaster.db"

    # Pydantic V2 configuration
    model_config = SettingsConfigDict(env_prefix="BROADCASTER_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
