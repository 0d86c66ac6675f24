"""
Configuration management for the security stack monitor.
Handles environment variables and application settings.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Settings
    app_name: str = Field(default="Security Stack Monitor", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")
    host: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(default=3000, description="Port for the HTTP server")

    # Backend endpoints
    docker_host: str = Field(default="unix:///var/run/docker.sock", description="Docker Engine API address (unix:// or http://)")
    docker_api_version: Optional[str] = Field(None, description="Pin the Docker Engine API version, e.g. v1.43")
    opensearch_url: str = Field(default="http://opensearch:9200", description="OpenSearch base URL")
    pihole_url: str = Field(default="http://pihole:80", description="Pi-hole base URL")

    # Container selection
    monitored_container_patterns: List[str] = Field(
        default_factory=lambda: ["suricata", "logstash", "opensearch", "admin-dashboard", "pihole"],
        description="Name substrings of containers shown on the dashboard",
    )
    sensor_container_name: str = Field(default="suricata", description="Name substring of the IDS sensor container")
    pipeline_container_name: str = Field(default="logstash", description="Name substring of the log shipper container")

    # Search cluster
    data_index_pattern: str = Field(default="suricata-*", description="Index pattern holding sensor events")

    # Timeouts
    connectivity_timeout_seconds: float = Field(default=5.0, description="Ceiling for the connectivity check")
    data_timeout_seconds: float = Field(default=30.0, description="Timeout applied to every backend data call")

    # Logs
    default_log_lines: int = Field(default=50, description="Log lines returned when none are requested")
    max_log_lines: int = Field(default=5000, description="Upper bound for requested log lines")

    # Capacity thresholds (percent of free disk)
    disk_pass_threshold_percent: float = Field(default=15.0, description="Free disk above this passes")
    disk_warning_threshold_percent: float = Field(default=5.0, description="Free disk above this warns, otherwise fails")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()
