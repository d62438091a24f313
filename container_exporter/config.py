"""
Configuration for the Docker Stats Exporter
"""
import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExporterConfig(BaseModel):
    """Exporter settings, each defaulting from the environment"""

    model_config = ConfigDict(validate_default=True)

    # HTTP server
    port: int = Field(
        default_factory=lambda: os.getenv('EXPORTER_PORT', '924'),
        ge=1,
        le=65535
    )
    host: str = Field(default_factory=lambda: os.getenv('EXPORTER_HOST', '0.0.0.0'))

    # Docker API connection
    docker_host: Optional[str] = Field(default_factory=lambda: os.getenv('DOCKER_HOST'))
    docker_api_version: str = Field(
        default_factory=lambda: os.getenv('DOCKER_API_VERSION', '1.41')
    )
    docker_timeout: int = Field(
        default_factory=lambda: os.getenv('DOCKER_TIMEOUT', '60'),
        gt=0
    )

    # Scrape behaviour
    fetch_workers: int = Field(
        default_factory=lambda: os.getenv('FETCH_WORKERS', '1'),
        ge=1
    )
    scrape_timeout: Optional[float] = Field(
        default_factory=lambda: os.getenv('SCRAPE_TIMEOUT')
    )

    log_level: str = Field(default_factory=lambda: os.getenv('LOG_LEVEL', 'INFO'))

    @field_validator('docker_host', 'scrape_timeout', mode='before')
    @classmethod
    def _blank_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('scrape_timeout')
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError('scrape_timeout must be positive')
        return value

    @field_validator('log_level')
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Unknown log level: {value}")
        return level
