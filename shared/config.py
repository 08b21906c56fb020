"""
Shared configuration management for the Person Directory services.
"""

from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="PERSONDIR_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


class PersonDirectoryConfig(ServiceConfig):
    """Settings for the caching person directory service."""

    # Wrapped lookup service
    directory_service_url: str = "http://localhost:8090"
    directory_timeout_seconds: float = Field(default=10.0, gt=0)
    case_insensitive_attributes: bool = False

    # Cache store
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: Optional[int] = Field(default=None, gt=0)

    # Cache key policy
    cache_key_attributes: Annotated[List[str], NoDecode] = Field(default_factory=list)
    default_attribute_name: Optional[str] = "username"

    @field_validator("cache_key_attributes", mode="before")
    @classmethod
    def _split_attribute_names(cls, value):
        # PERSONDIR_CACHE_KEY_ATTRIBUTES=uid,mail
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @field_validator("cache_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("memory", "redis"):
            raise ValueError(f"Unsupported cache backend: {value}")
        return value

    @field_validator("default_attribute_name", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)


def get_persondir_config(port: int = 8020, **overrides) -> PersonDirectoryConfig:
    """Get configuration for the person directory service."""
    return PersonDirectoryConfig(service_name="persondir", port=port, **overrides)
