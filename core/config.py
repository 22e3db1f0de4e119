"""Configuration models and loading."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "medcore-gateway"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Environment variable -> (section, key) overrides applied on top of the file
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "PORT": ("proxy", "port"),
    "NODE_ENV": ("proxy", "environment"),
    "AUTH_SERVICE_URL": ("services", "auth", "base_url"),
    "USER_SERVICE_URL": ("services", "user", "base_url"),
    "ORGANIZATION_SERVICE_URL": ("services", "organization", "base_url"),
    "MEDICAL_RECORDS_SERVICE_URL": ("services", "medical_records", "base_url"),
    "AUDIT_SERVICE_URL": ("services", "audit", "base_url"),
}


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3001
    environment: str = "development"
    debug: bool = False


class BackendSettings(BaseModel):
    base_url: str
    timeout: float | None = None

    @field_validator("base_url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an absolute http(s) URL, got {value!r}")
        return value.rstrip("/")


class ServicesSettings(BaseModel):
    auth: BackendSettings = Field(
        default_factory=lambda: BackendSettings(base_url="http://localhost:3002")
    )
    user: BackendSettings = Field(
        default_factory=lambda: BackendSettings(base_url="http://localhost:3003")
    )
    organization: BackendSettings = Field(
        default_factory=lambda: BackendSettings(base_url="http://localhost:3004")
    )
    medical_records: BackendSettings = Field(
        default_factory=lambda: BackendSettings(base_url="http://localhost:3005")
    )
    audit: BackendSettings = Field(
        default_factory=lambda: BackendSettings(base_url="http://localhost:3006")
    )


class TimeoutSettings(BaseModel):
    default: float = 15.0
    download: float = 30.0


class LimitsSettings(BaseModel):
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5
    stream_chunk_size: int = 64 * 1024
    disconnect_poll_interval: float = 0.5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    services: ServicesSettings = Field(default_factory=ServicesSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from JSON file, creating default if needed.

    Environment variables listed in ENV_OVERRIDES take precedence over the file.
    """
    config = _load_file()
    return apply_env_overrides(config, os.environ if environ is None else environ)


def apply_env_overrides(config: Config, environ: Mapping[str, str]) -> Config:
    """Return a copy of config with environment overrides applied."""
    data = config.model_dump()
    applied = False
    for variable, path in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        section = data
        for key in path[:-1]:
            section = section[key]
        section[path[-1]] = value
        applied = True

    if not applied:
        return config

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def _load_file() -> Config:
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(CONFIG_FILE.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = CONFIG_FILE.with_suffix(".json.bak")
        CONFIG_FILE.rename(backup)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default
