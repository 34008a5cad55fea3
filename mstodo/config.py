"""Configuration loading and validation.

Settings come from ``<config-dir>/config.json``, overridden by ``MSTODO_*``
environment variables, overridden in turn by command-line flags.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .output import TABLE_STYLES

DEFAULT_CONFIG_DIR = Path.home() / ".mstodo"
CONFIG_FILE_NAME = "config.json"
TOKEN_FILE_NAME = "token.json"
ENV_PREFIX = "MSTODO_"

MIN_PORT = 1024

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid"""


class Settings(BaseModel):
    """Validated CLI configuration"""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    client_id: str = Field(..., alias="client-id", description="Azure application (client) ID")
    client_secret: str = Field(..., alias="client-secret", description="Azure application client secret")
    port: int = Field(default=8400, description="Port of the local OAuth callback server")
    auth_timeout: int = Field(default=120, alias="auth-timeout", description="Seconds to wait for the browser login")
    table_style: str = Field(default="Default", alias="table-style", description="Table border style")
    tenant: str = Field(default="common", description="Azure AD tenant used for login")

    @field_validator('client_id', 'client_secret')
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name.replace('_', '-')} must not be empty")
        return v.strip()

    @field_validator('port')
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < MIN_PORT:
            raise ValueError(f"port must be greater than {MIN_PORT - 1}")
        return v

    @field_validator('auth_timeout')
    @classmethod
    def validate_auth_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("auth-timeout must be greater than 0")
        return v

    @field_validator('table_style')
    @classmethod
    def validate_table_style(cls, v: str) -> str:
        if v not in TABLE_STYLES:
            raise ValueError(f"table-style must be one of: {', '.join(TABLE_STYLES)}")
        return v


def config_path(config_dir: Path) -> Path:
    return config_dir / CONFIG_FILE_NAME


def token_path(config_dir: Path) -> Path:
    return config_dir / TOKEN_FILE_NAME


def _env_overrides() -> Dict[str, str]:
    overrides = {}
    for name, field in Settings.model_fields.items():
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[field.alias or name] = value
    return overrides


def load_settings(config_dir: Path = DEFAULT_CONFIG_DIR, **flags: Optional[Any]) -> Settings:
    """Load, merge and validate the configuration.

    ``flags`` holds command-line overrides keyed by field name; None values
    are ignored.
    """
    path = config_path(config_dir)
    data: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read config at {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Could not read config at {path}: expected a JSON object")
    else:
        logger.info(f"No config file at {path}, using environment only")

    data.update(_env_overrides())
    for name, value in flags.items():
        if value is not None:
            data[Settings.model_fields[name].alias or name] = value

    return validate_settings(data, source=str(path))


def validate_settings(data: Dict[str, Any], source: str = "arguments") -> Settings:
    """Validate raw settings, raising ConfigError with every problem found"""
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise ConfigError(f"Invalid config ({source}): {problems}") from e


def save_settings(settings: Settings, config_dir: Path = DEFAULT_CONFIG_DIR) -> Path:
    """Write ``settings`` to the config file, creating the directory if needed"""
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_path(config_dir)
    with open(path, 'w') as f:
        json.dump(settings.model_dump(by_alias=True), f, indent=2)
    os.chmod(path, 0o600)
    logger.info(f"Saved config to {path}")
    return path
