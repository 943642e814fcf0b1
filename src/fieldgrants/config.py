"""
Configuration loading for field-grants.

Settings come from FIELD_GRANTS_* environment variables (or .env), and can be
overridden by a YAML file:

    # fieldgrants.yaml
    max_depth: 2
    debug: false
    allowed_types: [User, AuthDataSchema, PersonalDataSchema]
    grants_service_url: http://grants:8010
    schema_services:
      users: http://users:8002

List and dict values given through the environment are JSON, e.g.
FIELD_GRANTS_ALLOWED_TYPES='["User", "AuthDataSchema"]'.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.defs import TraversalConfig
from .grants.remote import HttpGrantsClient, RedisGrantsClient
from .grants.strategies import RemoteAuthority
from .messaging.client import get_redis_client
from .messaging.rpc import RedisRpcClient

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "fieldgrants.yaml"


class Settings(BaseSettings):
    """Field-grants settings."""

    model_config = SettingsConfigDict(
        env_prefix="FIELD_GRANTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Traversal
    MAX_DEPTH: int = 2
    DEBUG: bool = False
    ALLOWED_TYPES: list[str] = []

    # Remote grants authority (HTTP preferred over Redis)
    GRANTS_SERVICE_URL: Optional[str] = None
    REDIS_URL: Optional[str] = None
    RPC_PREFIX: str = "grants"
    RPC_TIMEOUT: float = 10.0
    HTTP_TIMEOUT: float = 30.0

    # Schema discovery: service name -> base URL
    SCHEMA_SERVICES: dict[str, str] = {}

    def traversal_config(self) -> TraversalConfig:
        return TraversalConfig(
            max_depth=self.MAX_DEPTH,
            allowed_types=frozenset(self.ALLOWED_TYPES),
            debug=self.DEBUG,
        )


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Load settings, applying a YAML file on top of the environment.

    A missing file is not an error; keys are case-insensitive.
    """
    path = Path(path)
    if not path.exists():
        return Settings()

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    logger.info(f"Loaded configuration from {path}")
    return Settings(**{str(key).upper(): value for key, value in data.items()})


def build_remote_authority(settings: Settings) -> Optional[RemoteAuthority]:
    """
    Create the remote grants authority configured in settings.

    Returns None when neither GRANTS_SERVICE_URL nor REDIS_URL is set (the
    process is then expected to provide a local adapter). The Redis client
    still has to be connected (init_redis) before the first call.
    """
    if settings.GRANTS_SERVICE_URL:
        return HttpGrantsClient(settings.GRANTS_SERVICE_URL, timeout=settings.HTTP_TIMEOUT)
    if settings.REDIS_URL:
        rpc = RedisRpcClient(
            get_redis_client(settings.REDIS_URL),
            prefix=settings.RPC_PREFIX,
            timeout=settings.RPC_TIMEOUT,
        )
        return RedisGrantsClient(rpc)
    return None
