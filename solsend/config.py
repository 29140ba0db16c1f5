"""Configuration for solsend.

Settings come from a TOML file (``config/config.toml`` by default) and
can be overridden per field with ``SOLSEND_<SECTION>__<FIELD>``
environment variables, e.g. ``SOLSEND_KEYS__SENDER_PRIVATE_KEY``.
"""
import tomllib
from enum import Enum
from pathlib import Path
from typing import Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_COMMITMENT,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_PREFIX,
    U64_MAX,
)
from .errors import ConfigurationError

logger = structlog.get_logger()


class Commitment(str, Enum):
    """Confirmation depth to wait for before a transfer counts as settled."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


class NetworkConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rpc_url: str
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)


class KeysConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sender_private_key: SecretStr
    receiver_public_key: str


class TransactionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: int = Field(..., gt=0, le=U64_MAX)  # lamports
    min_balance: int = Field(..., ge=0, le=U64_MAX)  # lamports
    confirmation_timeout: int = Field(default=DEFAULT_CONFIRMATION_TIMEOUT, gt=0)  # seconds
    commitment: Commitment = Commitment(DEFAULT_COMMITMENT)
    skip_preflight: bool = True


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = Field(default=False, alias="json")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Settings(BaseSettings):
    """Top level settings, immutable once loaded."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    network: NetworkConfig
    keys: KeysConfig
    transaction: TransactionConfig
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings,
                                   dotenv_settings, file_secret_settings):
        # Environment overrides values read from the config file
        return env_settings, init_settings, file_secret_settings


def load_config(config_path: Union[str, Path]) -> Settings:
    """Load settings from a TOML file, applying environment overrides."""
    path = Path(config_path)
    try:
        with path.open("rb") as f:
            config_dict = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    try:
        settings = Settings(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    logger.debug("config_loaded", path=str(path), rpc_url=settings.network.rpc_url)
    return settings
