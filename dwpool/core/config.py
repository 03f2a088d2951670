"""
Process settings and the per-adapter warehouse configuration.

``Settings`` is read once from the environment (and ``.env``). ``WarehouseConfig``
is what an adapter is initialised with; when none is given it is built from
``Settings``.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"

    HIDE_DB_ERRORS: bool = False
    # JSON object in the environment: {"name": {"DB_HOST": ..., ...}, ...}
    DATASOURCES: dict[str, Any] = Field(default_factory=dict)

    # Secrets Manager region for Snowflake key-pair auth.
    AWS_REGION: str = "us-east-1"

    EXTERNAL_DB_CONNECT_TIMEOUT: int = 10
    # Seconds to wait for a free connection when the pool is exhausted.
    EXTERNAL_DB_POOL_TIMEOUT: float = 30.0
    # Max connection age before it is replaced on checkout.
    EXTERNAL_DB_POOL_RECYCLE_SEC: int = 600


settings = Settings()


class WarehouseConfig(BaseModel):
    """
    Configuration an adapter is initialised with.

    DATASOURCES values are kept raw; each adapter validates its own record
    when the pool for that name is created.
    """

    model_config = ConfigDict(extra="allow")

    HIDE_DB_ERRORS: bool = False
    DATASOURCES: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "WarehouseConfig":
        s = s or settings
        return cls(HIDE_DB_ERRORS=s.HIDE_DB_ERRORS, DATASOURCES=dict(s.DATASOURCES))

    def datasource(self, name: str) -> Any:
        return self.DATASOURCES.get(name)


def coerce_config(config: "WarehouseConfig | Mapping[str, Any] | None") -> WarehouseConfig:
    if config is None:
        return WarehouseConfig.from_settings()
    if isinstance(config, WarehouseConfig):
        return config
    if isinstance(config, Mapping):
        return WarehouseConfig.model_validate(dict(config))
    raise TypeError(f"Unsupported config type: {type(config).__name__}")


def configure_logging(level: str | None = None) -> None:
    """Basic root logging for scripts; libraries embedding dwpool configure their own."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
