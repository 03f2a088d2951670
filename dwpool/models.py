"""
Datasource records for the supported warehouse products.

Records use the upper-case keys of the DATASOURCES configuration. They are
validated lazily, when the pool for a datasource is first created.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from dwpool.core.errors import DataSourceConfigError


class ProductTypeEnum(str, Enum):
    """Supported warehouse products (mysql, snowflake)."""

    MYSQL = "mysql"
    SNOWFLAKE = "snowflake"


class _DataSource(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _drop_unset(cls, data: Any) -> Any:
        # None and "" mean "not configured" so field defaults apply.
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data

    @classmethod
    def from_config(cls, raw: Any, name: str) -> "_DataSource":
        """Validate the raw DATASOURCES entry for *name*; raises DataSourceConfigError."""
        if not raw:
            raise DataSourceConfigError(f"Missing configuration for {name}")
        if not isinstance(raw, Mapping):
            raise DataSourceConfigError(f"Configuration for {name} must be a mapping")

        missing = [f for f in cls.REQUIRED_FIELDS if not raw.get(f)]
        if missing:
            raise DataSourceConfigError(
                f"Missing required configuration fields for {name}: {', '.join(missing)}"
            )

        try:
            ds = cls.model_validate(raw)
        except ValidationError as e:
            raise DataSourceConfigError(f"Invalid configuration for {name}: {e}") from e
        ds.check(name)
        return ds

    def check(self, name: str) -> None:
        """Cross-field checks; overridden per product."""


class MySQLSSLOptions(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    ca: str | None = None
    cert: str | None = None
    key: str | None = None
    verify_cert: bool | None = None
    verify_identity: bool | None = None


class MySQLDataSource(_DataSource):
    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("DB_HOST", "DB_USER", "DB_DATABASE")

    DB_HOST: str
    DB_USER: str
    DB_DATABASE: str
    DB_PASSWORD: str = ""
    DB_PORT: int = 3306
    CONNECTION_LIMIT: int = Field(default=5, ge=1)
    SSL: MySQLSSLOptions | None = None
    TIMEZONE: str | None = None
    # Return DATE/DATETIME/TIMESTAMP columns as strings.
    DATE_STRINGS: bool = False
    CHARSET: str = "utf8mb4"
    CONNECT_TIMEOUT: int | None = None


class SnowflakeDataSource(_DataSource):
    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("DB_HOST", "DB_USER", "DB_DATABASE", "SCHEMA")

    DB_HOST: str  # account identifier
    DB_USER: str
    DB_DATABASE: str
    SCHEMA: str
    PORT: int | None = None
    WAREHOUSE: str | None = None
    ROLE: str | None = None

    PRIVATE_KEY_PATH: str | None = None
    PRIVATE_KEY_SECRET_NAME: str | None = None
    PRIVATE_KEY_FIELD_NAME: str | None = None
    PRIVATE_KEY_PASSPHRASE: str | None = None

    POOL_MAX: int = Field(default=10, ge=1)
    POOL_MIN: int = Field(default=0, ge=0)

    def check(self, name: str) -> None:
        if not self.PRIVATE_KEY_PATH and not self.PRIVATE_KEY_SECRET_NAME:
            raise DataSourceConfigError(
                f"Authentication configuration missing for {name}. "
                "Must provide either PRIVATE_KEY_PATH or PRIVATE_KEY_SECRET_NAME"
            )
        if self.PRIVATE_KEY_PATH and self.PRIVATE_KEY_SECRET_NAME:
            raise DataSourceConfigError(
                f"Ambiguous authentication configuration for {name}. "
                "Provide only one of PRIVATE_KEY_PATH or PRIVATE_KEY_SECRET_NAME"
            )
        if self.PRIVATE_KEY_SECRET_NAME is not None and not self.PRIVATE_KEY_SECRET_NAME.strip():
            raise DataSourceConfigError(f"PRIVATE_KEY_SECRET_NAME for {name} cannot be empty")
        if self.PRIVATE_KEY_PATH is not None and not self.PRIVATE_KEY_PATH.strip():
            raise DataSourceConfigError(f"PRIVATE_KEY_PATH for {name} cannot be empty")
        if self.POOL_MIN > self.POOL_MAX:
            raise DataSourceConfigError(
                f"POOL_MIN ({self.POOL_MIN}) for {name} exceeds POOL_MAX ({self.POOL_MAX})"
            )
