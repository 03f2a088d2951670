"""Named connection pools for MySQL and Snowflake behind a single execute() call."""

from dwpool.adapters import MySQLAdapter, SnowflakeAdapter, WarehouseAdapter, get_adapter
from dwpool.core.config import Settings, WarehouseConfig, settings
from dwpool.core.errors import (
    GENERIC_ERROR,
    ConnectError,
    DataSourceConfigError,
    KeyMaterialError,
    QueryError,
    WarehouseError,
)
from dwpool.models import ProductTypeEnum

__all__ = [
    "GENERIC_ERROR",
    "ConnectError",
    "DataSourceConfigError",
    "KeyMaterialError",
    "MySQLAdapter",
    "ProductTypeEnum",
    "QueryError",
    "Settings",
    "SnowflakeAdapter",
    "WarehouseAdapter",
    "WarehouseConfig",
    "WarehouseError",
    "get_adapter",
    "settings",
]
