"""
Warehouse adapters sharing one contract: create_pool, connect, execute, close_pool, close_all_pools.
"""

from collections.abc import Mapping
from typing import Any

from dwpool.core.config import WarehouseConfig
from dwpool.models import ProductTypeEnum

from .base import WarehouseAdapter
from .mysql import MySQLAdapter
from .snowflake import SnowflakeAdapter

_ADAPTERS: dict[ProductTypeEnum, type[WarehouseAdapter]] = {
    cls.product_type: cls for cls in (MySQLAdapter, SnowflakeAdapter)
}


def get_adapter(
    product_type: ProductTypeEnum | str,
    config: WarehouseConfig | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> WarehouseAdapter:
    """New adapter for *product_type* ("mysql" or "snowflake")."""
    try:
        pt = ProductTypeEnum(product_type)
    except ValueError:
        raise ValueError(f"Unsupported product_type: {product_type}") from None
    return _ADAPTERS[pt](config, **kwargs)


__all__ = ["WarehouseAdapter", "MySQLAdapter", "SnowflakeAdapter", "get_adapter"]
