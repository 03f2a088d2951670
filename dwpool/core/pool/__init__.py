"""
Connection pools for external warehouses.

No driver layer: pymysql and snowflake-connector-python are installed via pip;
a datasource record is enough to open a connection.
"""

from .connect import (
    cursor_to_dicts,
    execute,
    mysql_connect_args,
    open_mysql,
    open_snowflake,
    snowflake_connect_args,
)
from .manager import PoolRegistry, build_pool, warm_pool

__all__ = [
    "execute",
    "cursor_to_dicts",
    "mysql_connect_args",
    "snowflake_connect_args",
    "open_mysql",
    "open_snowflake",
    "PoolRegistry",
    "build_pool",
    "warm_pool",
]
