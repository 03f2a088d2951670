"""
Native DB-API connections for the supported warehouses.

Uses pymysql (MySQL) or snowflake-connector-python (Snowflake). The pool
registry wraps these factories in a sqlalchemy QueuePool.
"""

from typing import Any

import pymysql
import snowflake.connector
from pymysql.constants import FIELD_TYPE
from pymysql.converters import conversions, escape_string

from dwpool.core.config import settings
from dwpool.models import MySQLDataSource, SnowflakeDataSource

_DATE_FIELD_TYPES = (FIELD_TYPE.DATE, FIELD_TYPE.DATETIME, FIELD_TYPE.TIMESTAMP)


def mysql_connect_args(ds: MySQLDataSource) -> dict[str, Any]:
    """Keyword arguments for ``pymysql.connect`` built from a MySQL datasource."""
    args: dict[str, Any] = {
        "host": ds.DB_HOST,
        "port": ds.DB_PORT,
        "user": ds.DB_USER,
        "password": ds.DB_PASSWORD,
        "database": ds.DB_DATABASE,
        "charset": ds.CHARSET,
        "connect_timeout": ds.CONNECT_TIMEOUT or settings.EXTERNAL_DB_CONNECT_TIMEOUT,
        # every statement is its own transaction
        "autocommit": True,
    }
    if ds.SSL is not None:
        for key in ("ca", "cert", "key", "verify_cert", "verify_identity"):
            val = getattr(ds.SSL, key)
            if val is not None:
                args[f"ssl_{key}"] = val
    if ds.TIMEZONE:
        args["init_command"] = f"SET time_zone = '{escape_string(ds.TIMEZONE)}'"
    if ds.DATE_STRINGS:
        conv = conversions.copy()
        for field_type in _DATE_FIELD_TYPES:
            conv[field_type] = str
        args["conv"] = conv
    return args


def snowflake_connect_args(ds: SnowflakeDataSource, private_key: bytes) -> dict[str, Any]:
    """Keyword arguments for ``snowflake.connector.connect`` (key-pair auth, qmark binds)."""
    args: dict[str, Any] = {
        "account": ds.DB_HOST,
        "user": ds.DB_USER,
        "database": ds.DB_DATABASE,
        "schema": ds.SCHEMA,
        "authenticator": "SNOWFLAKE_JWT",
        "private_key": private_key,
        "paramstyle": "qmark",
        "login_timeout": settings.EXTERNAL_DB_CONNECT_TIMEOUT,
    }
    if ds.PORT:
        args["port"] = ds.PORT
    if ds.WAREHOUSE:
        args["warehouse"] = ds.WAREHOUSE
    if ds.ROLE:
        args["role"] = ds.ROLE
    return args


def open_mysql(args: dict[str, Any]) -> Any:
    return pymysql.connect(**args)


def open_snowflake(args: dict[str, Any]) -> Any:
    return snowflake.connector.connect(**args)


def execute(
    conn: Any,
    sql: str,
    params: dict | list | tuple | None = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) and closes it.

    Empty params are not passed to the driver so literal ``%`` in MySQL SQL is
    left alone.
    """
    cur = conn.cursor()
    try:
        if params:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    except Exception:
        cur.close()
        raise
    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for both pymysql and snowflake."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
