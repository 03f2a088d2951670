"""
Snowflake adapter: key-pair (SNOWFLAKE_JWT) connections in a QueuePool.

The private key is resolved once per pool, from a file or from AWS Secrets
Manager, and handed to the connector as PKCS#8 DER bytes.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.pool import QueuePool

from dwpool.core.config import WarehouseConfig
from dwpool.core.errors import KeyMaterialError, describe_error
from dwpool.core.keys import load_private_key_der, resolve_private_key
from dwpool.core.pool import (
    PoolRegistry,
    build_pool,
    open_snowflake,
    snowflake_connect_args,
    warm_pool,
)
from dwpool.models import ProductTypeEnum, SnowflakeDataSource

from .base import WarehouseAdapter

_log = logging.getLogger(__name__)


class SnowflakeAdapter(WarehouseAdapter):
    product_type = ProductTypeEnum.SNOWFLAKE
    label = "Snowflake Adapter:"
    datasource_model = SnowflakeDataSource

    def __init__(
        self,
        config: WarehouseConfig | Mapping[str, Any] | None = None,
        *,
        registry: PoolRegistry | None = None,
        secrets_client: Any = None,
    ) -> None:
        # None: a boto3 client is created per secret lookup
        self._secrets_client = secrets_client
        super().__init__(config, registry=registry)

    def _private_key(self, ds: SnowflakeDataSource) -> bytes:
        try:
            pem = resolve_private_key(ds, client=self._secrets_client)
            return load_private_key_der(pem, ds.PRIVATE_KEY_PASSPHRASE)
        except (KeyMaterialError, OSError) as e:
            raise KeyMaterialError(
                f"Error setting up private key authentication: {describe_error(e)}"
            ) from e

    def _build_pool(self, name: str, ds: SnowflakeDataSource) -> QueuePool:
        """POOL_MAX connections; POOL_MIN are opened now but not kept open afterwards."""
        args = snowflake_connect_args(ds, self._private_key(ds))
        pool = build_pool(lambda: open_snowflake(args), size=ds.POOL_MAX)
        if ds.POOL_MIN:
            try:
                warm_pool(pool, ds.POOL_MIN)
            except Exception:
                pool.dispose()
                raise
            _log.debug("%s Pool %s warmed with %d connections", self.label, name, ds.POOL_MIN)
        return pool

    def create_snow_pool(self, name: str) -> bool:
        return self.create_pool(name)
