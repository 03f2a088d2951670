"""
Shared adapter logic: pool registry, lazy connect, execute with timing, error policy.

Backends only decide how a validated datasource record becomes a pool.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from contextlib import closing
from typing import Any, ClassVar

from sqlalchemy.pool import QueuePool

from dwpool.core.config import WarehouseConfig, coerce_config
from dwpool.core.errors import (
    ConnectError,
    DataSourceConfigError,
    ErrorPolicy,
    describe_error,
)
from dwpool.core.pool import PoolRegistry, cursor_to_dicts, execute
from dwpool.models import ProductTypeEnum, _DataSource

_log = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class WarehouseAdapter(ABC):
    """
    init(config) -> create_pool / connect / execute / close_pool / close_all_pools

    One adapter instance owns one configuration and one pool registry.
    """

    product_type: ClassVar[ProductTypeEnum]
    label: ClassVar[str]
    datasource_model: ClassVar[type[_DataSource]]

    def __init__(
        self,
        config: WarehouseConfig | Mapping[str, Any] | None = None,
        *,
        registry: PoolRegistry | None = None,
    ) -> None:
        self._registry = registry if registry is not None else PoolRegistry()
        self.init(config)

    def init(self, config: WarehouseConfig | Mapping[str, Any] | None) -> None:
        """Replace the configuration. Existing pools are kept."""
        self._config = coerce_config(config)
        self._error_policy = ErrorPolicy(self._config.HIDE_DB_ERRORS)

    @property
    def config(self) -> WarehouseConfig:
        return self._config

    @property
    def registry(self) -> PoolRegistry:
        return self._registry

    @property
    def error_policy(self) -> ErrorPolicy:
        return self._error_policy

    @abstractmethod
    def _build_pool(self, name: str, ds: Any) -> QueuePool:
        """Create the native pool for a validated datasource record."""

    def load_datasource(self, name: str) -> Any:
        return self.datasource_model.from_config(self._config.datasource(name), name)

    def _create_pool(self, name: str) -> QueuePool:
        _log.debug("%s Creating pool: %s", self.label, name)
        ds = self.load_datasource(name)
        pool = self._registry.register(name, self._build_pool(name, ds))
        _log.debug("%s Pool %s created successfully", self.label, name)
        return pool

    def create_pool(self, name: str) -> bool:
        """
        Create and register the pool for *name*.

        Never raises: misconfiguration and driver errors are logged and reported
        as False so callers can initialise several pools past a bad one.
        """
        with self._registry.creation_lock(name):
            if name in self._registry:
                return True
            try:
                self._create_pool(name)
                return True
            except DataSourceConfigError as e:
                _log.error("%s %s", self.label, e)
            except Exception as e:
                _log.error(
                    "%s Error while creating connection pool %s: %s",
                    self.label,
                    name,
                    e,
                    exc_info=True,
                )
        return False

    def connect(self, name: str) -> QueuePool:
        """Return the pool for *name*, creating it on first use. Errors are never masked."""
        pool = self._registry.get(name)
        if pool is not None:
            return pool
        with self._registry.creation_lock(name):
            pool = self._registry.get(name)
            if pool is not None:
                return pool
            try:
                return self._create_pool(name)
            except Exception as e:
                _log.error("%s Error while retrieving a connection: %s", self.label, e)
                raise ConnectError(describe_error(e)) from e

    def execute(
        self,
        name: str,
        query: str,
        params: dict | list | tuple | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run *query* on datasource *name* and return rows as dicts.

        - ConnectError (raw message) when the pool cannot be created.
        - QueryError for anything after that; masked when HIDE_DB_ERRORS is set.
        """
        _log.debug("%s %s", self.label, query)
        if params and _log.isEnabledFor(logging.DEBUG):
            _log.debug("%s params: %s", self.label, json.dumps(params, default=str))

        start = time.perf_counter()
        pool = self.connect(name)
        try:
            with closing(pool.connect()) as conn:
                _log.debug("%s Connection secured: %.3fms", self.label, _elapsed_ms(start))
                query_start = time.perf_counter()
                with closing(execute(conn, query, params)) as cur:
                    rows = cursor_to_dicts(cur)
        except Exception as e:
            _log.error("%s Error while executing query: %s", self.label, e, exc_info=True)
            self._error_policy.raise_from(e)

        _log.debug(
            "%s Query executed: %.3fms (total %.3fms)",
            self.label,
            _elapsed_ms(query_start),
            _elapsed_ms(start),
        )
        return rows

    def close_pool(self, name: str) -> bool:
        """Best-effort close: dispose errors are logged, not raised. Unknown names are a no-op."""
        try:
            pool = self._registry.pop(name)
        except Exception as e:
            _log.error("%s Error while closing connection: %s", self.label, e, exc_info=True)
            return False
        if pool is None:
            return True
        try:
            pool.dispose()
        except Exception as e:
            _log.error("%s Error while closing connection pool %s: %s", self.label, name, e)
        return True

    def close_all_pools(self) -> bool:
        """Close every pool, one at a time. Not atomic: a failure leaves the rest open."""
        try:
            for name in self._registry.names():
                self.close_pool(name)
                _log.debug("%s Pool %s closed", self.label, name)
            return True
        except Exception as e:
            _log.error("%s Error while closing connection: %s", self.label, e, exc_info=True)
            return False

    def __enter__(self) -> "WarehouseAdapter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close_all_pools()
