"""MySQL adapter: pymysql connections in a QueuePool capped at CONNECTION_LIMIT."""

from sqlalchemy.pool import QueuePool

from dwpool.core.pool import build_pool, mysql_connect_args, open_mysql
from dwpool.models import MySQLDataSource, ProductTypeEnum

from .base import WarehouseAdapter


class MySQLAdapter(WarehouseAdapter):
    product_type = ProductTypeEnum.MYSQL
    label = "MySQL Adapter:"
    datasource_model = MySQLDataSource

    def _build_pool(self, name: str, ds: MySQLDataSource) -> QueuePool:
        args = mysql_connect_args(ds)
        return build_pool(lambda: open_mysql(args), size=ds.CONNECTION_LIMIT)
