from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def encrypted_private_key_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(b"s3cret"),
    ).decode()


@pytest.fixture
def mysql_config() -> dict:
    return {
        "HIDE_DB_ERRORS": False,
        "DATASOURCES": {
            "db1": {"DB_HOST": "h", "DB_USER": "u", "DB_DATABASE": "d"},
        },
    }


def _make_conn(rows: list[tuple] | None = None, columns: tuple[str, ...] = ("n",)) -> MagicMock:
    cur = MagicMock()
    cur.description = [(c,) for c in columns] if rows is not None else None
    cur.fetchall.return_value = rows or []
    conn = MagicMock()
    conn.cursor.return_value = cur
    return conn


@pytest.fixture
def make_conn() -> Callable[..., MagicMock]:
    """Factory for fake DB-API connections whose cursor returns the given rows."""
    return _make_conn
