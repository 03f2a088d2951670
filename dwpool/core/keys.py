"""
Private key resolution for Snowflake key-pair (SNOWFLAKE_JWT) authentication.

The key comes from exactly one source: a PEM file (PRIVATE_KEY_PATH) or a
JSON field of an AWS Secrets Manager secret (PRIVATE_KEY_SECRET_NAME +
PRIVATE_KEY_FIELD_NAME). The datasource record guarantees only one is set.
"""

import json
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from dwpool.core.config import settings
from dwpool.core.errors import KeyMaterialError
from dwpool.models import SnowflakeDataSource

_log = logging.getLogger(__name__)


def make_secrets_client(region: str | None = None) -> Any:
    """Secrets Manager client using ambient AWS credentials."""
    return boto3.session.Session().client(
        "secretsmanager", region_name=region or settings.AWS_REGION
    )


def get_private_key_from_secret(
    source: SnowflakeDataSource,
    *,
    client: Any = None,
    region: str | None = None,
) -> str:
    secret_id = source.PRIVATE_KEY_SECRET_NAME
    if not secret_id:
        raise KeyMaterialError("PRIVATE_KEY_SECRET_NAME is required but not provided")

    client = client if client is not None else make_secrets_client(region)
    try:
        result = client.get_secret_value(SecretId=secret_id)
    except (ClientError, BotoCoreError) as e:
        raise KeyMaterialError(f"Failed to retrieve secret {secret_id}: {e}") from e

    secret_string = result.get("SecretString")
    if not secret_string:
        raise KeyMaterialError(f"Secret {secret_id} does not contain a SecretString")

    try:
        secret_data = json.loads(secret_string)
    except json.JSONDecodeError as e:
        raise KeyMaterialError(f"Failed to parse secret {secret_id} as JSON: {e}") from e
    if not isinstance(secret_data, dict):
        raise KeyMaterialError(f"Failed to parse secret {secret_id} as JSON: expected an object")

    field_name = source.PRIVATE_KEY_FIELD_NAME
    if not field_name:
        raise KeyMaterialError(
            f"PRIVATE_KEY_FIELD_NAME is required when using AWS Secrets Manager for {secret_id}"
        )

    if field_name not in secret_data:
        raise KeyMaterialError(
            f"Private key not found in secret {secret_id}. Field '{field_name}' does not exist. "
            f"Available fields: {', '.join(secret_data.keys())}"
        )

    private_key = secret_data[field_name]
    if not isinstance(private_key, str) or not private_key.strip():
        raise KeyMaterialError(
            f"Private key found in secret {secret_id} but it is empty or not a string"
        )
    return private_key


def read_private_key_file(path: str) -> str:
    """Read a PEM key from disk. OSError propagates unchanged."""
    with open(path, encoding="utf-8") as f:
        return f.read()


def resolve_private_key(
    source: SnowflakeDataSource,
    *,
    client: Any = None,
    region: str | None = None,
) -> str:
    """Return the PEM private key from whichever source *source* configures."""
    if source.PRIVATE_KEY_SECRET_NAME:
        _log.debug(
            "Fetching private key from AWS Secrets Manager: %s", source.PRIVATE_KEY_SECRET_NAME
        )
        key = get_private_key_from_secret(source, client=client, region=region)
        _log.debug("Successfully retrieved private key from AWS Secrets Manager")
        return key
    if source.PRIVATE_KEY_PATH:
        _log.debug("Reading private key from file: %s", source.PRIVATE_KEY_PATH)
        key = read_private_key_file(source.PRIVATE_KEY_PATH)
        _log.debug("Successfully read private key from file")
        return key
    raise KeyMaterialError("No private key source configured")


def load_private_key_der(pem: str, passphrase: str | None = None) -> bytes:
    """
    Convert a PEM private key to unencrypted PKCS#8 DER, the form the Snowflake
    connector takes for ``private_key``.
    """
    password = passphrase.encode() if passphrase else None
    try:
        key = serialization.load_pem_private_key(pem.encode(), password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyMaterialError(f"Unable to load private key: {e}") from e
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
