"""Unit tests for core.config: Settings from env and WarehouseConfig coercion."""

from unittest.mock import MagicMock, patch

import pytest

from dwpool.core.config import Settings, WarehouseConfig, coerce_config, configure_logging


def test_settings_read_datasources_json_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATASOURCES", '{"db1": {"DB_HOST": "h", "DB_USER": "u"}}')
    monkeypatch.setenv("HIDE_DB_ERRORS", "true")
    s = Settings(_env_file=None)
    assert s.DATASOURCES == {"db1": {"DB_HOST": "h", "DB_USER": "u"}}
    assert s.HIDE_DB_ERRORS is True


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AWS_REGION", "DATASOURCES", "HIDE_DB_ERRORS", "EXTERNAL_DB_POOL_RECYCLE_SEC"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.AWS_REGION == "us-east-1"
    assert s.DATASOURCES == {}
    assert s.HIDE_DB_ERRORS is False
    assert s.EXTERNAL_DB_POOL_RECYCLE_SEC == 600


def test_from_settings_copies_values() -> None:
    s = Settings(_env_file=None, HIDE_DB_ERRORS=True, DATASOURCES={"a": {"DB_HOST": "x"}})
    cfg = WarehouseConfig.from_settings(s)
    assert cfg.HIDE_DB_ERRORS is True
    assert cfg.datasource("a") == {"DB_HOST": "x"}
    assert cfg.datasource("missing") is None


def test_coerce_config_accepts_mapping_and_model() -> None:
    cfg = coerce_config({"HIDE_DB_ERRORS": True, "DATASOURCES": {"a": {}}})
    assert isinstance(cfg, WarehouseConfig)
    assert cfg.HIDE_DB_ERRORS is True
    assert coerce_config(cfg) is cfg


def test_coerce_config_keeps_raw_datasources() -> None:
    """No validation at init: incomplete records are accepted as-is."""
    cfg = coerce_config({"DATASOURCES": {"bad": {"DB_HOST": ""}}})
    assert cfg.datasource("bad") == {"DB_HOST": ""}


def test_coerce_config_rejects_other_types() -> None:
    with pytest.raises(TypeError, match="Unsupported config type"):
        coerce_config(42)  # type: ignore[arg-type]


@patch("dwpool.core.config.logging.basicConfig")
def test_configure_logging(mock_basic: MagicMock) -> None:
    configure_logging("debug")
    assert mock_basic.call_args.kwargs["level"] == "DEBUG"
