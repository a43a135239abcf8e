from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003

import pytest

from credsync.config import (
    DatabaseConfig,
    InvalidConfigurationError,
    MissingConfigurationError,
    StoreBackend,
    configure_logging,
    env_flag,
    env_float,
    get_database_config,
    get_kubernetes_config,
    get_schema_keys,
    get_store_backend,
    optional_env_var,
    require_env_vars,
)
from credsync.config import storage
from credsync.domain.schema import DEFAULT_SCHEMA_KEYS


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR") is None


@pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("0", False), ("TRUE", True)])
def test_env_flag_parses_booleans(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_flag("EXAMPLE_FLAG", default=not expected) is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", "maybe")

    with pytest.raises(InvalidConfigurationError, match="EXAMPLE_FLAG"):
        env_flag("EXAMPLE_FLAG", default=True)


def test_env_float_defaults_and_validates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLOAT", raising=False)
    assert env_float("EXAMPLE_FLOAT", default=1.5) == 1.5

    monkeypatch.setenv("EXAMPLE_FLOAT", "-2")
    with pytest.raises(InvalidConfigurationError):
        env_float("EXAMPLE_FLOAT", default=1.5)


def test_schema_keys_default_without_overrides() -> None:
    assert get_schema_keys() is DEFAULT_SCHEMA_KEYS


def test_schema_keys_apply_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CREDSYNC_FINGERPRINT_KEY", "example.com/hash")
    monkeypatch.setenv("CREDSYNC_PROVIDER_TYPE_KEY", "example.com/kind")

    keys = get_schema_keys()

    assert keys.fingerprint == "example.com/hash"
    assert keys.provider_type == "example.com/kind"
    assert keys.link_name == DEFAULT_SCHEMA_KEYS.link_name


def test_store_backend_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_store_backend() is StoreBackend.KUBERNETES

    monkeypatch.setenv("CREDSYNC_STORE", "Database")
    assert get_store_backend() is StoreBackend.DATABASE

    monkeypatch.setenv("CREDSYNC_STORE", "etcd")
    with pytest.raises(InvalidConfigurationError, match="kubernetes or database"):
        get_store_backend()


def test_database_config_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert get_database_config() == DatabaseConfig(uri="sqlite:///override.db")


def test_database_config_creates_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("CREDSYNC_DATA_DIR", str(tmp_path / "data-dir"))

    config = get_database_config()

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert config.uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_kubernetes_config_from_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("CREDSYNC_KUBE_API_URL", "https://kube.example:6443/")
    monkeypatch.setenv("CREDSYNC_KUBE_TOKEN", "token")
    monkeypatch.setenv("CREDSYNC_KUBE_VERIFY_TLS", "false")
    monkeypatch.setenv("CREDSYNC_KUBE_TIMEOUT", "5")

    config = get_kubernetes_config(service_account_dir=tmp_path)

    assert config.api_url == "https://kube.example:6443"
    assert config.token == "token"
    assert config.verify is False
    assert config.timeout_seconds == 5.0


def test_kubernetes_config_in_cluster(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    monkeypatch.setenv("KUBERNETES_SERVICE_PORT", "443")
    (tmp_path / "token").write_text("mounted-token\n", encoding="utf-8")
    (tmp_path / "ca.crt").write_text("ca", encoding="utf-8")

    config = get_kubernetes_config(service_account_dir=tmp_path)

    assert config.api_url == "https://10.0.0.1:443"
    assert config.token == "mounted-token"
    assert config.verify == str(tmp_path / "ca.crt")


def test_kubernetes_config_brackets_ipv6_service_host(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "fd00:10:96::1")
    monkeypatch.setenv("KUBERNETES_SERVICE_PORT", "443")

    config = get_kubernetes_config(service_account_dir=tmp_path)

    assert config.api_url == "https://[fd00:10:96::1]:443"


def test_kubernetes_config_requires_an_api_server(tmp_path: Path) -> None:
    with pytest.raises(MissingConfigurationError, match="KUBERNETES_SERVICE_HOST"):
        get_kubernetes_config(service_account_dir=tmp_path)


def test_configure_logging_quiets_httpx() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.setLevel(previous)
