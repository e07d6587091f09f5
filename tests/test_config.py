"""Settings: verifies required variables, key parsing and URL assembly."""

import pytest
from pydantic import ValidationError

from car_service.config import Settings, get_settings, resolve_database_url

REQUIRED = {
    "database_url": "sqlite+aiosqlite:///:memory:",
    "port": 8080,
    "api_keys": "a,b",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "PORT", "API_KEYS", "DATABASE_USER", "DATABASE_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize("missing", sorted(REQUIRED))
def test_required_settings(missing):
    values = {k: v for k, v in REQUIRED.items() if k != missing}
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **values)


@pytest.mark.parametrize("port", [0, 70000, "http"])
def test_port_must_be_valid(port):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{**REQUIRED, "port": port})


@pytest.mark.parametrize("keys", ["", " , ,"])
def test_api_keys_must_not_be_blank(keys):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{**REQUIRED, "api_keys": keys})


def test_api_key_set_is_stripped_and_frozen():
    settings = Settings(_env_file=None, **{**REQUIRED, "api_keys": " k1 ,k2,, k3"})
    assert settings.api_key_set == frozenset({"k1", "k2", "k3"})


def test_reads_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///cars.db")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("API_KEYS", "x")
    settings = Settings(_env_file=None)
    assert settings.port == 9000
    assert settings.update_allowed_fields_only is False


def test_postgres_url_gets_async_driver_and_credentials():
    url = resolve_database_url("postgresql://db:5432/cars", "cars", "s3cret")
    assert url == "postgresql+asyncpg://cars:s3cret@db:5432/cars"


def test_sqlalchemy_url_without_credentials_is_unchanged():
    settings = Settings(_env_file=None, **REQUIRED)
    assert settings.sqlalchemy_url == "sqlite+aiosqlite:///:memory:"


def test_entry_point_exits_on_invalid_configuration(monkeypatch):
    from car_service import __main__ as entry

    monkeypatch.chdir("/")
    get_settings.cache_clear()
    try:
        with pytest.raises(SystemExit) as info:
            entry.main()
    finally:
        get_settings.cache_clear()
    assert info.value.code == 1
