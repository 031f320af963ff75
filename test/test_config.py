"""
Tests for settings and command line overrides.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from contactbook.__main__ import load_settings, main, parse_overrides
from contactbook.config import Settings

_ENV_VARS = (
    "DB_DSN",
    "PORT",
    "ENV",
    "DEBUG",
    "VERBOSE",
    "DB_MAX_OPEN_CONNS",
    "DB_MAX_IDLE_CONNS",
    "DB_MAX_IDLE_TIME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None, db_dsn="sqlite:///:memory:")

        assert settings.port == 4000
        assert settings.env == "development"
        assert settings.debug is False
        assert settings.verbose is False
        assert settings.db_max_open_conns == 25
        assert settings.db_max_idle_conns == 25
        assert settings.db_max_idle_time == timedelta(minutes=15)
        assert settings.session_lifetime == timedelta(hours=12)
        assert not settings.is_production

    def test_dsn_is_required(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_blank_dsn_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, db_dsn="   ")

    @pytest.mark.parametrize(
        "dsn, expected",
        [
            ("postgres://u:p@db/contacts", "postgresql+asyncpg://u:p@db/contacts"),
            ("postgresql://u:p@db/contacts", "postgresql+asyncpg://u:p@db/contacts"),
            ("postgresql+asyncpg://u:p@db/contacts", "postgresql+asyncpg://u:p@db/contacts"),
            ("sqlite:///contacts.db", "sqlite+aiosqlite:///contacts.db"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_dsn_driver_rewrite(self, dsn: str, expected: str) -> None:
        assert Settings(_env_file=None, db_dsn=dsn).db_dsn == expected

    def test_idle_connections_clamped_to_open(self) -> None:
        settings = Settings(
            _env_file=None,
            db_dsn="sqlite:///:memory:",
            db_max_open_conns=5,
            db_max_idle_conns=10,
        )

        assert settings.db_max_idle_conns == 5

    def test_unknown_env_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, db_dsn="sqlite:///:memory:", env="testing")

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_DSN", "postgres://u:p@db/contacts")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ENV", "production")
        monkeypatch.setenv("DB_MAX_IDLE_TIME", "PT5M")

        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.is_production
        assert settings.db_max_idle_time == timedelta(minutes=5)
        assert settings.db_dsn.startswith("postgresql+asyncpg://")


class TestCommandLine:
    def test_parse_overrides_only_given_flags(self) -> None:
        overrides = parse_overrides(
            ["--port", "8080", "--db-dsn", "sqlite:///x.db", "--debug", "--db-max-open-conns", "3"]
        )

        assert overrides == {
            "port": 8080,
            "db_dsn": "sqlite:///x.db",
            "debug": True,
            "db_max_open_conns": 3,
        }

    def test_parse_overrides_negated_flag(self) -> None:
        assert parse_overrides(["--no-verbose"]) == {"verbose": False}

    def test_parse_overrides_rejects_unknown_env(self) -> None:
        with pytest.raises(SystemExit):
            parse_overrides(["--env", "testing"])

    def test_flags_beat_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "5000")
        monkeypatch.setenv("DB_DSN", "sqlite:///from-env.db")

        settings = load_settings(["--port", "6000", "--db-max-idle-time", "PT30M"])

        assert settings.port == 6000
        assert settings.db_dsn == "sqlite+aiosqlite:///from-env.db"
        assert settings.db_max_idle_time == timedelta(minutes=30)

    def test_main_without_dsn_fails(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 2
        assert "invalid configuration" in capsys.readouterr().err
