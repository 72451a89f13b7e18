from pathlib import Path

import pytest

from pgprep.settings import PgprepSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PGPREP_SERVICE_USER", "PGPREP_COMMAND_TIMEOUT", "PGPREP_FALLBACK_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)

    settings = PgprepSettings(_env_file=None)
    assert settings.LEGACY_ZONE_DIR == Path("/usr/lib/zoneinfo")
    assert settings.SHARED_ZONE_DIR == Path("/usr/share/zoneinfo")
    assert settings.LOCALTIME_PATH == Path("/etc/localtime")
    assert settings.PSQL_BINARY == "psql"
    assert settings.SERVICE_USER == "postgres"
    assert settings.COMMAND_TIMEOUT is None
    assert settings.FALLBACK_TIMEZONE == "Etc/UTC"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Every setting can be overridden with a PGPREP_ prefixed variable"""
    monkeypatch.setenv("PGPREP_COMMAND_TIMEOUT", "7.5")
    monkeypatch.setenv("PGPREP_SERVICE_USER", "pgadmin")
    monkeypatch.setenv("PGPREP_SHARED_ZONE_DIR", str(tmp_path))
    monkeypatch.setenv("PGPREP_FALLBACK_TIMEZONE", "Etc/GMT0")

    settings = PgprepSettings(_env_file=None)
    assert settings.COMMAND_TIMEOUT == 7.5
    assert settings.SERVICE_USER == "pgadmin"
    assert settings.SHARED_ZONE_DIR == tmp_path
    assert settings.FALLBACK_TIMEZONE == "Etc/GMT0"


def test_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("PGPREP_PSQL_BINARY", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("PGPREP_PSQL_BINARY=/usr/lib/postgresql/16/bin/psql\n")

    settings = PgprepSettings(_env_file=env_file)
    assert settings.PSQL_BINARY == "/usr/lib/postgresql/16/bin/psql"
