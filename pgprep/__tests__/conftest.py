from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from pgprep.host import HostEnvironment
from pgprep.settings import PgprepSettings


@pytest.fixture
def settings(tmp_path: Path) -> PgprepSettings:
    """Settings whose host paths all live under a temporary directory."""
    return PgprepSettings(
        LEGACY_ZONE_DIR=tmp_path / "usr/lib/zoneinfo",
        SHARED_ZONE_DIR=tmp_path / "usr/share/zoneinfo",
        LOCALTIME_PATH=tmp_path / "etc/localtime",
        OS_RELEASE_PATH=tmp_path / "etc/os-release",
        SERVICE_USER="postgres",
    )


@pytest.fixture
def make_host() -> Callable[..., HostEnvironment]:
    """Build a HostEnvironment with a pinned environment and UTC offset."""

    def _make_host(
        environ: dict[str, str] | None = None,
        utc_offset: timedelta = timedelta(0),
    ) -> HostEnvironment:
        return HostEnvironment(
            environ=environ or {},
            clock=lambda: datetime(2024, 1, 15, 12, 0, tzinfo=timezone(utc_offset)),
        )

    return _make_host
