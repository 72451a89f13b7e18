from pathlib import Path

from pydantic_settings import BaseSettings

from pgprep.constants import (
    FALLBACK_TIMEZONE,
    LEGACY_ZONE_DIR,
    LOCALTIME_PATH,
    OS_RELEASE_PATH,
    PSQL_BINARY,
    SERVICE_USER,
    SHARED_ZONE_DIR,
)


class PgprepSettings(BaseSettings):
    """
    Host-level knobs for the helpers. Defaults match a stock Linux install; every
    field can be overridden with a PGPREP_ prefixed environment variable.

    TZ and TZDIR are deliberately not modeled here: they are standard libc variables
    and are read through the HostEnvironment instead.
    """

    LEGACY_ZONE_DIR: Path = LEGACY_ZONE_DIR
    SHARED_ZONE_DIR: Path = SHARED_ZONE_DIR
    LOCALTIME_PATH: Path = LOCALTIME_PATH
    OS_RELEASE_PATH: Path = OS_RELEASE_PATH

    PSQL_BINARY: str = PSQL_BINARY

    # Account that psql runs as; None keeps the current process identity
    SERVICE_USER: str | None = SERVICE_USER

    # Seconds to wait on psql before treating the server as unreachable.
    # None waits forever.
    COMMAND_TIMEOUT: float | None = None

    # Used when neither TZ nor the system zone is acceptable to postgres
    FALLBACK_TIMEZONE: str = FALLBACK_TIMEZONE

    model_config = {"env_file": ".env", "env_prefix": "PGPREP_", "extra": "ignore"}
