"""
Timezone discovery for the timezone and log_timezone settings.

Postgres uses the zone names in postgresql.conf rather than the system default, and
those names are paths relative to the shared zoneinfo directory. We follow the same
chain initdb does: honor TZ, otherwise match /etc/localtime against the zone
database, otherwise synthesize a fixed-offset Etc/GMT zone.

"""

import logging
from pathlib import Path

from pgprep.constants import (
    FACTORY_ZONE,
    LEAP_SECOND_PREFIX,
    SKIPPED_ZONE_DIRS,
    SKIPPED_ZONE_FILES,
)
from pgprep.host import HostEnvironment
from pgprep.settings import PgprepSettings

logger = logging.getLogger(__name__)


def locate_zone_directory(
    host: HostEnvironment | None = None,
    settings: PgprepSettings | None = None,
) -> Path | None:
    """
    Find the shared zoneinfo directory, following the precedence in tzset(3):
    the legacy /usr/lib/zoneinfo, then TZDIR, then /usr/share/zoneinfo.

    """
    host = host or HostEnvironment()
    settings = settings or PgprepSettings()

    if host.is_dir(settings.LEGACY_ZONE_DIR):
        return settings.LEGACY_ZONE_DIR

    tzdir = host.getenv("TZDIR")
    share_path = Path(tzdir) if tzdir else settings.SHARED_ZONE_DIR
    if host.is_dir(share_path):
        return share_path
    return None


def validate_zone(name: str) -> bool:
    """
    Postgres refuses to start against a zone with leap seconds. The tzdata packages
    keep all of those under right/, so the name alone is enough to reject them.

    """
    return not name.startswith(LEAP_SECOND_PREFIX)


def _zone_name(zone_dir: Path, path: Path) -> str | None:
    try:
        return path.relative_to(zone_dir).as_posix()
    except ValueError:
        return None


def scan_available_timezones(
    zone_dir: Path,
    host: HostEnvironment | None = None,
    settings: PgprepSettings | None = None,
) -> str | None:
    """
    Name the zone file in zone_dir that the host's localtime marker refers to.

    A symlinked marker is resolved directly. Otherwise we look for a zone file with
    identical contents, skipping the posix/ and right/ mirrors; when several aliases
    match, the shortest name wins.

    """
    host = host or HostEnvironment()
    settings = settings or PgprepSettings()
    marker = settings.LOCALTIME_PATH

    if not host.exists(marker):
        return None

    if host.is_symlink(marker):
        name = _zone_name(host.resolve(zone_dir), host.resolve(marker))
        if name is not None:
            return name

    try:
        expected = host.read_bytes(marker)
    except OSError as e:
        logger.warning(f"Unable to read {marker}: {e}")
        return None

    matches: list[str] = []
    for root, dirs, files in host.walk(zone_dir):
        if root == zone_dir:
            dirs[:] = [d for d in dirs if d not in SKIPPED_ZONE_DIRS]
        dirs.sort()

        for filename in files:
            if filename in SKIPPED_ZONE_FILES:
                continue
            candidate = root / filename
            if host.is_symlink(candidate) or not host.is_file(candidate):
                continue
            try:
                if host.file_size(candidate) != len(expected):
                    continue
                if host.read_bytes(candidate) != expected:
                    continue
            except OSError as e:
                logger.debug(f"Skipping unreadable zone file {candidate}: {e}")
                continue
            matches.append(candidate.relative_to(zone_dir).as_posix())

    if not matches:
        return None
    return min(matches, key=lambda name: (len(name), name))


def identify_system_timezone(
    zone_dir: Path | None,
    host: HostEnvironment | None = None,
    settings: PgprepSettings | None = None,
) -> str:
    """
    Name the zone the host is configured with. When the zone database doesn't
    contain it, fall back to the Etc/GMT zone for the current UTC offset.

    """
    host = host or HostEnvironment()
    settings = settings or PgprepSettings()

    zone = scan_available_timezones(zone_dir, host, settings) if zone_dir else None

    # Olson's "Factory" zone is a placeholder, not a real location
    if zone is not None and zone != FACTORY_ZONE:
        return zone

    # The Etc/GMT zones are named in POSIX style: plus is west of Greenwich
    offset = host.now().utcoffset()
    offset_seconds = int(offset.total_seconds()) if offset is not None else 0
    hours = -int(offset_seconds / 3600)
    return f"Etc/GMT{'+' if hours > 0 else ''}{hours}"


def select_default_timezone(
    zone_dir: Path | None,
    host: HostEnvironment | None = None,
    settings: PgprepSettings | None = None,
) -> str:
    """
    Pick the value for the timezone and log_timezone settings.

    """
    host = host or HostEnvironment()
    settings = settings or PgprepSettings()

    tzname = host.getenv("TZ")
    if tzname and validate_zone(tzname):
        return tzname

    tzname = identify_system_timezone(zone_dir, host, settings)
    if validate_zone(tzname):
        return tzname

    logger.warning(
        f"System timezone {tzname} uses leap seconds, which postgres does not support; "
        f"using {settings.FALLBACK_TIMEZONE}"
    )
    return settings.FALLBACK_TIMEZONE
