from enum import StrEnum
from pathlib import Path

from pgprep.constants import RECOVERY_MARKER, STANDBY_SIGNAL
from pgprep.host import HostEnvironment
from pgprep.settings import PgprepSettings


class PlatformFamily(StrEnum):
    RHEL = "rhel"
    FEDORA = "fedora"
    AMAZON = "amazon"
    DEBIAN = "debian"


# PGDG packages on these families keep config inside the data directory
REDHAT_FAMILIES = {PlatformFamily.RHEL, PlatformFamily.FEDORA, PlatformFamily.AMAZON}

OS_RELEASE_IDS: dict[str, PlatformFamily] = {
    "rhel": PlatformFamily.RHEL,
    "centos": PlatformFamily.RHEL,
    "rocky": PlatformFamily.RHEL,
    "almalinux": PlatformFamily.RHEL,
    "ol": PlatformFamily.RHEL,
    "fedora": PlatformFamily.FEDORA,
    "amzn": PlatformFamily.AMAZON,
    "debian": PlatformFamily.DEBIAN,
    "ubuntu": PlatformFamily.DEBIAN,
}


def parse_os_release(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key] = value.strip().strip("\"'")
    return values


def detect_platform_family(
    host: HostEnvironment | None = None,
    settings: PgprepSettings | None = None,
) -> PlatformFamily | None:
    """
    Map /etc/os-release onto one of the package families we know paths for.
    ID is checked before ID_LIKE so that Fedora isn't reported as RHEL.

    """
    host = host or HostEnvironment()
    settings = settings or PgprepSettings()

    if not host.exists(settings.OS_RELEASE_PATH):
        return None

    release = parse_os_release(host.read_text(settings.OS_RELEASE_PATH))
    candidates = [release.get("ID", ""), *release.get("ID_LIKE", "").split()]
    for candidate in candidates:
        family = OS_RELEASE_IDS.get(candidate.lower())
        if family is not None:
            return family
    return None


def data_dir(version: str | int, family: PlatformFamily) -> Path | None:
    if family in REDHAT_FAMILIES:
        return Path(f"/var/lib/pgsql/{version}/data")
    if family == PlatformFamily.DEBIAN:
        return Path(f"/var/lib/postgresql/{version}/main")
    return None


def conf_dir(version: str | int, family: PlatformFamily) -> Path | None:
    if family in REDHAT_FAMILIES:
        return Path(f"/var/lib/pgsql/{version}/data")
    if family == PlatformFamily.DEBIAN:
        return Path(f"/etc/postgresql/{version}/main")
    return None


def platform_service_name(version: str | int, family: PlatformFamily) -> str:
    if family in REDHAT_FAMILIES:
        return f"postgresql-{version}"
    return "postgresql"


def is_standby(data_directory: Path, host: HostEnvironment | None = None) -> bool:
    """
    Whether the server in this data directory runs as a replica. Postgres 12 replaced
    recovery.conf with an empty standby.signal file, so either marker counts.

    """
    host = host or HostEnvironment()
    return host.exists(data_directory / RECOVERY_MARKER) or host.exists(
        data_directory / STANDBY_SIGNAL
    )
