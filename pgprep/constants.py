from pathlib import Path

# size units, in the spelling postgresql.conf expects
SIZE_UNIT_KB = "kB"
SIZE_UNIT_MB = "MB"
SIZE_UNIT_GB = "GB"
SIZE_UNIT_TB = "TB"

SIZE_UNIT_MAP: dict[str, int] = {
    SIZE_UNIT_KB: 1024,
    SIZE_UNIT_MB: 1048576,
    SIZE_UNIT_GB: 1073741824,
    SIZE_UNIT_TB: 1099511627776,
}

# Largest unit first; binary_round picks the first one the multiplier reaches
QUANTIZE_UNITS = [SIZE_UNIT_GB, SIZE_UNIT_MB, SIZE_UNIT_KB]

# Settings that hold a byte count and are rendered through binary_round
KNOWN_MEMORY_VARS = [
    "shared_buffers",
    "effective_cache_size",
    "maintenance_work_mem",
    "wal_buffers",
    "work_mem",
]

# Locale probe: mon=11, day=22, year=33
DATE_PROBE_YEAR = 2033
DATE_PROBE_MONTH = 11
DATE_PROBE_DAY = 22

# zoneinfo locations, in tzset(3) precedence
LEGACY_ZONE_DIR = Path("/usr/lib/zoneinfo")
SHARED_ZONE_DIR = Path("/usr/share/zoneinfo")
LOCALTIME_PATH = Path("/etc/localtime")

# Zones under this prefix carry leap seconds, which postgres refuses to start with
LEAP_SECOND_PREFIX = "right/"
FACTORY_ZONE = "Factory"
FALLBACK_TIMEZONE = "Etc/UTC"

# Subtrees and aliases that duplicate real zones in the shared directory
SKIPPED_ZONE_DIRS = {"posix", "right"}
SKIPPED_ZONE_FILES = {"posixrules", "localtime", "Factory"}

# psql invocation
PSQL_BINARY = "psql"
PSQL_OUTPUT_FLAGS = ["-q", "--tuples-only", "--no-align"]
SERVICE_USER = "postgres"

# Order matters: role_sql emits the flags in exactly this sequence
ROLE_PERMISSIONS = ["superuser", "createdb", "createrole", "inherit", "replication", "login"]

# standby markers inside a data directory
RECOVERY_MARKER = "recovery.conf"
STANDBY_SIGNAL = "standby.signal"

OS_RELEASE_PATH = Path("/etc/os-release")

# Database psql connects to when probing for objects that may not exist yet
MAINTENANCE_DATABASE = "postgres"

# psql exits with 3 when ON_ERROR_STOP aborts a script on a failing statement
PSQL_SCRIPT_ERROR_STATUS = 3
