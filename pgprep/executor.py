import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from typing import NoReturn, Sequence

from psycopg import sql
from pydantic import BaseModel

from pgprep.constants import (
    MAINTENANCE_DATABASE,
    PSQL_OUTPUT_FLAGS,
    PSQL_SCRIPT_ERROR_STATUS,
    ROLE_PERMISSIONS,
)
from pgprep.settings import PgprepSettings

logger = logging.getLogger(__name__)


class StatementError(Exception):
    """
    psql exited cleanly but reported an error for the statement itself.

    """

    def __init__(self, statement: str, stderr: str):
        self.statement = statement
        self.stderr = stderr
        super().__init__(f"psql failed executing this SQL statement:\n{statement}\n{stderr}")


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


class ConnectionTarget(BaseModel):
    """
    Where psql should connect. Unset fields fall back to psql's own defaults
    (the local socket, and a user named after the OS account).

    """

    database: str = MAINTENANCE_DATABASE
    user: str | None = None
    host: str | None = None
    port: int | None = None


class RoleSpecification(BaseModel):
    name: str

    superuser: bool = False
    createdb: bool = False
    createrole: bool = False
    inherit: bool = True
    replication: bool = False
    login: bool = True

    # encrypted_password takes precedence when both are given
    password: str | None = None
    encrypted_password: str | None = None

    valid_until: str | datetime | None = None


def _render(composable: sql.Composable) -> str:
    # psycopg prefixes literals that contain a backslash with " E"
    return composable.as_string(None).strip()


def role_sql(spec: RoleSpecification) -> str:
    """
    Build the `"name" WITH ...` tail shared by CREATE ROLE and ALTER ROLE.

    """
    parts = [_render(sql.Identifier(spec.name)), "WITH"]

    for perm in ROLE_PERMISSIONS:
        prefix = "" if getattr(spec, perm) else "NO"
        parts.append(f"{prefix}{perm.upper()}")

    if spec.encrypted_password:
        parts += ["ENCRYPTED PASSWORD", _render(sql.Literal(spec.encrypted_password))]
    elif spec.password:
        parts += ["PASSWORD", _render(sql.Literal(spec.password))]

    if spec.valid_until:
        valid_until = (
            spec.valid_until.isoformat()
            if isinstance(spec.valid_until, datetime)
            else spec.valid_until
        )
        parts += ["VALID UNTIL", _render(sql.Literal(valid_until))]

    return " ".join(parts)


class PsqlExecutor:
    """
    Runs SQL through the psql client as the service account. Output comes back in
    psql's unaligned tuples-only mode: columns separated by |, rows by newlines.
    That is easiest to consume for single-value results.

    """

    def __init__(self, settings: PgprepSettings | None = None):
        self.settings = settings or PgprepSettings()

    def build_command(self, target: ConnectionTarget, stop_on_error: bool = False) -> list[str]:
        command = [
            self.settings.PSQL_BINARY,
            *PSQL_OUTPUT_FLAGS,
            *(["-v", "ON_ERROR_STOP=1"] if stop_on_error else []),
            "-d",
            target.database,
            "-f",
            "-",
        ]
        if target.user:
            command += ["-U", target.user]
        if target.host:
            command += ["--host", target.host]
        if target.port:
            command += ["--port", str(target.port)]
        return command

    def execute(self, command: list[str], script: str) -> CommandResult | None:
        """
        Run one psql process with the script on stdin. Returns None when psql could
        not be run to completion at all.

        """
        try:
            result = subprocess.run(
                command,
                input=script,
                capture_output=True,
                text=True,
                encoding="utf-8",
                user=self.settings.SERVICE_USER,
                timeout=self.settings.COMMAND_TIMEOUT,
            )
        except FileNotFoundError:
            logger.warning(f"psql binary not found: {self.settings.PSQL_BINARY}")
            return None
        except subprocess.TimeoutExpired:
            logger.warning(f"psql did not finish within {self.settings.COMMAND_TIMEOUT}s")
            return None
        except KeyError:
            # subprocess looks the account up before forking; it may not exist yet
            logger.warning(f"Service account not found: {self.settings.SERVICE_USER}")
            return None
        except OSError as e:
            logger.warning(f"Unable to run psql as {self.settings.SERVICE_USER}: {e}")
            return None

        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def run_sql(
        self,
        query: str | Sequence[str],
        database: str | ConnectionTarget,
        stop_on_error: bool = False,
    ) -> str:
        """
        Execute a statement, or a sequence of statements as one script.

        An empty string usually means psql couldn't connect, since we pass failed
        connections back as empty output instead of aborting. A statement that the
        server rejects is raised as a StatementError.

        With stop_on_error, psql runs with ON_ERROR_STOP set: the first failing
        statement aborts the rest of the script and psql exits with status 3,
        which is raised as a StatementError as well.

        """
        statement = query if isinstance(query, str) else "\n".join(query)
        target = database if isinstance(database, ConnectionTarget) else ConnectionTarget(
            database=database
        )

        result = self.execute(self.build_command(target, stop_on_error), statement)
        if result is None:
            return ""

        if stop_on_error and result.returncode == PSQL_SCRIPT_ERROR_STATUS:
            self._fail(statement, result.stderr)

        if result.returncode != 0:
            # Generally the postgresql service is down
            logger.warning(
                f"psql exited with status {result.returncode} against {target.database}: "
                f"{result.stderr.strip()}"
            )
            return ""

        if result.stderr:
            # An SQL failure still exits 0, but stderr explains the error
            self._fail(statement, result.stderr)

        return result.stdout.rstrip()

    def _fail(self, statement: str, stderr: str) -> NoReturn:
        logger.critical(f"psql failed executing this SQL statement:\n{statement}")
        logger.critical(stderr)
        raise StatementError(statement, stderr)

    def count(self, query: sql.Composable, database: str | ConnectionTarget) -> int:
        output = self.run_sql(query.as_string(None), database)
        return int(output) if output else 0

    def database_exists(self, target: ConnectionTarget) -> bool:
        probe = target.model_copy(update={"database": MAINTENANCE_DATABASE})
        query = sql.SQL("SELECT count(*) FROM pg_database WHERE datname = {}").format(
            sql.Literal(target.database)
        )
        return self.count(query, probe) > 0

    def user_exists(self, name: str, target: ConnectionTarget | None = None) -> bool:
        probe = (target or ConnectionTarget()).model_copy(
            update={"database": MAINTENANCE_DATABASE}
        )
        query = sql.SQL("SELECT count(*) FROM pg_roles WHERE rolname = {}").format(
            sql.Literal(name)
        )
        return self.count(query, probe) > 0

    def extension_installed(self, extension: str, database: str | ConnectionTarget) -> bool:
        query = sql.SQL("SELECT count(*) FROM pg_extension WHERE extname = {}").format(
            sql.Literal(extension)
        )
        return self.count(query, database) > 0
