"""
Access to ambient host state: environment variables, the filesystem, the clock and
the locale. Helpers take a HostEnvironment instead of reaching for os.environ or
datetime.now() directly, so tests can pin every input. File reads go through it as
well; which files are read is decided by the paths in PgprepSettings.

"""

import locale
import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterator, Mapping

logger = logging.getLogger(__name__)


class HostEnvironment:
    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] | None = None,
        date_formatter: Callable[[date], str] | None = None,
    ):
        self.environ = os.environ if environ is None else environ
        self.clock = clock
        self.date_formatter = date_formatter

    def getenv(self, name: str) -> str | None:
        return self.environ.get(name)

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def is_symlink(self, path: Path) -> bool:
        return path.is_symlink()

    def resolve(self, path: Path) -> Path:
        return path.resolve()

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def read_text(self, path: Path) -> str:
        return path.read_text()

    def walk(self, path: Path) -> Iterator[tuple[Path, list[str], list[str]]]:
        """
        Like os.walk, top-down; callers may prune the yielded directory list in place.

        """
        for root, dirs, files in os.walk(path):
            yield Path(root), dirs, files

    def now(self) -> datetime:
        """
        Current local time with its UTC offset attached.

        """
        if self.clock is not None:
            return self.clock()
        return datetime.now().astimezone()

    def format_locale_date(self, value: date) -> str:
        """
        Render a date the way the user's LC_TIME locale prefers (strftime %x).

        Python starts in the "C" locale, so we briefly switch LC_TIME to the user's
        configured locale and restore the previous one afterwards.

        """
        if self.date_formatter is not None:
            return self.date_formatter(value)

        previous = locale.setlocale(locale.LC_TIME)
        try:
            locale.setlocale(locale.LC_TIME, "")
        except locale.Error as e:
            logger.warning(f"Unable to load the user's LC_TIME locale, using {previous}: {e}")
            return value.strftime("%x")

        try:
            return value.strftime("%x")
        finally:
            locale.setlocale(locale.LC_TIME, previous)
