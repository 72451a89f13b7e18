import logging

from rich.console import Console
from rich.logging import RichHandler

CONSOLE = Console(stderr=True)


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Route pgprep log records through rich. Callers that embed the helpers in a larger
    tool can skip this and attach their own handlers to the "pgprep" logger.

    """
    logger = logging.getLogger("pgprep")
    logger.setLevel(level)

    # Avoid stacking handlers when called more than once
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    logger.addHandler(
        RichHandler(console=CONSOLE, show_path=False, markup=False, rich_tracebacks=True)
    )
