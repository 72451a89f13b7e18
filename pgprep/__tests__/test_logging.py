import logging

from rich.logging import RichHandler

from pgprep.logging import configure_logging


def test_configure_logging_is_idempotent() -> None:
    logger = logging.getLogger("pgprep")
    try:
        configure_logging(logging.DEBUG)
        configure_logging(logging.WARNING)

        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
