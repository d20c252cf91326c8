import logging
from logging import Logger

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_tracebacks

LOGGER_NAME = "llm_patterns"


def get_logger(level: int = logging.INFO) -> Logger:
    """Set up the package logger with RichHandler; module loggers propagate to it."""
    install_rich_tracebacks(show_locals=False, suppress=[__file__])

    console = Console(stderr=True, highlight=True, log_time_format="[%H:%M:%S]")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,  # prompts and model output may contain [brackets]
        rich_tracebacks=True,
        tracebacks_word_wrap=True,
    )

    logger.addHandler(rich_handler)
    logger.propagate = False
    return logger
