import logging

from rich.logging import RichHandler

from llm_patterns.logger import LOGGER_NAME, get_logger


def test_get_logger_installs_single_rich_handler():
    logger = get_logger()
    get_logger()

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_module_loggers_are_children_of_package_logger():
    parent = get_logger(level=logging.DEBUG)
    child = logging.getLogger("llm_patterns.orchestrator")
    assert child.parent is parent
    assert child.getEffectiveLevel() == logging.DEBUG
