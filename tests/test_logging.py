import logging

from rich.logging import RichHandler

from core.logging import setup_logging


def test_plain_logging_handler():
    setup_logging(level=logging.DEBUG, use_rich=False)
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert not isinstance(root.handlers[0], RichHandler)
    assert root.level == logging.DEBUG
    # request logs from httpx stay quiet even in debug mode
    assert logging.getLogger("httpx").level == logging.WARNING


def test_rich_logging_handler():
    setup_logging(level=logging.INFO)
    root = logging.getLogger()
    assert isinstance(root.handlers[0], RichHandler)
