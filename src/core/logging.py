import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as _install_tb


def setup_logging(level: int = logging.INFO, use_rich: bool = True) -> None:
    """Configure project-wide logging.

    - With `use_rich` (the default), uses `rich.logging.RichHandler` for pretty
      console output and better tracebacks.
    - Otherwise installs a plain `logging.StreamHandler` with a readable format,
      which suits log files and CI output.
    """
    root = logging.getLogger()
    # remove existing handlers to avoid duplicate logs
    for h in list(root.handlers):
        root.removeHandler(h)

    if use_rich:
        _install_tb()
        # stderr keeps stdout clean for JSON reports
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s: %(message)s"))

    root.addHandler(handler)
    root.setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
