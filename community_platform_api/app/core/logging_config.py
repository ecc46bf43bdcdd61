"""
Process-wide logging setup.

``create_app`` calls ``setup_logging`` once with ``LOG_LEVEL`` and
``LOG_FILE`` from the settings.  Service modules only ever do
``logging.getLogger(__name__)``.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach a console handler, and a file handler when ``logfile`` is
    set, to the root logger.

    An unknown ``level`` name falls back to ``INFO``.  Calling this a
    second time (tests build the app repeatedly) leaves the existing
    handlers untouched.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
