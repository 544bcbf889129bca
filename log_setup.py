"""Logging for the three BrandCraft processes: web app, logo relay and CLI.

Each process calls configure() once with its own component name; modules
just use logging.getLogger(__name__).

  console              configured level, one line per record
  logs/<component>.log DEBUG and up, rotating (5 x 5 MB), with file:line
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOGS_DIR = Path(__file__).parent / "logs"

_CONSOLE_FMT = "%(asctime)s  %(levelname)-7s  [{component}] %(name)s — %(message)s"
_FILE_FMT = "%(asctime)s  %(levelname)-7s  %(name)-12s  %(filename)s:%(lineno)d — %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every HTTP round trip at INFO.
_NOISY = ("urllib3", "httpx", "httpcore", "werkzeug", "openai", "anthropic", "replicate")


def log_path(component: str, logs_dir: Path = LOGS_DIR) -> Path:
    return logs_dir / f"{component}.log"


def configure(
    level: str = "INFO",
    component: str = "app",
    logs_dir: Optional[Path] = None,
) -> bool:
    """Attach console and rotating-file handlers to the root logger.

    Returns False (and does nothing) when the root logger already has
    handlers, e.g. under pytest or when called twice.
    """
    root = logging.getLogger()
    if root.handlers:
        return False

    path = log_path(component, logs_dir or LOGS_DIR)
    path.parent.mkdir(parents=True, exist_ok=True)
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(logging.Formatter(_CONSOLE_FMT.format(component=component), datefmt=_DATE_FMT))
    root.addHandler(console)

    rotating = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    rotating.setLevel(logging.DEBUG)
    rotating.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_DATE_FMT))
    root.addHandler(rotating)

    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)
    return True
