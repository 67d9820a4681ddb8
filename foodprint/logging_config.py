# -*- coding: utf-8 -*-
"""Root logging setup shared by the CLI and the HTTP app."""

import logging
from typing import Optional

from rich.logging import RichHandler

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", fmt: Optional[str] = None, rich: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        fmt: Log format; ignored when ``rich`` is set
        rich: Render through Rich for interactive terminals
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    if rich:
        logging.basicConfig(
            level=numeric_level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
            force=True,
        )
    else:
        logging.basicConfig(level=numeric_level, format=fmt or DEFAULT_FORMAT, force=True)

    # urllib3 stays at WARNING or above
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.WARNING))
