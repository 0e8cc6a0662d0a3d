from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

FALLBACK_LOG_NAME = "dotnet-packaging.log"


def configure_logging(
    level: int = logging.WARNING,
    log_path: Optional[str] = None,
) -> Optional[str]:
    """Configure logging.

    Console records go to stderr so they never mix with the build output on
    stdout. A log file is only opened when ``log_path`` is given; if that
    location is not writable we fall back to a file in the working directory.

    Calling this again only adjusts the level and re-points the console
    handler at the current ``sys.stderr``.

    Returns the actual log file path, if any.
    """

    logger = logging.getLogger()

    if getattr(logger, "_dotnet_packaging_configured", False):
        chosen = getattr(logger, "_dotnet_packaging_log_path", None)
        console = getattr(logger, "_dotnet_packaging_console")
        console.setStream(sys.stderr)
        console.setLevel(level)
        logger.setLevel(logging.DEBUG if chosen else level)
        return chosen

    logger.setLevel(level)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    console.setLevel(level)
    logger.addHandler(console)

    chosen_path: Optional[str] = None
    if log_path:
        try:
            Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            chosen_path = log_path
        except OSError:
            chosen_path = str(Path.cwd() / FALLBACK_LOG_NAME)
            file_handler = logging.FileHandler(chosen_path)
        file_handler.setFormatter(fmt)
        # The file always gets the full story, whatever the console shows.
        file_handler.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    setattr(logger, "_dotnet_packaging_configured", True)
    setattr(logger, "_dotnet_packaging_console", console)
    setattr(logger, "_dotnet_packaging_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
