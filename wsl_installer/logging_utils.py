from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default


def _open_log_file(log_path: str) -> str:
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        with open(log_path, "a", encoding="utf-8"):
            pass
    except OSError:
        return str(Path.cwd() / "wsl-installer.log")
    return log_path


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send installer logs to log_path and, optionally, stderr.

    stdout is left to the status token. If log_path cannot be opened (a
    non-elevated run under ProgramData) wsl-installer.log in the working
    directory is used instead; the chosen path is returned.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Repeated calls keep the first set of handlers.
    if getattr(logger, "_wsl_installer_configured", False):
        return getattr(logger, "_wsl_installer_log_path", log_path)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    chosen_path = _open_log_file(log_path)
    handlers: list[logging.Handler] = [logging.FileHandler(chosen_path, encoding="utf-8")]
    if also_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    for h in handlers:
        h.setFormatter(fmt)
        logger.addHandler(h)

    setattr(logger, "_wsl_installer_configured", True)
    setattr(logger, "_wsl_installer_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
