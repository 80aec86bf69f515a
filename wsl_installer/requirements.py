from __future__ import annotations

import logging
from typing import Any, Dict, List

from .config import InstallerConfig
from .lib.gateway import SystemGateway
from .probe import inspect

logger = logging.getLogger(__name__)


def check_requirements(gateway: SystemGateway, config: InstallerConfig) -> Dict[str, Any]:
    """Pre-flight record consulted by the driving shell before running the pipeline.

    subsystemInstalled is informational and does not affect overallOk.
    """

    messages: List[str] = []

    try:
        build = int(gateway.windows_build())
    except Exception as e:
        logger.warning("Could not read Windows build: %s", e)
        build = 0
    version_ok = build >= config.min_windows_build
    if not version_ok:
        messages.append(
            f"Windows 10 build {config.min_windows_build} or later is required (found {build or 'unknown'})."
        )

    try:
        admin = bool(gateway.is_admin())
    except Exception as e:
        logger.warning("Could not determine elevation: %s", e)
        admin = False
    if not admin:
        messages.append("The installer must be run as Administrator.")

    installed = inspect(gateway, config).runtime_healthy
    if installed:
        messages.append("WSL is already installed and healthy.")

    return {
        "overallOk": version_ok and admin,
        "windowsVersionOk": version_ok,
        "isAdmin": admin,
        "subsystemInstalled": installed,
        "messages": messages,
    }
