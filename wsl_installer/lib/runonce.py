from __future__ import annotations

import logging
import subprocess
import sys
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

RUN_ONCE_KEY = r"Software\Microsoft\Windows\CurrentVersion\RunOnce"


def resume_command(argv: Optional[Sequence[str]] = None) -> str:
    """Command line that re-invokes this installer with the same arguments."""

    args = list(sys.argv[1:] if argv is None else argv)
    if getattr(sys, "frozen", False):
        return subprocess.list2cmdline([sys.executable, *args])
    return subprocess.list2cmdline([sys.executable, "-m", "wsl_installer", *args])


def register_run_once(name: str, command: str) -> None:
    """Arm HKCU RunOnce so the installer runs again at next logon."""

    import winreg

    with winreg.CreateKeyEx(winreg.HKEY_CURRENT_USER, RUN_ONCE_KEY, 0, winreg.KEY_SET_VALUE) as key:
        winreg.SetValueEx(key, name, 0, winreg.REG_SZ, command)
    logger.info("Registered RunOnce %s: %s", name, command)
