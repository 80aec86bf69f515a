from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _program_data() -> Path:
    return Path(os.environ.get("ProgramData") or os.environ.get("PROGRAMDATA") or r"C:\ProgramData")


def _system_root() -> Path:
    return Path(os.environ.get("SystemRoot") or os.environ.get("SYSTEMROOT") or r"C:\Windows")


def _program_files() -> Path:
    return Path(os.environ.get("ProgramFiles") or os.environ.get("PROGRAMFILES") or r"C:\Program Files")


@dataclass(frozen=True)
class Paths:
    namespace: str = "WslInstaller"

    @property
    def log_default(self) -> str:
        return str(_program_data() / "wsl-installer" / "installer.log")

    @property
    def state_default(self) -> str:
        return str(_program_data() / "wsl-installer" / "resume.json")

    @property
    def dism(self) -> str:
        return str(_system_root() / "System32" / "dism.exe")

    @property
    def msiexec(self) -> str:
        return str(_system_root() / "System32" / "msiexec.exe")

    def wsl_candidates(self) -> list[Path]:
        # Inbox binary first, then the MSI/Store package location.
        return [
            _system_root() / "System32" / "wsl.exe",
            _program_files() / "WSL" / "wsl.exe",
        ]


PATHS = Paths()
