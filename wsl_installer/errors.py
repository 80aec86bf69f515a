from __future__ import annotations


class InstallerError(RuntimeError):
    """Base class for installer faults."""


class ConfigError(InstallerError):
    pass


class CommandError(InstallerError):
    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class DownloadError(InstallerError):
    pass


class FatalStepError(InstallerError):
    """Unexpected or unsupported system state; re-running will not help."""
