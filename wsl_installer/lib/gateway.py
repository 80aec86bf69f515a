from __future__ import annotations

import logging
import re
import sys
from pathlib import Path, PureWindowsPath
from typing import List, Optional, Protocol

from .command import run_cmd
from .env import PATHS
from .net import download_file

logger = logging.getLogger(__name__)

# Windows convention for "succeeded, reboot needed"; DISM and msiexec both use it.
ERROR_SUCCESS_REBOOT_REQUIRED = 3010

_FEATURE_STATE_RE = re.compile(r"^\s*State\s*:\s*(?P<state>.+?)\s*$", re.MULTILINE)

_WSL_ENV = {"WSL_UTF8": "1"}


class SystemGateway(Protocol):
    """Every host/guest side effect the probe and steps are allowed to cause."""

    def get_feature_state(self, name: str) -> bool: ...

    def enable_feature(self, name: str) -> None: ...

    def runtime_executable(self) -> Optional[Path]: ...

    def runtime_health_check(self) -> bool: ...

    def download(self, url: str, dest: Path) -> Path: ...

    def install_runtime_package(self, package_path: Path) -> None: ...

    def install_runtime_native(self) -> None: ...

    def update_runtime_kernel(self) -> None: ...

    def list_distributions(self) -> List[str]: ...

    def install_distribution(self, name: str) -> None: ...

    def set_default_distribution(self, name: str) -> None: ...

    def exec_in_guest(self, distro: str, script_path: Path) -> int: ...

    def run_in_guest(self, distro: str, command: str) -> int: ...

    def windows_build(self) -> int: ...

    def is_admin(self) -> bool: ...


def to_guest_path(path: str | Path) -> str:
    """Translate a Windows host path into its /mnt/<drive> form inside the guest."""

    p = PureWindowsPath(path)
    if not p.drive or not p.drive.endswith(":"):
        raise ValueError(f"Not a drive-letter path: {path}")
    drive = p.drive[0].lower()
    rest = "/".join(part for part in p.parts[1:])
    return f"/mnt/{drive}/{rest}" if rest else f"/mnt/{drive}"


def parse_distribution_list(output: str) -> List[str]:
    names: List[str] = []
    for line in output.splitlines():
        name = line.strip().lstrip("*").strip()
        if name:
            names.append(name)
    return names


def parse_feature_state(output: str) -> bool:
    m = _FEATURE_STATE_RE.search(output)
    return bool(m) and m.group("state").strip().lower() == "enabled"


class WindowsGateway:
    """SystemGateway backed by dism.exe, msiexec.exe and wsl.exe."""

    def __init__(self, *, download_retries: int = 3, download_timeout_s: float = 60.0) -> None:
        self.download_retries = download_retries
        self.download_timeout_s = download_timeout_s

    def _wsl(self) -> str:
        exe = self.runtime_executable()
        # The inbox stub can still drive --install when nothing else exists.
        return str(exe or PATHS.wsl_candidates()[0])

    def get_feature_state(self, name: str) -> bool:
        r = run_cmd(
            [PATHS.dism, "/online", "/English", "/get-featureinfo", f"/featurename:{name}"],
            timeout_s=120,
        )
        return parse_feature_state(r.stdout)

    def enable_feature(self, name: str) -> None:
        run_cmd(
            [PATHS.dism, "/online", "/enable-feature", f"/featurename:{name}", "/all", "/norestart"],
            ok_codes=(0, ERROR_SUCCESS_REBOOT_REQUIRED),
        )

    def runtime_executable(self) -> Optional[Path]:
        for candidate in PATHS.wsl_candidates():
            if candidate.is_file():
                return candidate
        return None

    def runtime_health_check(self) -> bool:
        exe = self.runtime_executable()
        if exe is None:
            return False
        r = run_cmd([str(exe), "--status"], check=False, env=_WSL_ENV, timeout_s=60)
        return r.ok

    def download(self, url: str, dest: Path) -> Path:
        return download_file(url, dest, retries=self.download_retries, timeout_s=self.download_timeout_s)

    def install_runtime_package(self, package_path: Path) -> None:
        run_cmd(
            [PATHS.msiexec, "/i", str(package_path), "/quiet", "/norestart"],
            ok_codes=(0, ERROR_SUCCESS_REBOOT_REQUIRED),
        )

    def install_runtime_native(self) -> None:
        run_cmd([self._wsl(), "--install", "--no-distribution"], env=_WSL_ENV)

    def update_runtime_kernel(self) -> None:
        run_cmd([self._wsl(), "--update"], env=_WSL_ENV)

    def list_distributions(self) -> List[str]:
        r = run_cmd([self._wsl(), "--list", "--quiet"], check=False, env=_WSL_ENV, timeout_s=60)
        if not r.ok:
            # wsl.exe exits non-zero when nothing is registered yet.
            return []
        return parse_distribution_list(r.stdout)

    def install_distribution(self, name: str) -> None:
        run_cmd([self._wsl(), "--install", "-d", name, "--no-launch"], env=_WSL_ENV)

    def set_default_distribution(self, name: str) -> None:
        run_cmd([self._wsl(), "--set-default", name], env=_WSL_ENV)

    def exec_in_guest(self, distro: str, script_path: Path) -> int:
        r = run_cmd(
            [self._wsl(), "-d", distro, "-u", "root", "--", "sh", to_guest_path(script_path)],
            check=False,
            env=_WSL_ENV,
        )
        return r.returncode

    def run_in_guest(self, distro: str, command: str) -> int:
        r = run_cmd(
            [self._wsl(), "-d", distro, "-u", "root", "--", "sh", "-c", command],
            check=False,
            env=_WSL_ENV,
            timeout_s=120,
        )
        return r.returncode

    def windows_build(self) -> int:
        if sys.platform != "win32":
            return 0
        return int(sys.getwindowsversion().build)

    def is_admin(self) -> bool:
        if sys.platform != "win32":
            return False
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except OSError:
            return False
