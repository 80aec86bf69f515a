from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from wsl_installer.config import InstallerConfig
from wsl_installer.errors import CommandError, DownloadError
from wsl_installer.state_store import FileMarkerStore

FEATURES = ["Microsoft-Windows-Subsystem-Linux", "VirtualMachinePlatform"]


class FakeGateway:
    """In-memory SystemGateway. Installs flip the fake state they would change."""

    def __init__(
        self,
        *,
        features: Optional[Dict[str, bool]] = None,
        runtime_present: bool = False,
        runtime_healthy: bool = False,
        distributions: Optional[List[str]] = None,
        app_installed: bool = False,
    ) -> None:
        self.features = dict(features if features is not None else {f: False for f in FEATURES})
        self.runtime_present = runtime_present
        self.runtime_healthy = runtime_healthy
        self.distributions = list(distributions or [])
        self.app_installed = app_installed

        self.calls: List[str] = []
        self.fail: set[str] = set()
        self.install_leaves_unhealthy = False
        # None: appears right after install; -1: never appears.
        self.distro_appears_after_polls: Optional[int] = None
        self.guest_exit_status = 0
        self.downloaded: List[Path] = []
        self.scripts: List[str] = []
        self.script_paths: List[Path] = []
        self.windows_build_number = 22631
        self.admin = True
        self._pending_distro: Optional[str] = None
        self._polls = 0

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise CommandError(f"{op} failed", returncode=1)

    def get_feature_state(self, name: str) -> bool:
        self._maybe_fail("get_feature_state")
        return self.features.get(name, False)

    def enable_feature(self, name: str) -> None:
        self.calls.append(f"enable_feature:{name}")
        self._maybe_fail("enable_feature")
        self.features[name] = True

    def runtime_executable(self) -> Optional[Path]:
        self._maybe_fail("runtime_executable")
        return Path(r"C:\Windows\System32\wsl.exe") if self.runtime_present else None

    def runtime_health_check(self) -> bool:
        self._maybe_fail("runtime_health_check")
        return self.runtime_healthy

    def download(self, url: str, dest: Path) -> Path:
        self.calls.append("download")
        if "download" in self.fail:
            raise DownloadError(f"Download of {url} failed")
        dest.write_bytes(b"MSI")
        self.downloaded.append(dest)
        return dest

    def _installed_runtime(self) -> None:
        self.runtime_present = True
        self.runtime_healthy = not self.install_leaves_unhealthy

    def install_runtime_package(self, package_path: Path) -> None:
        self.calls.append("install_runtime_package")
        assert package_path.exists()
        self._maybe_fail("install_runtime_package")
        self._installed_runtime()

    def install_runtime_native(self) -> None:
        self.calls.append("install_runtime_native")
        self._maybe_fail("install_runtime_native")
        self._installed_runtime()

    def update_runtime_kernel(self) -> None:
        self.calls.append("update_runtime_kernel")
        self._maybe_fail("update_runtime_kernel")

    def list_distributions(self) -> List[str]:
        self._maybe_fail("list_distributions")
        if self._pending_distro is not None:
            self._polls += 1
            wait = self.distro_appears_after_polls
            if wait is not None and wait >= 0 and self._polls > wait:
                self.distributions.append(self._pending_distro)
                self._pending_distro = None
        return list(self.distributions)

    def install_distribution(self, name: str) -> None:
        self.calls.append(f"install_distribution:{name}")
        self._maybe_fail("install_distribution")
        if self.distro_appears_after_polls is None:
            self.distributions.append(name)
        else:
            self._pending_distro = name
            self._polls = 0

    def set_default_distribution(self, name: str) -> None:
        self.calls.append(f"set_default_distribution:{name}")
        self._maybe_fail("set_default_distribution")

    def exec_in_guest(self, distro: str, script_path: Path) -> int:
        self.calls.append(f"exec_in_guest:{distro}")
        self._maybe_fail("exec_in_guest")
        self.script_paths.append(script_path)
        self.scripts.append(script_path.read_text(encoding="utf-8"))
        if self.guest_exit_status == 0:
            self.app_installed = True
        return self.guest_exit_status

    def run_in_guest(self, distro: str, command: str) -> int:
        self._maybe_fail("run_in_guest")
        return 0 if self.app_installed else 127

    def windows_build(self) -> int:
        return self.windows_build_number

    def is_admin(self) -> bool:
        return self.admin


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def config() -> InstallerConfig:
    return InstallerConfig(
        raw={
            "distribution": {"name": "Ubuntu", "poll_interval_s": 5, "max_wait_s": 30},
            "app": {"package": "typescript", "command": "tsc", "node_major": 20},
        }
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path) -> FileMarkerStore:
    return FileMarkerStore(str(tmp_path / "resume.json"))


@pytest.fixture
def make_ctx(config, clock):
    from wsl_installer.pipeline import StepContext
    from wsl_installer.probe import inspect

    def _make(gw: FakeGateway, cfg: Optional[InstallerConfig] = None) -> StepContext:
        cfg = cfg or config
        return StepContext(
            gateway=gw,
            config=cfg,
            probe=lambda: inspect(gw, cfg),
            sleep=clock.sleep,
            clock=clock,
        )

    return _make
