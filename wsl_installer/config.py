from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .errors import ConfigError

DEFAULT_FEATURES = ["Microsoft-Windows-Subsystem-Linux", "VirtualMachinePlatform"]
DEFAULT_WSL_MSI_URL = "https://github.com/microsoft/WSL/releases/download/2.3.26/wsl.2.3.26.0.x64.msi"


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def namespace(self) -> str:
        return str(self.raw.get("namespace") or "WslInstaller")

    @property
    def required_features(self) -> List[str]:
        return list(self._section("windows").get("features") or DEFAULT_FEATURES)

    @property
    def min_windows_build(self) -> int:
        return int(self._section("windows").get("min_build") or 19041)

    @property
    def wsl_msi_url(self) -> str:
        return str(self._section("runtime").get("msi_url") or DEFAULT_WSL_MSI_URL)

    @property
    def update_kernel(self) -> bool:
        return bool(self._section("runtime").get("update_kernel", True))

    @property
    def distribution(self) -> str:
        return str(self._section("distribution").get("name") or "Ubuntu")

    @property
    def poll_interval_s(self) -> float:
        return float(self._section("distribution").get("poll_interval_s", 5.0))

    @property
    def max_wait_s(self) -> float:
        return float(self._section("distribution").get("max_wait_s", 300.0))

    @property
    def node_major(self) -> int:
        return int(self._section("app").get("node_major") or 20)

    @property
    def guest_packages(self) -> List[str]:
        return list(self._section("app").get("packages") or ["ca-certificates", "curl", "gnupg", "git"])

    @property
    def app_package(self) -> str:
        return str(self._section("app").get("package") or "typescript")

    @property
    def app_command(self) -> str:
        return str(self._section("app").get("command") or "tsc")

    @property
    def download_retries(self) -> int:
        return int(self._section("download").get("retries", 3))

    @property
    def download_timeout_s(self) -> float:
        return float(self._section("download").get("timeout_s") or 60.0)


def load_config(path: str | None) -> InstallerConfig:
    """Load installer config from YAML; no path or a missing file means defaults."""

    if not path:
        return InstallerConfig()

    p = Path(path)
    if not p.exists():
        return InstallerConfig()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError(f"Installer config must be YAML: {p}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{p} must contain a mapping/object")

    return InstallerConfig(raw=raw)
