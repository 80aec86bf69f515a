from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, TypeVar

from .config import InstallerConfig
from .lib.gateway import SystemGateway
from .lib.guest import app_check_command

logger = logging.getLogger(__name__)

T = TypeVar("T")

DISTRIBUTION = "distribution"
APPLICATION = "application"


@dataclass(frozen=True)
class ProbeResult:
    """Snapshot of install state. Never persisted or reused across runs."""

    feature_flags: Dict[str, bool] = field(default_factory=dict)
    executable_present: bool = False
    executable_healthy: bool = False
    sub_components: Dict[str, bool] = field(default_factory=dict)

    @property
    def all_features_enabled(self) -> bool:
        return all(self.feature_flags.values())

    @property
    def disabled_features(self) -> list[str]:
        return [name for name, enabled in self.feature_flags.items() if not enabled]

    @property
    def runtime_healthy(self) -> bool:
        return self.executable_present and self.executable_healthy

    @property
    def distribution_registered(self) -> bool:
        return bool(self.sub_components.get(DISTRIBUTION, False))

    @property
    def application_installed(self) -> bool:
        return bool(self.sub_components.get(APPLICATION, False))


def _safe(what: str, fn: Callable[[], T], default: T) -> T:
    try:
        return fn()
    except Exception as e:
        logger.warning("Probe %s failed, treating as absent: %s", what, e)
        return default


def inspect(gateway: SystemGateway, config: InstallerConfig) -> ProbeResult:
    """Answer the pipeline's yes/no questions about the host. Never raises."""

    flags = {
        name: _safe(f"feature {name}", lambda name=name: bool(gateway.get_feature_state(name)), False)
        for name in config.required_features
    }

    present = _safe("runtime executable", lambda: gateway.runtime_executable() is not None, False)
    healthy = present and _safe("runtime health", lambda: bool(gateway.runtime_health_check()), False)

    subs: Dict[str, bool] = {DISTRIBUTION: False, APPLICATION: False}
    if healthy:
        distro = config.distribution
        subs[DISTRIBUTION] = _safe(
            "distribution list",
            lambda: distro.lower() in {d.lower() for d in gateway.list_distributions()},
            False,
        )
    if subs[DISTRIBUTION]:
        check = app_check_command(config.app_command)
        subs[APPLICATION] = _safe(
            "guest application",
            lambda: gateway.run_in_guest(config.distribution, check) == 0,
            False,
        )

    result = ProbeResult(
        feature_flags=flags,
        executable_present=present,
        executable_healthy=healthy,
        sub_components=subs,
    )
    logger.info(
        "Probe: features=%s runtime_present=%s runtime_healthy=%s components=%s",
        flags,
        present,
        healthy,
        subs,
    )
    return result
