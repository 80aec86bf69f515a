from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..errors import FatalStepError, InstallerError
from ..outcomes import StepResult
from ..pipeline import StepContext
from ..probe import ProbeResult
from .base import guarded_action

logger = logging.getLogger(__name__)


class InstallSubsystemRuntimeStep:
    step_id = "20_install_subsystem_runtime"
    stage = "InstallSubsystemRuntime"

    def precondition(self, probe: ProbeResult) -> bool:
        return probe.all_features_enabled and not probe.runtime_healthy

    def _install_from_package(self, ctx: StepContext, work_dir: Path) -> bool:
        url = ctx.config.wsl_msi_url
        package = work_dir / (url.rsplit("/", 1)[-1] or "wsl.msi")
        try:
            ctx.gateway.download(url, package)
            ctx.gateway.install_runtime_package(package)
        except InstallerError as e:
            logger.warning("Package install of the WSL runtime failed: %s", e)
            return False
        return True

    def _install_native(self, ctx: StepContext) -> bool:
        try:
            ctx.gateway.install_runtime_native()
        except InstallerError as e:
            logger.warning("wsl --install fallback failed: %s", e)
            return False
        return True

    def _action(self, ctx: StepContext) -> StepResult:
        with tempfile.TemporaryDirectory(prefix="wsl-runtime-") as tmp:
            installed = self._install_from_package(ctx, Path(tmp)) or self._install_native(ctx)

        if not installed:
            return StepResult.retryable("WSL runtime could not be installed by package or wsl --install")

        if ctx.config.update_kernel:
            try:
                ctx.gateway.update_runtime_kernel()
            except InstallerError as e:
                # Best effort; the health probe below decides.
                logger.warning("WSL kernel update failed (ignored): %s", e)

        probe = ctx.probe()
        if probe.runtime_healthy:
            logger.info("WSL runtime healthy")
            return StepResult.success()

        raise FatalStepError(
            "WSL runtime was installed and required features are enabled, "
            f"but the runtime is still unhealthy (present={probe.executable_present})"
        )

    def run(self, ctx: StepContext) -> StepResult:
        return guarded_action(self.step_id, self._action, ctx)
