from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..lib.guest import render_setup_script
from ..outcomes import StepResult
from ..pipeline import StepContext
from ..probe import ProbeResult
from .base import guarded_action

logger = logging.getLogger(__name__)


class InstallLanguageRuntimeAndAppStep:
    step_id = "40_install_runtime_and_app"
    stage = "InstallLanguageRuntimeAndApp"

    def precondition(self, probe: ProbeResult) -> bool:
        return probe.distribution_registered and not probe.application_installed

    def _action(self, ctx: StepContext) -> StepResult:
        cfg = ctx.config
        payload = render_setup_script(
            packages=cfg.guest_packages,
            node_major=cfg.node_major,
            app_package=cfg.app_package,
            app_command=cfg.app_command,
        )

        with tempfile.TemporaryDirectory(prefix="wsl-app-") as tmp:
            script = Path(tmp) / "setup.sh"
            # LF endings and no BOM, or sh inside the guest chokes.
            script.write_bytes(payload.encode("utf-8"))
            status = ctx.gateway.exec_in_guest(cfg.distribution, script)

        if status != 0:
            return StepResult.retryable(f"Guest setup script exited with status {status}")

        logger.info("Installed %s in %s", cfg.app_package, cfg.distribution)
        return StepResult.success()

    def run(self, ctx: StepContext) -> StepResult:
        return guarded_action(self.step_id, self._action, ctx)
