from __future__ import annotations

import logging

from ..errors import InstallerError
from ..outcomes import StepResult
from ..pipeline import StepContext
from ..probe import ProbeResult
from .base import guarded_action

logger = logging.getLogger(__name__)


class InstallDistributionStep:
    step_id = "30_install_distribution"
    stage = "InstallDistribution"

    def precondition(self, probe: ProbeResult) -> bool:
        return probe.runtime_healthy and not probe.distribution_registered

    def _registered(self, ctx: StepContext, distro: str) -> bool:
        try:
            names = ctx.gateway.list_distributions()
        except InstallerError as e:
            logger.warning("Listing distributions failed: %s", e)
            return False
        return distro.lower() in {n.lower() for n in names}

    def wait_for_registration(self, ctx: StepContext, distro: str) -> bool:
        """Poll until distro is registered or max_wait_s has elapsed."""

        interval = ctx.config.poll_interval_s
        deadline = ctx.clock() + ctx.config.max_wait_s
        while True:
            if self._registered(ctx, distro):
                return True
            remaining = deadline - ctx.clock()
            if remaining <= 0:
                return False
            ctx.sleep(min(interval, remaining))

    def _action(self, ctx: StepContext) -> StepResult:
        distro = ctx.config.distribution
        try:
            ctx.gateway.install_distribution(distro)
        except InstallerError as e:
            return StepResult.retryable(f"wsl --install -d {distro} failed: {e}")

        if not self.wait_for_registration(ctx, distro):
            return StepResult.retryable(
                f"{distro} was not registered within {ctx.config.max_wait_s:.0f}s"
            )

        try:
            ctx.gateway.set_default_distribution(distro)
        except InstallerError as e:
            # Best effort; a registered distro skips this step on later runs.
            logger.warning("Distribution %s registered but could not be set as default: %s", distro, e)
        else:
            logger.info("Distribution %s registered and set as default", distro)
        return StepResult.success()

    def run(self, ctx: StepContext) -> StepResult:
        return guarded_action(self.step_id, self._action, ctx)
