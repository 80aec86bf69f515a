from __future__ import annotations

import logging

from ..errors import CommandError
from ..outcomes import StepResult
from ..pipeline import StepContext
from ..probe import ProbeResult
from .base import guarded_action

logger = logging.getLogger(__name__)


class EnableOSFeaturesStep:
    step_id = "10_enable_os_features"
    stage = "EnableOSFeatures"

    def precondition(self, probe: ProbeResult) -> bool:
        return (not probe.runtime_healthy) and (not probe.all_features_enabled)

    def _action(self, ctx: StepContext) -> StepResult:
        probe = ctx.probe()
        pending = probe.disabled_features
        if not pending:
            return StepResult.success()

        enabled: list[str] = []
        for name in pending:
            try:
                ctx.gateway.enable_feature(name)
            except CommandError as e:
                # Features enabled so far probe as enabled on the next run.
                return StepResult.retryable(f"Enabling {name} failed: {e}")
            enabled.append(name)
            logger.info("Enabled Windows feature %s (restart deferred)", name)

        return StepResult.reboot_required(f"Enabled {', '.join(enabled)}")

    def run(self, ctx: StepContext) -> StepResult:
        return guarded_action(self.step_id, self._action, ctx)
