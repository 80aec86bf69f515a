from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from .config import InstallerConfig
from .lib.gateway import SystemGateway
from .outcomes import ProcessOutcome, ProcessStatus, StepResult
from .probe import ProbeResult

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    gateway: SystemGateway
    config: InstallerConfig
    probe: Callable[[], ProbeResult]
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    # Name persisted in the resume marker and reported to the caller.
    stage: str

    def precondition(self, probe: ProbeResult) -> bool:
        ...

    def run(self, ctx: StepContext) -> StepResult:
        ...


@dataclass(frozen=True)
class PipelineResult:
    outcome: ProcessOutcome
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)
    # Stage name of the step that halted the walk, if any.
    stopped_at: Optional[str] = None


def run_pipeline(*, steps: Sequence[Step], ctx: StepContext) -> PipelineResult:
    """Walk steps in order, probing fresh before each precondition.

    A false precondition counts as satisfied. The walk stops at the first step
    whose result is anything but success.
    """

    ran: List[str] = []
    skipped: List[str] = []

    for step in steps:
        probe = ctx.probe()
        if not step.precondition(probe):
            logger.info("Skipping step %s (already satisfied)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.info("Running step %s", step.step_id)
        result = step.run(ctx)
        ran.append(step.step_id)
        logger.info("Step %s -> %s %s", step.step_id, result.status.value, result.reason)

        halt = ProcessOutcome.from_step(result)
        if halt is not None:
            return PipelineResult(outcome=halt, ran_steps=ran, skipped_steps=skipped, stopped_at=step.stage)

    status = ProcessStatus.COMPLETED if ran else ProcessStatus.ALREADY_SATISFIED
    return PipelineResult(outcome=ProcessOutcome(status), ran_steps=ran, skipped_steps=skipped)
