from __future__ import annotations

import logging
from typing import Callable

from ..errors import FatalStepError
from ..outcomes import StepResult
from ..pipeline import StepContext

logger = logging.getLogger(__name__)


def guarded_action(step_id: str, action: Callable[[StepContext], StepResult], ctx: StepContext) -> StepResult:
    """Run a step action, converting any fault into exactly one StepResult."""

    try:
        return action(ctx)
    except FatalStepError as e:
        logger.error("Step %s hit an unrecoverable state: %s", step_id, e)
        return StepResult.fatal(str(e))
    except Exception as e:
        logger.exception("Step %s failed", step_id)
        return StepResult.retryable(f"{step_id}: {e}")
