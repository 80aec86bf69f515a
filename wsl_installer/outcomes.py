from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StepStatus(str, Enum):
    SUCCESS = "success"
    REBOOT_REQUIRED = "reboot_required"
    RETRYABLE_FAILURE = "retryable_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass(frozen=True)
class StepResult:
    """Exactly one outcome per step invocation."""

    status: StepStatus
    reason: str = ""

    @classmethod
    def success(cls) -> "StepResult":
        return cls(StepStatus.SUCCESS)

    @classmethod
    def reboot_required(cls, reason: str = "") -> "StepResult":
        return cls(StepStatus.REBOOT_REQUIRED, reason)

    @classmethod
    def retryable(cls, reason: str) -> "StepResult":
        return cls(StepStatus.RETRYABLE_FAILURE, reason)

    @classmethod
    def fatal(cls, reason: str) -> "StepResult":
        return cls(StepStatus.FATAL_FAILURE, reason)

    @property
    def is_failure(self) -> bool:
        return self.status in {StepStatus.RETRYABLE_FAILURE, StepStatus.FATAL_FAILURE}


class ProcessStatus(str, Enum):
    ALREADY_SATISFIED = "already_satisfied"
    COMPLETED = "completed"
    REBOOT_REQUIRED = "reboot_required"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessOutcome:
    status: ProcessStatus
    reason: str = ""
    # Only meaningful for FAILED.
    retryable: bool = True

    @classmethod
    def failed(cls, reason: str, *, retryable: bool) -> "ProcessOutcome":
        return cls(ProcessStatus.FAILED, reason, retryable)

    @classmethod
    def from_step(cls, result: StepResult) -> "ProcessOutcome | None":
        """Map a step result to a halting outcome; None means keep going."""

        if result.is_failure:
            return cls.failed(result.reason, retryable=result.status is StepStatus.RETRYABLE_FAILURE)
        if result.status is StepStatus.REBOOT_REQUIRED:
            return cls(ProcessStatus.REBOOT_REQUIRED, result.reason)
        return None
