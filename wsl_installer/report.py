from __future__ import annotations

import json
from typing import Any, Dict, TextIO

from .outcomes import ProcessOutcome, ProcessStatus
from .pipeline import PipelineResult

EXIT_OK = 0
EXIT_RETRYABLE = 1
EXIT_FATAL = 2
# ERROR_SUCCESS_REBOOT_REQUIRED, what MSI-driven shells expect.
EXIT_REBOOT_REQUIRED = 3010

_TOKENS = {
    ProcessStatus.ALREADY_SATISFIED: "ALREADY_SATISFIED",
    ProcessStatus.COMPLETED: "INSTALLED",
    ProcessStatus.REBOOT_REQUIRED: "REBOOT_REQUIRED",
}


def exit_code(outcome: ProcessOutcome) -> int:
    if outcome.status is ProcessStatus.REBOOT_REQUIRED:
        return EXIT_REBOOT_REQUIRED
    if outcome.status is ProcessStatus.FAILED:
        return EXIT_RETRYABLE if outcome.retryable else EXIT_FATAL
    return EXIT_OK


def status_token(outcome: ProcessOutcome) -> str:
    if outcome.status is ProcessStatus.FAILED:
        detail = " ".join((outcome.reason or "unknown error").split())
        return f"ERROR: {detail}"
    return _TOKENS[outcome.status]


def as_record(result: PipelineResult) -> Dict[str, Any]:
    outcome = result.outcome
    return {
        "status": status_token(outcome).split(":", 1)[0],
        "exitCode": exit_code(outcome),
        "ranSteps": list(result.ran_steps),
        "skippedSteps": list(result.skipped_steps),
        "stage": result.stopped_at,
        "reason": outcome.reason or None,
        "retryable": outcome.retryable if outcome.status is ProcessStatus.FAILED else None,
    }


def emit(result: PipelineResult, stream: TextIO, *, as_json: bool = False) -> int:
    """Write the single primary status line and return the process exit code."""

    if as_json:
        stream.write(json.dumps(as_record(result), sort_keys=True) + "\n")
    else:
        stream.write(status_token(result.outcome) + "\n")
    stream.flush()
    return exit_code(result.outcome)
