from __future__ import annotations

import io
import json

import pytest

from wsl_installer.outcomes import ProcessOutcome, ProcessStatus, StepResult, StepStatus
from wsl_installer.pipeline import PipelineResult
from wsl_installer.report import emit, exit_code, status_token


@pytest.mark.parametrize(
    "outcome, token, code",
    [
        (ProcessOutcome(ProcessStatus.ALREADY_SATISFIED), "ALREADY_SATISFIED", 0),
        (ProcessOutcome(ProcessStatus.COMPLETED), "INSTALLED", 0),
        (ProcessOutcome(ProcessStatus.REBOOT_REQUIRED), "REBOOT_REQUIRED", 3010),
        (ProcessOutcome.failed("net down", retryable=True), "ERROR: net down", 1),
        (ProcessOutcome.failed("broken", retryable=False), "ERROR: broken", 2),
    ],
)
def test_tokens_and_exit_codes(outcome, token, code):
    assert status_token(outcome) == token
    assert exit_code(outcome) == code


def test_error_detail_is_single_line():
    outcome = ProcessOutcome.failed("Command failed (1)\n  stderr here", retryable=True)
    assert status_token(outcome) == "ERROR: Command failed (1) stderr here"


def test_emit_writes_exactly_one_line():
    buf = io.StringIO()
    code = emit(PipelineResult(outcome=ProcessOutcome(ProcessStatus.COMPLETED), ran_steps=["a"]), buf)
    assert code == 0
    assert buf.getvalue() == "INSTALLED\n"


def test_emit_json_record():
    buf = io.StringIO()
    result = PipelineResult(
        outcome=ProcessOutcome.failed("timed out", retryable=True),
        ran_steps=["30_install_distribution"],
        skipped_steps=["10_enable_os_features", "20_install_subsystem_runtime"],
        stopped_at="InstallDistribution",
    )
    code = emit(result, buf, as_json=True)
    record = json.loads(buf.getvalue())
    assert code == 1
    assert record == {
        "status": "ERROR",
        "exitCode": 1,
        "ranSteps": ["30_install_distribution"],
        "skippedSteps": ["10_enable_os_features", "20_install_subsystem_runtime"],
        "stage": "InstallDistribution",
        "reason": "timed out",
        "retryable": True,
    }


def test_step_result_mapping():
    assert ProcessOutcome.from_step(StepResult.success()) is None
    assert ProcessOutcome.from_step(StepResult.reboot_required()).status is ProcessStatus.REBOOT_REQUIRED
    fatal = ProcessOutcome.from_step(StepResult.fatal("x"))
    assert fatal.status is ProcessStatus.FAILED and not fatal.retryable
    retry = ProcessOutcome.from_step(StepResult.retryable("y"))
    assert retry.status is ProcessStatus.FAILED and retry.retryable
    assert StepResult.retryable("y").is_failure
    assert StepResult.retryable("y").status is StepStatus.RETRYABLE_FAILURE
