from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import Callable, Optional

from .config import InstallerConfig, load_config
from .lib.gateway import SystemGateway, WindowsGateway
from .lib.runonce import register_run_once, resume_command
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .outcomes import ProcessOutcome, ProcessStatus
from .pipeline import PipelineResult, StepContext, run_pipeline
from .probe import inspect
from .report import EXIT_FATAL, EXIT_OK, EXIT_RETRYABLE, emit
from .requirements import check_requirements
from .state_store import MarkerStore, ResumeMarker, default_marker_store
from .steps import (
    EnableOSFeaturesStep,
    InstallDistributionStep,
    InstallLanguageRuntimeAndAppStep,
    InstallSubsystemRuntimeStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return (
        EnableOSFeaturesStep(),
        InstallSubsystemRuntimeStep(),
        InstallDistributionStep(),
        InstallLanguageRuntimeAndAppStep(),
    )


def _update_marker(store: MarkerStore, result: PipelineResult) -> None:
    outcome = result.outcome
    try:
        if outcome.status is ProcessStatus.REBOOT_REQUIRED:
            store.save(ResumeMarker.now(result.stopped_at or ""))
            logger.info("Resume marker saved at stage %s", result.stopped_at)
        elif outcome.status is ProcessStatus.FAILED and outcome.retryable:
            logger.info("Leaving resume marker in place for retry")
        else:
            store.clear()
    except Exception:
        # The marker is advisory; the next run re-derives position by probing.
        logger.exception("Could not update resume marker")


def run(
    *,
    config: InstallerConfig,
    gateway: SystemGateway,
    store: MarkerStore,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PipelineResult:
    """Run the installer pipeline once, keeping the resume marker in step."""

    try:
        marker = store.load()
    except Exception:
        logger.exception("Could not read resume marker")
        marker = None
    if marker is not None:
        logger.info("Resume marker found: stage=%s written=%s", marker.stage, time.ctime(marker.timestamp))

    ctx = StepContext(
        gateway=gateway,
        config=config,
        probe=lambda: inspect(gateway, config),
        sleep=sleep,
        clock=clock,
    )
    result = run_pipeline(steps=build_steps(), ctx=ctx)
    logger.info(
        "Pipeline finished: %s (ran=%s skipped=%s)",
        result.outcome.status.value,
        result.ran_steps,
        result.skipped_steps,
    )

    _update_marker(store, result)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="wsl-installer")
    p.add_argument("--config", default=None, help="Path to installer config (yaml)")
    p.add_argument("--state", default=None, help="Keep the resume marker in this file (json|yaml) instead of the registry")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--json", action="store_true", help="Emit a JSON record instead of a status token")
    p.add_argument("--check", action="store_true", help="Only run the requirements check and print its JSON record")
    p.add_argument("--arm-run-once", action="store_true", help="Register a RunOnce entry when a reboot is required")
    p.add_argument("--verbose", action="store_true", help="Log command output")

    args = p.parse_args(argv)

    try:
        configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)
        config = load_config(args.config)
        gateway = WindowsGateway(
            download_retries=config.download_retries,
            download_timeout_s=config.download_timeout_s,
        )

        if args.check:
            record = check_requirements(gateway, config)
            sys.stdout.write(json.dumps(record) + "\n")
            return EXIT_OK if record["overallOk"] else EXIT_RETRYABLE

        store = default_marker_store(namespace=config.namespace, state_path=args.state)
        result = run(config=config, gateway=gateway, store=store)

        if args.arm_run_once and result.outcome.status is ProcessStatus.REBOOT_REQUIRED:
            try:
                register_run_once(config.namespace, resume_command(argv))
            except Exception:
                logger.exception("Could not register RunOnce entry")

        return emit(result, sys.stdout, as_json=args.json)
    except Exception as e:
        logger.exception("Installer failed")
        crashed = PipelineResult(outcome=ProcessOutcome.failed(str(e) or type(e).__name__, retryable=False))
        emit(crashed, sys.stdout, as_json=args.json)
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
