from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return subprocess.list2cmdline(list(argv))


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout_s: float | None = None,
    ok_codes: Sequence[int] = (0,),
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Output is decoded as UTF-8 with replacement; wsl.exe honours WSL_UTF8=1.
    - A missing executable or a timeout raises CommandError even with check=False.
    - With check=True, any return code outside ok_codes raises CommandError.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            encoding="utf-8",
            errors="replace",
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
            timeout=timeout_s,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"Command timed out after {timeout_s}s: {_fmt_argv(argv_list)}") from e
    except OSError as e:
        raise CommandError(f"Command could not be started: {_fmt_argv(argv_list)}: {e}") from e

    stdout = (p.stdout or "").replace("\x00", "")
    stderr = (p.stderr or "").replace("\x00", "")
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode not in ok_codes:
        raise CommandError(
            f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{stderr or stdout}",
            returncode=p.returncode,
        )

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
