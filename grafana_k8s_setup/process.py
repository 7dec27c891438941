"""Subprocess wrapper shared by the ``kubectl`` and ``helm`` helpers.

Never raises for the usual failure modes: a missing binary or an
expired timeout come back as a :class:`CommandResult` with
``success=False`` so callers decide which error kind to raise.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

RC_NOT_FOUND = 127
RC_TIMEOUT = 124


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def combined_output(self) -> str:
        return "\n".join(p for p in (self.stdout, self.stderr) if p).strip()


def run_command(
    cmd: List[str],
    *,
    timeout: Optional[float] = None,
    extra_env: Optional[Dict[str, str]] = None,
) -> CommandResult:
    """Run *cmd*, capturing output, bounded by *timeout* seconds."""
    env = {**os.environ}
    if extra_env:
        env.update(extra_env)

    shown = " ".join(cmd)
    logger.info("Running: %s", shown)
    started = time.monotonic()

    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            env=env,
            timeout=timeout,
        )
    except FileNotFoundError:
        return CommandResult(
            command=shown,
            returncode=RC_NOT_FOUND,
            stderr=f"{cmd[0]} not found on PATH",
        )
    except subprocess.TimeoutExpired as exc:
        logger.error("Timed out after %ss: %s", timeout, shown)
        return CommandResult(
            command=shown,
            returncode=RC_TIMEOUT,
            stdout=_text(exc.stdout),
            stderr=_text(exc.stderr) or f"timed out after {timeout}s",
            duration_ms=int((time.monotonic() - started) * 1000),
            timed_out=True,
        )

    result = CommandResult(
        command=shown,
        returncode=proc.returncode,
        stdout=(proc.stdout or "").strip(),
        stderr=(proc.stderr or "").strip(),
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    logger.debug("rc=%d in %dms: %s", result.returncode, result.duration_ms, shown)
    return result


def _text(data: object) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace").strip()
    return str(data).strip()
