"""Host-shell process spawning.

Commands run through ``subprocess`` with ``shell=True`` (``/bin/sh -c`` on
POSIX, ``cmd /C`` on Windows) and inherit stdin and stderr. Stdout is
inherited too unless redirected, e.g. to stderr when stdout carries JSON.
The caller blocks until the child exits.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

# Status reported when the shell itself cannot be started (POSIX convention)
SPAWN_FAILED_STATUS = 127

TERMINATE_GRACE_SECONDS = 5.0

STDERR_FILENO = 2


def run_shell(command: str, cwd: Path | None = None, *, stdout: int | None = None) -> int:
    """Run *command* via the host shell and return its exit status.

    *stdout* is a file descriptor for the child's standard output; None
    inherits ours. Signal deaths are reported as ``128 + signum``. On
    ``KeyboardInterrupt`` the child is terminated before the interrupt
    propagates.
    """
    logger.debug("Spawning %r in %s", command, cwd or ".")
    try:
        proc = subprocess.Popen(command, shell=True, cwd=cwd, stdout=stdout)
    except OSError as exc:
        logger.error("Failed to start command %r: %s", command, exc)
        return SPAWN_FAILED_STATUS

    try:
        returncode = proc.wait()
    except KeyboardInterrupt:
        terminate(proc)
        raise

    if returncode < 0:
        return 128 - returncode
    return returncode


def terminate(proc: subprocess.Popen[bytes], grace: float = TERMINATE_GRACE_SECONDS) -> None:
    """Stop *proc*: terminate, then kill if it outlives *grace* seconds."""
    if proc.poll() is not None:
        return
    logger.debug("Terminating child process %d", proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("Child process %d ignored SIGTERM, killing", proc.pid)
        proc.kill()
        proc.wait()
