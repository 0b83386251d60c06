"""RunnerService — run a command template once per package, in order.

Commands run one at a time through the host shell. A configurable pause
separates consecutive executions (never before the first or after the
last). By default the first failing command stops the run; with
``keep_going`` every package is attempted and all failures are reported.
An interrupt terminates the running command and stops the run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from deps_order.domain.errors import CommandExecutionFailed
from deps_order.domain.packages import PackageNode
from deps_order.domain.templates import expand_template
from deps_order.infrastructure.shell import run_shell
from deps_order.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from deps_order.config.models import PrintStyle

logger = logging.getLogger(__name__)

# Conventional shell status for termination by SIGINT
INTERRUPTED_STATUS = 130

type Spawn = Callable[[str, Path | None], int]
type Notify = Callable[[str], None]


def progress_line(node: PackageNode, command: str, style: PrintStyle = "normal") -> str:
    """The line announcing *command* for *node*, at the listing's detail level."""
    if style == "short":
        return f"==> {node.name}"
    if style == "verbose" and node.source_path is not None:
        return f"==> {node.name} {node.version} ({node.source_path}): {command}"
    return f"==> {node.name} {node.version}: {command}"


class RunnerService:
    """Executes a command template for each package of an ordering."""

    def __init__(
        self,
        *,
        wait: int = 0,
        keep_going: bool = False,
        spawn: Spawn = run_shell,
        sleep: Callable[[float], None] | None = None,
        notify: Notify | None = None,
        style: PrintStyle = "normal",
    ) -> None:
        self._wait = wait
        self._keep_going = keep_going
        self._spawn = spawn
        self._sleep = sleep or time.sleep
        self._notify = notify or logger.info
        self._style = style

    def run(self, nodes: Sequence[PackageNode], template: str) -> ServiceResult:
        """Run *template* for every node in *nodes*, sequentially."""
        completed: list[PackageNode] = []
        failures: list[CommandExecutionFailed] = []
        current: PackageNode | None = None
        attempted = 0

        try:
            for index, node in enumerate(nodes):
                if index > 0 and self._wait > 0:
                    self._notify(f"Waiting for {self._wait} seconds before next command...")
                    self._sleep(self._wait)

                current = node
                command = expand_template(template, node)
                self._notify(progress_line(node, command, self._style))
                with structlog.contextvars.bound_contextvars(package=str(node.id)):
                    status = self._spawn(command, node.source_path)
                    attempted += 1
                    current = None

                    if status == 0:
                        completed.append(node)
                        continue

                    failure = CommandExecutionFailed(node.id, status, command)
                    logger.debug("%s", failure)
                    failures.append(failure)
                    if not self._keep_going:
                        break
        except KeyboardInterrupt:
            return self._interrupted(nodes, completed, failures, current, attempted)

        data = {
            "count": len(nodes),
            "completed": [str(n.id) for n in completed],
            "failed": [f.detail() for f in failures],
            "skipped": [str(n.id) for n in nodes[attempted:]],
        }
        if not failures:
            return ServiceResult(ok=True, op="exec", data=data)

        first = failures[0]
        message = str(first)
        if len(failures) > 1:
            message = f"{len(failures)} commands failed; first: {first}"
        return ServiceResult(
            ok=False,
            op="exec",
            data=data,
            error=ServiceError(code=first.code, message=message, detail=first.detail()),
        )

    def _interrupted(
        self,
        nodes: Sequence[PackageNode],
        completed: list[PackageNode],
        failures: list[CommandExecutionFailed],
        current: PackageNode | None,
        attempted: int,
    ) -> ServiceResult:
        """Report a run stopped by an interrupt as a partial, failed run."""
        pending = nodes[attempted + (1 if current is not None else 0) :]
        where = f" while running command for '{current.id}'" if current else ""
        message = f"Interrupted{where}; {len(completed)} of {len(nodes)} packages completed"
        logger.debug("%s", message)
        return ServiceResult(
            ok=False,
            op="exec",
            data={
                "count": len(nodes),
                "completed": [str(n.id) for n in completed],
                "failed": [f.detail() for f in failures],
                "interrupted": str(current.id) if current else None,
                "skipped": [str(n.id) for n in pending],
            },
            error=ServiceError(
                code="INTERRUPTED",
                message=message,
                detail={"exit_status": INTERRUPTED_STATUS},
            ),
        )
