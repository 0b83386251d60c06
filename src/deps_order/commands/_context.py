"""AppContext — per-invocation state shared by the CLI.

Created once by the entry point from the resolved settings. Provides lazy
metadata loading and centralized result emission (stdout/stderr routing
plus exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from deps_order.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from deps_order.config.settings import DepsOrderSettings
    from deps_order.domain.packages import PackageRecord
    from deps_order.services.result import ServiceResult


class AppContext:
    """Shared context for one CLI invocation.

    Metadata is loaded lazily on first use so ``--help`` and ``--version``
    never run Cargo.
    """

    def __init__(self, settings: DepsOrderSettings) -> None:
        self.settings = settings
        self._records: list[PackageRecord] | None = None

        from deps_order.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def load_records(self) -> list[PackageRecord]:
        """The package listing (fetched on first call)."""
        if self._records is None:
            from deps_order.infrastructure.metadata import load_records

            self._records = load_records(
                manifest_path=self.settings.manifest_path,
                metadata_file=self.settings.metadata_file,
                include_dev=self.settings.scope.include_dev,
            )
        return self._records

    def notify(self, message: str) -> None:
        """Progress line on stderr, keeping stdout for results."""
        click.echo(message, err=True)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr and exits with ``result.exit_code``
          (the failing command's status when there is one, else 1).
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            style=self.settings.output.print,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(result.exit_code)
