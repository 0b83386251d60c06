"""Entry point for deps-order with option parsing and the run pipeline."""

from __future__ import annotations

import functools
import sys

import click

from deps_order import __version__
from deps_order.commands._context import AppContext
from deps_order.config.settings import DepsOrderSettings
from deps_order.domain.errors import DepsOrderError, InvalidConfiguration

PROG_NAME = "cargo-deps-order"
CARGO_SUBCOMMAND = "deps-order"

_EXAMPLES = """\
  cargo deps-order
  cargo deps-order --workspace-only --print short
  cargo deps-order --workspace-only --exec "cargo publish -p {}" --wait 30
  cargo deps-order --exec "echo {} v{version} in {path}" --keep-going
  cargo deps-order --metadata-file metadata.json --json"""


def _section(**values: object) -> dict[str, object]:
    """Drop flags that were not given so lower-priority sources still apply."""
    return {key: value for key, value in values.items() if value is not None}


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(_EXAMPLES)
    ctx.exit(0)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name=PROG_NAME)
@click.option(
    "--examples",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_examples,
    help="Show usage examples and exit.",
)
@click.option(
    "--workspace-only", is_flag=True, help="Show only dependencies within the workspace."
)
@click.option(
    "--exec",
    "command",
    metavar="COMMAND",
    default=None,
    help="Command to run for each dependency. '{}', '{version}' and '{path}' are "
    "replaced with the name, version and directory of the dependency.",
)
@click.option(
    "--wait",
    type=click.IntRange(min=0),
    metavar="SECONDS",
    default=None,
    help="Seconds to wait between executing commands for consecutive dependencies.",
)
@click.option("--keep-going", is_flag=True, help="Continue after a command fails.")
@click.option("--include-dev", is_flag=True, help="Include dev-only dependencies.")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to Cargo.toml.",
)
@click.option(
    "--metadata-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read saved 'cargo metadata' JSON instead of running Cargo.",
)
@click.option(
    "-p",
    "--print",
    "style",
    type=click.Choice(["short", "normal", "verbose"]),
    default=None,
    help="Listing style: names, names with versions, or a detailed table.",
)
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
def cli(
    workspace_only: bool,
    command: str | None,
    wait: int | None,
    keep_going: bool,
    include_dev: bool,
    manifest_path: str | None,
    metadata_file: str | None,
    style: str | None,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """List dependencies leaf-first and optionally run a command on each."""
    try:
        settings = DepsOrderSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
            **_section(manifest_path=manifest_path, metadata_file=metadata_file),
            scope=_section(workspace_only=workspace_only or None, include_dev=include_dev or None),
            run=_section(exec=command, wait=wait, keep_going=keep_going or None),
            output=_section(print=style),
        )
    except InvalidConfiguration as exc:
        raise click.ClickException(str(exc)) from exc

    app = AppContext(settings)

    from deps_order.services.order import OrderService

    service = OrderService(app.load_records)
    workspace_only = settings.scope.workspace_only
    template = settings.run.exec

    if template is None:
        app.emit(service.order(workspace_only=workspace_only))
        return

    from deps_order.infrastructure.shell import STDERR_FILENO, run_shell
    from deps_order.services._helpers import error_result
    from deps_order.services.runner import RunnerService

    try:
        nodes = service.plan(workspace_only=workspace_only)
    except DepsOrderError as exc:
        app.emit(error_result("order", exc))
        return

    # Stdout holds a single JSON document; child output goes to stderr
    spawn = run_shell
    if settings.json_output:
        spawn = functools.partial(run_shell, stdout=STDERR_FILENO)
    runner = RunnerService(
        wait=settings.run.wait,
        keep_going=settings.run.keep_going,
        spawn=spawn,
        notify=app.notify,
        style=settings.output.print,
    )
    app.emit(runner.run(nodes, template))


def main() -> None:
    """Console-script entry point.

    Cargo runs ``cargo-deps-order deps-order [ARGS]`` for ``cargo deps-order``,
    so a leading subcommand name is dropped.
    """
    args = sys.argv[1:]
    if args and args[0] == CARGO_SUBCOMMAND:
        args = args[1:]
    cli.main(args=args, prog_name=PROG_NAME)
