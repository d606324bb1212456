"""CLI entry point for mpitest."""
from __future__ import annotations

import sys
from typing import Optional, Tuple

import click
from colorama import init as colorama_init

from mpitest import __version__, bootstrap
from mpitest.comm import world
from mpitest.core.driver import Driver
from mpitest.core.logging import configure_logging
from mpitest.registry import TestRegistry, load_suite
from mpitest.reporting import LogReporter, ReportManager, TerminalReporter


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class CliState:
    """Holds global CLI state."""

    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"mpitest {__version__}")
    raise click.exceptions.Exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output on every rank.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the mpitest version and exit.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Run SPMD test suites across an MPI process group.

    Launch every rank with the same arguments, e.g.
    ``mpirun -n 4 mpitest run my_tests.py``.
    """

    ctx.obj = CliState(verbose=verbose)


@cli.command()
@click.argument("suites", nargs=-1)
@click.option(
    "--filter",
    "filters",
    multiple=True,
    help="Only run tests whose name matches this glob (repeatable, comma-separated).",
)
@click.option("--list", "list_only", is_flag=True, help="List the registered tests without running them.")
@click.option("--strict", is_flag=True, help="Exit with status 1 when any test fails.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def run(
    state: CliState,
    suites: Tuple[str, ...],
    filters: Tuple[str, ...],
    list_only: bool,
    strict: bool,
    no_color: bool,
) -> None:
    """Execute the tests declared by SUITES (module names or .py files)."""

    comm = world()
    rank = comm.Get_rank()
    try:
        configure_logging(rank, verbose=state.verbose)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    colorama_init()

    registry = TestRegistry()
    try:
        bootstrap(registry)
        for target in suites:
            load_suite(target, registry)
    except Exception as exc:  # pragma: no cover - CLI error translation
        raise click.ClickException(str(exc)) from exc
    registry = registry.filtered(_split_csv(filters))

    if list_only:
        if rank == 0:
            for case in registry:
                click.echo(case.label())
        raise click.exceptions.Exit(0)

    reporter = ReportManager([TerminalReporter(use_color=not no_color), LogReporter()])
    summary = Driver(registry, comm, reporter=reporter).run()
    exit_code = 1 if strict and rank == 0 and summary.failed else 0
    raise click.exceptions.Exit(exit_code)


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="mpitest", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


def _split_csv(values: Tuple[str, ...]) -> Tuple[str, ...]:
    parts = [part.strip() for value in values for part in value.split(",")]
    return tuple(part for part in parts if part)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
