"""Terminal reporter producing the gtest-style console report."""
from __future__ import annotations

import click

from mpitest.core.models import TestCase
from mpitest.core.results import RunSummary

from .base import Reporter


RUNNING = "[ RUNNING ]"
SUCCESS = "[ SUCCESS ]"
FAIL = "[ FAIL    ]"

STATUS_COLORS = {
    RUNNING: "cyan",
    SUCCESS: "green",
    FAIL: "red",
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color

    def on_launch_error(self, required: int, available: int) -> None:
        click.echo(f"please launch with at least {required} procs!")

    def on_test_start(self, case: TestCase) -> None:
        click.echo(f"{self._styled(RUNNING)} {case.label()}")

    def on_failure(self, message: str) -> None:
        click.echo(message)

    def on_test_end(self, case: TestCase, total_failures: int) -> None:
        status = SUCCESS if total_failures == 0 else FAIL
        click.echo(f"{self._styled(status)} {case.name}")

    def on_complete(self, summary: RunSummary) -> None:
        pass

    def _styled(self, text: str) -> str:
        if not self._use_color:
            return text
        color = STATUS_COLORS.get(text)
        if color:
            return click.style(text, fg=color)
        return text
