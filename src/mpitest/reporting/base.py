"""Reporter interface definitions."""
from __future__ import annotations

from typing import List, Sequence

from mpitest.core.models import TestCase
from mpitest.core.results import RunSummary


class Reporter:
    """Interface for output renderers.

    Only the coordinator of a run (world rank 0) calls into a reporter.
    """

    def on_launch_error(self, required: int, available: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_test_start(self, case: TestCase) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_failure(self, message: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_test_end(self, case: TestCase, total_failures: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_complete(self, summary: RunSummary) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ReportManager(Reporter):
    """Dispatches lifecycle callbacks to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)

    def on_launch_error(self, required: int, available: int) -> None:
        for reporter in self._reporters:
            reporter.on_launch_error(required, available)

    def on_test_start(self, case: TestCase) -> None:
        for reporter in self._reporters:
            reporter.on_test_start(case)

    def on_failure(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.on_failure(message)

    def on_test_end(self, case: TestCase, total_failures: int) -> None:
        for reporter in self._reporters:
            reporter.on_test_end(case, total_failures)

    def on_complete(self, summary: RunSummary) -> None:
        for reporter in self._reporters:
            reporter.on_complete(summary)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)
