"""Driver running every registered test across the process group."""
from __future__ import annotations

import logging
from typing import Any, Optional

from mpitest.registry import TestRegistry
from mpitest.reporting import ReportManager, Reporter

from .channel import FailureChannel
from .context import AssertionAbort, TestContext
from .models import TestCase
from .results import CaseOutcome, RunSummary
from .scope import CommunicatorScope

logger = logging.getLogger("mpitest.driver")


class Driver:
    """Executes a registry's tests one after another on ``world``.

    Every rank of ``world`` must call :meth:`run` with an identical
    registry. Each test runs on world ranks ``0..size-1`` inside its own
    sub-communicator; world rank 0 is the coordinator and the only rank that
    talks to ``reporter``.
    """

    def __init__(self, registry: TestRegistry, world: Any, *, reporter: Optional[Reporter] = None) -> None:
        self._registry = registry
        self._world = world
        self._reporter = reporter if reporter is not None else ReportManager([])
        self._rank = world.Get_rank()

    @property
    def is_coordinator(self) -> bool:
        return self._rank == 0

    def run(self) -> RunSummary:
        world_size = self._world.Get_size()
        required = self._registry.largest_size()
        summary = RunSummary(world_size=world_size, required_size=required)

        # decided locally on every rank, nothing has been exchanged yet
        if world_size < required:
            if self.is_coordinator:
                self._reporter.on_launch_error(required, world_size)
            logger.debug("rank %d skipping all tests: %d < %d procs", self._rank, world_size, required)
            return summary

        self._world.Barrier()
        for index, case in enumerate(self._registry):
            summary.outcomes.append(self._run_case(index, case))

        if self.is_coordinator:
            self._reporter.on_complete(summary)
        return summary

    def _run_case(self, index: int, case: TestCase) -> CaseOutcome:
        with CommunicatorScope(self._world, case.size) as scope:
            outcome = CaseOutcome(case=case, participated=scope.active)
            if scope.active:
                if scope.is_coordinator:
                    self._reporter.on_test_start(case)
                context = self._registry.activate(index, scope.comm)
                try:
                    self._execute(case, context)
                finally:
                    self._registry.deactivate(context)
                outcome.local_failures = len(case.failures)
                outcome.total_failures = self._aggregate(case, scope)
            self._world.Barrier()
        return outcome

    def _execute(self, case: TestCase, context: TestContext) -> None:
        logger.debug("rank %d running %s", self._rank, case.label())
        try:
            case.body(context.comm, context)
        except AssertionAbort:
            logger.debug("rank %d left %s early on a failed assertion", self._rank, case.name)
        except Exception as exc:
            logger.debug("rank %d: %s raised %r", self._rank, case.name, exc)
            context.record_exception(exc)

    def _aggregate(self, case: TestCase, scope: CommunicatorScope) -> Optional[int]:
        channel = FailureChannel(scope.comm)
        coordinator = scope.is_coordinator
        on_message = self._reporter.on_failure if coordinator else _ignore
        total = channel.exchange(case.failures, on_message)
        if coordinator and total is not None:
            self._reporter.on_test_end(case, total)
        return total


def _ignore(_: str) -> None:
    pass
