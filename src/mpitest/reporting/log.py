"""Reporter mirroring run progress into the ``logging`` tree."""
from __future__ import annotations

import logging
import time

from mpitest.core.models import TestCase
from mpitest.core.results import RunSummary

from .base import Reporter

logger = logging.getLogger("mpitest.report")


class LogReporter(Reporter):
    """Logs test boundaries and a run summary; never prints report lines."""

    def __init__(self) -> None:
        self._start_time = time.perf_counter()
        self._case_start = 0.0

    def on_launch_error(self, required: int, available: int) -> None:
        logger.warning("launched with %d process(es) but the largest test needs %d", available, required)

    def on_test_start(self, case: TestCase) -> None:
        self._case_start = time.perf_counter()
        logger.debug("starting %s", case.label())

    def on_failure(self, message: str) -> None:
        logger.debug("failure: %s", message.splitlines()[0] if message else message)

    def on_test_end(self, case: TestCase, total_failures: int) -> None:
        ms = (time.perf_counter() - self._case_start) * 1000
        logger.info("%s finished with %d failure(s) (%.2f ms)", case.label(), total_failures, ms)

    def on_complete(self, summary: RunSummary) -> None:
        duration = time.perf_counter() - self._start_time
        logger.info(
            "Summary: total=%d failed=%d world_size=%d duration=%.2fs",
            len(summary.outcomes),
            len(summary.failed),
            summary.world_size,
            duration,
        )
