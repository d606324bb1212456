"""Result data structures produced by the driver."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .models import TestCase


@dataclass
class CaseOutcome:
    """Outcome of one test as seen by this process.

    ``total_failures`` is only known on the test's coordinator; other
    participants and idle ranks leave it as ``None``.
    """

    case: TestCase
    participated: bool
    local_failures: int = 0
    total_failures: Optional[int] = None

    @property
    def failed(self) -> bool:
        return bool(self.total_failures)


@dataclass
class RunSummary:
    """Everything one process learned from a run."""

    world_size: int
    required_size: int
    outcomes: List[CaseOutcome] = field(default_factory=list)

    @property
    def launched(self) -> bool:
        return self.world_size >= self.required_size

    @property
    def failed(self) -> List[str]:
        return [outcome.case.label() for outcome in self.outcomes if outcome.failed]
