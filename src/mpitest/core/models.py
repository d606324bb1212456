"""Core dataclasses shared across mpitest subsystems."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List


TestBody = Callable[[Any, Any], None]  # body(comm, check)


@dataclass(frozen=True)
class AssertionSite:
    """Where an assertion was written."""

    line: int
    file: str
    expression: str


@dataclass(frozen=True)
class FailureRecord:
    """A single failed assertion observed on one process."""

    site: AssertionSite
    reason: str

    def render(self, rank: int) -> str:
        return (
            f"{self.site.expression} FAILED (on proc {rank} line {self.site.line} of {self.site.file})\n"
            f"    {self.reason}"
        )


@dataclass
class TestCase:
    """One registered test at one participant count."""

    __test__ = False

    body: TestBody
    size: int
    name: str
    failures: List[FailureRecord] = field(default_factory=list)

    def label(self) -> str:
        plural = "s" if self.size > 1 else ""
        return f"{self.name} ({self.size} proc{plural})"

    def reset(self) -> None:
        self.failures.clear()
