"""Test registry and the suite builder tests declare themselves against."""
from __future__ import annotations

import fnmatch
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from mpitest.core import TestCase, TestContext
from mpitest.core.models import TestBody


class TestRegistry:
    """Process-local ordered list of test cases.

    Every process must build an identical registry; nothing here
    communicates. ``current_index`` names the test whose body is running.
    """

    __test__ = False

    def __init__(self) -> None:
        self._cases: List[TestCase] = []
        self.current_index: Optional[int] = None

    def register(self, name: str, body: TestBody, sizes: Iterable[int]) -> TestBody:
        for size in sizes:
            self._cases.append(TestCase(body=body, size=int(size), name=name))
        return body

    def largest_size(self) -> int:
        return max((case.size for case in self._cases), default=0)

    def filtered(self, patterns: Sequence[str]) -> "TestRegistry":
        selected = TestRegistry()
        for case in self._cases:
            if not patterns or any(fnmatch.fnmatchcase(case.name, pattern) for pattern in patterns):
                selected._cases.append(case)
        return selected

    def activate(self, index: int, comm) -> TestContext:
        if self.current_index is not None:
            raise RuntimeError(
                f"cannot start '{self._cases[index].name}' while '{self.current().name}' is running"
            )
        case = self._cases[index]
        case.reset()
        self.current_index = index
        return TestContext(case, comm)

    def deactivate(self, context: TestContext) -> None:
        context.close()
        self.current_index = None

    def current(self) -> TestCase:
        if self.current_index is None:
            raise LookupError("no test is running")
        return self._cases[self.current_index]

    def __getitem__(self, index: int) -> TestCase:
        return self._cases[index]

    def __iter__(self) -> Iterator[TestCase]:
        return iter(self._cases)

    def __len__(self) -> int:
        return len(self._cases)

    def names(self) -> Tuple[str, ...]:
        return tuple(case.name for case in self._cases)


class TestSuite:
    """Collects test declarations for replay into a registry.

    Declarations are kept in the order they were made, so replaying a suite
    gives every process the same test list.
    """

    __test__ = False

    def __init__(self) -> None:
        self._declarations: List[Tuple[str, TestBody, Tuple[int, ...]]] = []

    def add(self, name: str, body: TestBody, sizes: Iterable[int]) -> TestBody:
        self._declarations.append((name, body, tuple(sizes)))
        return body

    def test(self, *sizes: int, name: Optional[str] = None) -> Callable[[TestBody], TestBody]:
        """Decorator declaring ``body`` at each of ``sizes`` (default 1)."""

        def decorator(body: TestBody) -> TestBody:
            return self.add(name or body.__name__, body, sizes or (1,))

        return decorator

    def register(self, registry: TestRegistry) -> None:
        for name, body, sizes in self._declarations:
            registry.register(name, body, sizes)

    def __len__(self) -> int:
        return len(self._declarations)
