"""Per-test assertion context handed to every test body."""
from __future__ import annotations

import ast
import inspect
import linecache
import os
import traceback
from types import FrameType
from typing import Any, List, Optional

from . import comparator
from .comparator import Comparison
from .models import AssertionSite, FailureRecord, TestCase

# longest assertion statement read back from source
MAX_STATEMENT_LINES = 30


class AssertionAbort(BaseException):
    """Raised by hard assertions to end the current test body on this process."""


class TestContext:
    """Records assertion failures against the test that is currently running.

    ``expect_*`` methods record a failure and let the body continue;
    ``assert_*`` methods record a failure and end the body on this process.
    """

    __test__ = False

    def __init__(self, case: TestCase, comm: Any) -> None:
        self._case = case
        self._comm = comm
        self._closed = False

    @property
    def case(self) -> TestCase:
        return self._case

    @property
    def comm(self) -> Any:
        return self._comm

    @property
    def rank(self) -> int:
        return self._comm.Get_rank()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    # soft assertions

    def expect_true(self, value: Any) -> bool:
        return self._check(comparator.truthy(value))

    def expect_eq(self, a: Any, b: Any) -> bool:
        return self._check(comparator.equal(a, b))

    def expect_float_eq(self, a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> bool:
        return self._check(comparator.near_equal_float32(a, b, ulp_tol, abs_tol))

    def expect_double_eq(self, a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> bool:
        return self._check(comparator.near_equal_float64(a, b, ulp_tol, abs_tol))

    # hard assertions

    def assert_true(self, value: Any) -> None:
        self._require(comparator.truthy(value))

    def assert_eq(self, a: Any, b: Any) -> None:
        self._require(comparator.equal(a, b))

    def assert_float_eq(self, a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> None:
        self._require(comparator.near_equal_float32(a, b, ulp_tol, abs_tol))

    def assert_double_eq(self, a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> None:
        self._require(comparator.near_equal_float64(a, b, ulp_tol, abs_tol))

    def record_exception(self, exc: BaseException) -> None:
        """Record an exception that escaped the test body as a failure."""

        site = _exception_site(exc, self._case)
        self._record(site, f"raised {type(exc).__name__}: {exc}")

    def _check(self, result: Comparison) -> bool:
        if result.passed:
            return True
        # the assertion call sits two frames above this one
        self._record(_caller_site(inspect.currentframe(), depth=2), result.reason)
        return False

    def _require(self, result: Comparison) -> None:
        if result.passed:
            return
        self._record(_caller_site(inspect.currentframe(), depth=2), result.reason)
        raise AssertionAbort()

    def _record(self, site: AssertionSite, reason: str) -> None:
        if self._closed:
            raise RuntimeError(
                f"assertion at line {site.line} of {site.file} used after test '{self._case.name}' finished"
            )
        self._case.failures.append(FailureRecord(site=site, reason=reason))


def _caller_site(frame: Optional[FrameType], depth: int) -> AssertionSite:
    for _ in range(depth):
        if frame is None:
            break
        frame = frame.f_back
    if frame is None:
        return AssertionSite(line=0, file="<unknown>", expression="<unknown>")
    info = inspect.getframeinfo(frame, context=1)
    expression = _statement_text(info.filename, info.lineno)
    if expression is None:
        expression = info.code_context[0].strip() if info.code_context else f"{info.function}(...)"
    return AssertionSite(line=info.lineno, file=_display_path(info.filename), expression=expression)


def _exception_site(exc: BaseException, case: TestCase) -> AssertionSite:
    frames = traceback.extract_tb(exc.__traceback__)
    body_file = getattr(getattr(case.body, "__code__", None), "co_filename", None)
    chosen = None
    for summary in frames:
        if body_file is None or summary.filename == body_file:
            chosen = summary
    if chosen is None and frames:
        chosen = frames[-1]
    if chosen is None:
        return AssertionSite(line=0, file="<unknown>", expression=f"{case.name}(...)")
    expression = _statement_text(chosen.filename, chosen.lineno or 0)
    if expression is None:
        expression = (chosen.line or f"{case.name}(...)").strip()
    return AssertionSite(line=chosen.lineno or 0, file=_display_path(chosen.filename), expression=expression)


def _display_path(path: str) -> str:
    try:
        relative = os.path.relpath(path)
    except ValueError:
        return path
    return path if relative.startswith("..") else relative


def _statement_text(filename: str, lineno: int) -> Optional[str]:
    """Source of the statement starting at ``lineno``, folded onto one line.

    Lines are added until they parse as a complete statement, so a call
    spread over several lines is reported whole. Falls back to the first
    line when no complete statement is found (``else:`` and the like).
    """

    linecache.checkcache(filename)
    lines: List[str] = []
    for offset in range(MAX_STATEMENT_LINES):
        line = linecache.getline(filename, lineno + offset)
        if not line:
            break
        lines.append(line.strip())
        try:
            ast.parse("\n".join(lines))
        except (SyntaxError, ValueError):
            continue
        return " ".join(part for part in lines if part)
    return lines[0] if lines else None
