"""Equality and IEEE-754 aware near-equality checks used by assertions.

Floating-point comparison follows the usual two-regime scheme: values that
straddle zero or are both tiny are compared with an absolute tolerance, all
other values by the number of representable floats between them (ULPs).
See "Comparing Floating Point Numbers, 2012 Edition" (Random ASCII).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np


@dataclass(frozen=True)
class Comparison:
    """Outcome of a single check."""

    passed: bool
    reason: str = ""


@dataclass(frozen=True)
class FloatFormat:
    """A floating type paired with the unsigned type of the same width."""

    float_type: type
    uint_type: type

    @property
    def epsilon(self) -> float:
        return float(np.finfo(self.float_type).eps)

    @property
    def digits(self) -> int:
        return int(np.finfo(self.float_type).precision) + 1


FLOAT_FORMATS: Dict[int, FloatFormat] = {
    32: FloatFormat(np.float32, np.uint32),
    64: FloatFormat(np.float64, np.uint64),
}

_PASSED = Comparison(passed=True)


def truthy(value: Any) -> Comparison:
    if value:
        return _PASSED
    return Comparison(passed=False, reason=f"{value} is falsy")


def equal(a: Any, b: Any) -> Comparison:
    if bool(a == b):
        return _PASSED
    return Comparison(passed=False, reason=f"{a} does not equal {b}")


def ulp_distance(a: float, b: float, *, width: int = 64) -> int:
    """Distance between the raw bit patterns of ``a`` and ``b``."""

    fmt = _format(width)
    bits = np.array([a, b], dtype=fmt.float_type).view(fmt.uint_type)
    return abs(int(bits[0]) - int(bits[1]))


def near_equal_float(
    a: float,
    b: float,
    ulp_tol: int,
    abs_tol: Optional[float] = None,
    *,
    width: int = 64,
) -> Comparison:
    fmt = _format(width)
    if ulp_tol < 0:
        raise ValueError(f"ULP tolerance must be non-negative, got {ulp_tol}")
    fa = fmt.float_type(a)
    fb = fmt.float_type(b)
    tol = fmt.float_type(fmt.epsilon if abs_tol is None else abs_tol)

    problems = _non_finite(fa, "first") + _non_finite(fb, "second")
    if problems:
        return Comparison(passed=False, reason=" ".join(problems))

    text_a = _fmt(fa, fmt.digits)
    text_b = _fmt(fb, fmt.digits)

    if np.signbit(fa) != np.signbit(fb) or (abs(fa) < tol and abs(fb) < tol):
        with np.errstate(over="ignore"):
            diff = abs(fa - fb)
        if diff <= tol:
            return _PASSED
        return Comparison(
            passed=False,
            reason=(
                f"absolute difference between {text_a} and {text_b} "
                f"({_fmt(diff, fmt.digits)}) is outside the requested tolerance {float(tol)}"
            ),
        )

    distance = ulp_distance(fa, fb, width=width)
    if distance <= ulp_tol:
        return _PASSED
    return Comparison(
        passed=False,
        reason=(
            f"{text_a} and {text_b} differ by {distance} ULPs, "
            f"the requested tolerance is {ulp_tol} ULPs"
        ),
    )


def near_equal_float32(a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> Comparison:
    return near_equal_float(a, b, ulp_tol, abs_tol, width=32)


def near_equal_float64(a: float, b: float, ulp_tol: int, abs_tol: Optional[float] = None) -> Comparison:
    return near_equal_float(a, b, ulp_tol, abs_tol, width=64)


def _format(width: int) -> FloatFormat:
    try:
        return FLOAT_FORMATS[width]
    except KeyError as exc:
        raise ValueError(f"Unsupported float width {width}; expected one of {sorted(FLOAT_FORMATS)}") from exc


def _non_finite(value: np.floating, position: str) -> list[str]:
    if np.isnan(value):
        return [f"the {position} argument is nan!"]
    if np.isinf(value):
        return [f"the {position} argument is inf!"]
    return []


def _fmt(value: np.floating, digits: int) -> str:
    return f"{float(value):.{digits}g}"
