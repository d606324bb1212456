import math

import numpy as np
import pytest

from mpitest.core.comparator import (
    equal,
    near_equal_float,
    near_equal_float32,
    near_equal_float64,
    truthy,
    ulp_distance,
)


FINITE_SAMPLES = [0.0, -0.0, 1e-300, 1e-8, -1e-8, 0.1, 1.0, -1.0, 1337.0, 3.5e12, -2.0e-5]


def test_truthy_reports_value() -> None:
    assert truthy(1).passed
    assert truthy([0]).passed
    result = truthy(0)
    assert not result.passed
    assert result.reason == "0 is falsy"


@pytest.mark.parametrize("value", [0, 1, -7, 2.5, "abc", True, None])
def test_equal_is_reflexive(value) -> None:
    assert equal(value, value).passed


def test_equal_reports_both_operands() -> None:
    result = equal(2, 3)
    assert not result.passed
    assert result.reason == "2 does not equal 3"
    assert not equal(1, "1").passed


def test_near_equal_passes_within_ulp_tolerance() -> None:
    above = float(np.nextafter(1.0, 2.0))
    assert near_equal_float64(1.0, above, 1).passed
    result = near_equal_float64(1.0, above, 0)
    assert not result.passed
    assert "differ by 1 ULPs, the requested tolerance is 0 ULPs" in result.reason


def test_float32_uses_32_bit_distance() -> None:
    above = float(np.nextafter(np.float32(1.0), np.float32(2.0)))
    assert ulp_distance(1.0, above, width=32) == 1
    assert near_equal_float32(1.0, above, 1).passed
    # 0.1f + 0.0f versus 0.100001f is far outside 10 ULPs
    result = near_equal_float32(0.1, 0.100001, 10)
    assert not result.passed
    assert "ULPs" in result.reason


@pytest.mark.parametrize("a", FINITE_SAMPLES)
def test_near_equal_is_reflexive(a: float) -> None:
    assert near_equal_float64(a, a, 0).passed
    assert near_equal_float32(a, a, 0).passed


@pytest.mark.parametrize("a", FINITE_SAMPLES)
@pytest.mark.parametrize("b", FINITE_SAMPLES)
def test_near_equal_is_symmetric(a: float, b: float) -> None:
    for tol in (0, 4, 1000):
        assert near_equal_float64(a, b, tol).passed == near_equal_float64(b, a, tol).passed
        assert near_equal_float32(a, b, tol).passed == near_equal_float32(b, a, tol).passed


@pytest.mark.parametrize("x", [0.0, 1.0, -3.0, math.inf, math.nan])
def test_nan_poisons_comparison(x: float) -> None:
    result = near_equal_float64(math.nan, x, 10**6)
    assert not result.passed
    assert "the first argument is nan!" in result.reason


def test_non_finite_reason_names_each_operand() -> None:
    result = near_equal_float64(math.inf, math.nan, 10)
    assert result.reason == "the first argument is inf! the second argument is nan!"
    result = near_equal_float32(1.0, -math.inf, 10)
    assert result.reason == "the second argument is inf!"


def test_straddling_zero_uses_absolute_comparison() -> None:
    result = near_equal_float64(-0.000001, 0.000001, 10)
    assert not result.passed
    assert result.reason.startswith("absolute difference between -1e-06 and 1e-06")
    assert "outside the requested tolerance" in result.reason
    assert near_equal_float64(-0.000001, 0.000001, 10, abs_tol=1e-5).passed


def test_signed_zero_counts_as_negative() -> None:
    result = near_equal_float64(-0.0, 1e-6, 10)
    assert not result.passed
    assert "absolute difference" in result.reason
    assert near_equal_float64(-0.0, 0.0, 0).passed


def test_near_zero_absolute_tolerance() -> None:
    assert near_equal_float64(0.0, 1e-8, 10, abs_tol=5e-8).passed
    result = near_equal_float64(0.0, 1e-8, 10, abs_tol=1e-9)
    assert not result.passed
    assert "ULPs" in result.reason


def test_increasing_ulp_tolerance_never_breaks_a_pass() -> None:
    a = 1.0
    b = 1.0 + 40 * float(np.finfo(np.float64).eps)
    distance = ulp_distance(a, b)
    outcomes = [near_equal_float64(a, b, tol).passed for tol in range(0, distance + 5)]
    first_pass = outcomes.index(True)
    assert first_pass == distance
    assert all(outcomes[first_pass:])


def test_default_absolute_tolerance_is_machine_epsilon() -> None:
    eps32 = float(np.finfo(np.float32).eps)
    assert near_equal_float32(0.0, eps32 / 2, 0).passed
    assert not near_equal_float32(0.0, eps32 * 2, 0).passed


def test_invalid_arguments_raise() -> None:
    with pytest.raises(ValueError):
        near_equal_float(1.0, 1.0, -1)
    with pytest.raises(ValueError):
        near_equal_float(1.0, 1.0, 0, width=16)
