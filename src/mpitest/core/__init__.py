"""Core models and helpers exposed at the package level."""
from .comparator import Comparison, near_equal_float, near_equal_float32, near_equal_float64
from .context import AssertionAbort, TestContext
from .models import AssertionSite, FailureRecord, TestCase

__all__ = [
    "AssertionAbort",
    "AssertionSite",
    "Comparison",
    "FailureRecord",
    "TestCase",
    "TestContext",
    "near_equal_float",
    "near_equal_float32",
    "near_equal_float64",
]
