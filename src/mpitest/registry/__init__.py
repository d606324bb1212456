"""Test registry public API."""
from .loader import load_suite
from .registry import TestRegistry, TestSuite

__all__ = [
    "TestRegistry",
    "TestSuite",
    "load_suite",
]
