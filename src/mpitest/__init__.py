"""mpitest package initialization."""
from __future__ import annotations

import os

from .registry import TestRegistry, TestSuite, load_suite
from .version import __version__

__all__ = [
    "__version__",
    "TestRegistry",
    "TestSuite",
    "bootstrap",
    "load_suite",
]

SUITES_ENV = "MPITEST_SUITES"


def bootstrap(registry: TestRegistry) -> None:
    """Load the suites named in ``$MPITEST_SUITES`` into ``registry``."""

    suite_env = os.environ.get(SUITES_ENV)
    if not suite_env:
        return
    for item in suite_env.split(","):
        target = item.strip()
        if not target:
            continue
        load_suite(target, registry)
