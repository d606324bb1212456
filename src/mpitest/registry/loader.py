"""Loading of test suite modules into a registry."""
from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from .registry import TestRegistry, TestSuite


def load_suite(target: str, registry: TestRegistry) -> ModuleType:
    """Import ``target`` (module name or ``.py`` path) and register its tests.

    A module-level ``register(registry)`` hook wins; otherwise a module-level
    ``suite`` (:class:`TestSuite`) is replayed into ``registry``.
    """

    module = _load_module(target)
    hook = getattr(module, "register", None)
    if callable(hook):
        hook(registry)
        return module
    suite = getattr(module, "suite", None)
    if isinstance(suite, TestSuite):
        suite.register(registry)
        return module
    raise LookupError(f"'{target}' defines neither register(registry) nor a TestSuite named 'suite'")


def _load_module(target: str) -> ModuleType:
    if target.endswith(".py") or Path(target).is_file():
        return _load_from_source(Path(target))
    return importlib.import_module(target)


def _load_from_source(source: Path) -> ModuleType:
    path = source.expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Test suite file not found: {path}")
    module_name = f"mpitest_suite_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Unable to load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module
