"""Reporting exports."""
from .base import ReportManager, Reporter
from .log import LogReporter
from .terminal import TerminalReporter

__all__ = [
    "ReportManager",
    "Reporter",
    "LogReporter",
    "TerminalReporter",
]
