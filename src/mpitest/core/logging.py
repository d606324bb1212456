"""Per-rank logging configuration."""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s: %(levelname)5s: rank {rank} %(name)15s- %(message)s"
DATE_FORMAT = "%b %d %I:%M:%S %p"
LEVEL_ENV = "MPITEST_LOG_LEVEL"


def configure_logging(rank: int, *, verbose: bool = False, level: Optional[str] = None) -> int:
    """Send log records to stderr, tagged with ``rank``.

    Rank 0 logs at INFO and every other rank at WARNING unless ``verbose``
    is set (DEBUG everywhere). ``level`` or ``$MPITEST_LOG_LEVEL`` override
    both. Returns the level in effect; an unknown level name raises
    ``ValueError``.
    """

    override = level or os.environ.get(LEVEL_ENV)
    if override:
        log_level = logging.getLevelName(override.upper())
        if not isinstance(log_level, int):
            raise ValueError(f"unknown log level {override!r}, expected a name such as DEBUG or WARNING")
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO if rank == 0 else logging.WARNING

    logging.basicConfig(
        stream=sys.stderr,
        level=log_level,
        format=LOG_FORMAT.format(rank=rank),
        datefmt=DATE_FORMAT,
        force=True,
    )
    logging.getLogger("mpitest").setLevel(log_level)
    return log_level
