"""Per-test sub-communicator management."""
from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger("mpitest.scope")

ACTIVE_COLOR = 1
INACTIVE_COLOR = 0


class CommunicatorScope:
    """Splits ``world`` into the lowest ``size`` ranks and everybody else.

    Use as a context manager; the sub-communicator is freed on exit. Every
    rank of ``world`` must enter and leave the scope.
    """

    def __init__(self, world: Any, size: int) -> None:
        self._world = world
        self.size = size
        self.world_rank = world.Get_rank()
        self.active = self.world_rank < size
        self.comm: Optional[Any] = None

    @property
    def is_coordinator(self) -> bool:
        return self.active and self.comm is not None and self.comm.Get_rank() == 0

    def __enter__(self) -> "CommunicatorScope":
        color = ACTIVE_COLOR if self.active else INACTIVE_COLOR
        self.comm = self._world.Split(color, self.world_rank)
        logger.debug(
            "rank %d joined %s sub-group of %d", self.world_rank, "active" if self.active else "idle", self.comm.Get_size()
        )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Free is collective; skip it when a peer may never arrive.
        if exc_type is None and self.comm is not None:
            self.comm.Free()
        self.comm = None
