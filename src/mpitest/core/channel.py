"""Collects failure records from a test's participants onto its coordinator."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from mpitest.comm import waitall

from .models import FailureRecord

logger = logging.getLogger("mpitest.channel")

FAIL_MESSAGE_SIZE = 1024
COORDINATOR = 0


def encode_message(text: str, size: int = FAIL_MESSAGE_SIZE) -> bytes:
    """Pack ``text`` into exactly ``size`` bytes, truncating if needed."""

    data = text.encode("utf-8")[:size]
    return data.ljust(size, b"\0")


def decode_message(data: bytes) -> str:
    return bytes(data).rstrip(b"\0").decode("utf-8", errors="ignore")


class FailureChannel:
    """Runs the failure aggregation protocol over one test sub-communicator.

    Counts are gathered first so that nothing else is exchanged when every
    participant passed. Otherwise each failure travels as its own fixed-size
    message tagged with its local index, and the coordinator drains them
    rank by rank, tag by tag, so the report order never depends on arrival
    order.
    """

    def __init__(self, comm: Any, *, message_size: int = FAIL_MESSAGE_SIZE) -> None:
        self._comm = comm
        self._message_size = message_size

    @property
    def rank(self) -> int:
        return self._comm.Get_rank()

    def exchange(
        self,
        failures: Sequence[FailureRecord],
        on_message: Callable[[str], None],
    ) -> Optional[int]:
        """Ship ``failures`` to the coordinator.

        Returns the total failure count on the coordinator and ``None`` on
        every other participant. ``on_message`` is only called on the
        coordinator, once per failure, in report order.
        """

        rank = self.rank
        counts = self._comm.gather(len(failures), root=COORDINATOR)
        total: Optional[int] = None
        if rank == COORDINATOR:
            total = sum(counts)
            logger.debug("failure counts by rank: %s", counts)
            if total == 0:
                return 0

        # buffers stay referenced until waitall returns
        buffers: List[bytes] = []
        requests = []
        for tag, record in enumerate(failures):
            message = encode_message(record.render(rank), self._message_size)
            buffers.append(message)
            requests.append(self._comm.issend(message, dest=COORDINATOR, tag=tag))

        if rank == COORDINATOR:
            for source, count in enumerate(counts):
                for tag in range(count):
                    on_message(decode_message(self._comm.recv(source=source, tag=tag)))

        waitall(requests)
        return total
