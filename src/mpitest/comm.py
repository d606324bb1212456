"""Access to the message-passing transport.

The harness talks to communicators through the mpi4py ``Comm`` surface only:
``Get_rank``, ``Get_size``, ``Barrier``, ``gather``, ``issend``, ``recv``,
``Split`` and ``Free``.
"""
from __future__ import annotations

from typing import Any, Iterable


def world() -> Any:
    """Return the global communicator (``MPI.COMM_WORLD``)."""

    from mpi4py import MPI

    return MPI.COMM_WORLD


def waitall(requests: Iterable[Any]) -> None:
    """Block until every request in ``requests`` has completed.

    Same effect as ``MPI.Request.waitall`` but only relies on each request
    having a ``wait()`` method, so non-mpi4py communicators work too.
    """

    for request in requests:
        request.wait()
