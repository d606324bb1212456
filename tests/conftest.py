import queue
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest


DEFAULT_TIMEOUT = 10.0


class _Group:
    """State shared by every rank of one simulated communicator."""

    def __init__(self, size: int, timeout: float) -> None:
        self.size = size
        self.timeout = timeout
        self.slots: List[Any] = [None] * size
        self.splits: Dict[int, Tuple["_Group", List[int]]] = {}
        self.barrier_calls = 0
        self._barrier = threading.Barrier(size, timeout=timeout)
        self._lock = threading.Lock()
        self._mailboxes: Dict[Tuple[int, int, int], queue.Queue] = {}

    def wait(self) -> None:
        self._barrier.wait()

    def abort(self) -> None:
        self._barrier.abort()

    def mailbox(self, source: int, dest: int, tag: int) -> queue.Queue:
        with self._lock:
            return self._mailboxes.setdefault((source, dest, tag), queue.Queue())


class _Request:
    def __init__(self, event: threading.Event, timeout: float) -> None:
        self._event = event
        self._timeout = timeout

    def wait(self, status: Any = None) -> None:
        if not self._event.wait(self._timeout):
            raise TimeoutError("send was never matched by a receive")


class ThreadComm:
    """In-process stand-in for the parts of ``mpi4py.MPI.Comm`` mpitest uses.

    Each rank is a thread; collectives synchronise on a shared barrier and
    point-to-point messages go through per (source, dest, tag) queues.
    """

    def __init__(self, group: _Group, rank: int, log: Optional[List[Tuple[int, int, int]]] = None) -> None:
        self._group = group
        self._rank = rank
        self.children: List["ThreadComm"] = []
        self.freed = False
        self.send_log = log if log is not None else []

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def size(self) -> int:
        return self._group.size

    def Get_rank(self) -> int:
        return self._rank

    def Get_size(self) -> int:
        return self._group.size

    def Barrier(self) -> None:
        if self._rank == 0:
            self._group.barrier_calls += 1
        self._group.wait()

    def gather(self, sendobj: Any, root: int = 0) -> Optional[List[Any]]:
        group = self._group
        group.slots[self._rank] = sendobj
        group.wait()
        result = list(group.slots) if self._rank == root else None
        group.wait()
        return result

    def bcast(self, obj: Any, root: int = 0) -> Any:
        group = self._group
        if self._rank == root:
            group.slots[root] = obj
        group.wait()
        value = group.slots[root]
        group.wait()
        return value

    def issend(self, obj: Any, dest: int, tag: int = 0) -> _Request:
        event = threading.Event()
        self.send_log.append((self._rank, dest, tag))
        self._group.mailbox(self._rank, dest, tag).put((obj, event))
        return _Request(event, self._group.timeout)

    def recv(self, buf: Any = None, source: int = 0, tag: int = 0, status: Any = None) -> Any:
        obj, event = self._group.mailbox(source, self._rank, tag).get(timeout=self._group.timeout)
        event.set()
        return obj

    def Split(self, color: int = 0, key: int = 0) -> "ThreadComm":
        group = self._group
        group.slots[self._rank] = (color, key, self._rank)
        group.wait()
        if self._rank == 0:
            entries = list(group.slots)
            group.splits = {}
            for value in sorted({entry[0] for entry in entries}):
                members = sorted((entry for entry in entries if entry[0] == value), key=lambda e: (e[1], e[2]))
                group.splits[value] = (_Group(len(members), group.timeout), [entry[2] for entry in members])
        group.wait()
        sub_group, members = group.splits[color]
        group.wait()
        child = ThreadComm(sub_group, members.index(self._rank), self.send_log)
        self.children.append(child)
        return child

    def Free(self) -> None:
        self.freed = True


class SpmdRun:
    """Runs ``target(comm)`` on ``size`` simulated ranks and collects results."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self.comms: List[ThreadComm] = []
        self.sends: List[Tuple[int, int, int]] = []

    def __call__(self, size: int, target: Callable[[ThreadComm], Any]) -> List[Any]:
        group = _Group(size, self.timeout)
        self.sends = []
        self.comms = [ThreadComm(group, rank, self.sends) for rank in range(size)]
        results: List[Any] = [None] * size
        errors: List[BaseException] = []

        def worker(rank: int) -> None:
            try:
                results[rank] = target(self.comms[rank])
            except BaseException as exc:  # noqa: BLE001 - surfaced to the test below
                errors.append(exc)
                group.abort()

        threads = [threading.Thread(target=worker, args=(rank,), daemon=True) for rank in range(size)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(self.timeout * 3)
        if any(thread.is_alive() for thread in threads):
            raise TimeoutError("simulated ranks did not finish (deadlock?)")
        if errors:
            raise errors[0]
        return results


@pytest.fixture
def spmd() -> SpmdRun:
    """Run a callable on several thread-backed ranks."""

    return SpmdRun()


@pytest.fixture
def solo_comm() -> ThreadComm:
    """A single-rank communicator usable without threads."""

    return ThreadComm(_Group(1, DEFAULT_TIMEOUT), 0)
