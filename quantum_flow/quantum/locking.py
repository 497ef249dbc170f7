"""
Per-instance locking with a global acquisition order.

Every lockable object draws a key from a single process-wide counter. Code that
needs two instances at once goes through ``ordered_locks`` so that concurrent
cross-instance calls (A.entangle(B) racing B.entangle(A)) always acquire in the
same order.
"""
import itertools
import threading
from contextlib import ExitStack, contextmanager
from typing import Iterator

_lock_keys = itertools.count()


class Lockable:
    """Mixin giving an instance a re-entrant lock and a stable ordering key."""

    def __init__(self):
        self._lock = threading.RLock()
        self._lock_key = next(_lock_keys)

    @property
    def lock_key(self) -> int:
        return self._lock_key


@contextmanager
def ordered_locks(*objs: Lockable) -> Iterator[None]:
    """Hold the locks of all given objects, acquired in ascending key order."""
    unique = {id(o): o for o in objs if o is not None}
    with ExitStack() as stack:
        for obj in sorted(unique.values(), key=lambda o: o.lock_key):
            stack.enter_context(obj._lock)
        yield
