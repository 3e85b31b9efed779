"""State managers for handling application-wide mutable state.

The buffer pool is the one structure shared by every in-flight request.
Rendering is synchronous and FastAPI runs sync handlers in a threadpool, so
access is guarded by a threading.Lock. Lifecycle hooks stay async so they can
be awaited from the application lifespan.
"""

import io
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_POOL_CAPACITY = 64


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide thread-safe access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class BufferPool(StateManager):
    """Bounded pool of reusable byte buffers for template execution.

    Buffers are checked out before a template runs and returned once their
    contents have been copied into the response. Buffers released into a full
    pool are discarded.
    """

    def __init__(self, capacity: int = DEFAULT_POOL_CAPACITY):
        """Initialize the buffer pool.

        Args:
            capacity: Maximum number of idle buffers kept for reuse
        """
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._free: list[io.BytesIO] = []
        self._lock = threading.Lock()

    async def initialize(self) -> None:
        """Initialize the buffer pool."""
        # Buffers are allocated lazily
        pass

    async def cleanup(self) -> None:
        """Drop all idle buffers."""
        with self._lock:
            self._free.clear()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """Number of idle buffers currently held."""
        with self._lock:
            return len(self._free)

    def acquire(self) -> io.BytesIO:
        """Take an empty buffer from the pool, allocating one if none is idle.

        Returns:
            A buffer positioned at offset 0 with no content
        """
        with self._lock:
            if self._free:
                return self._free.pop()
        return io.BytesIO()

    def release(self, buf: io.BytesIO) -> None:
        """Return a buffer to the pool.

        The buffer is cleared before it is stored. If the pool is already at
        capacity the buffer is dropped.

        Args:
            buf: Buffer previously obtained from acquire()
        """
        buf.seek(0)
        buf.truncate()
        with self._lock:
            if len(self._free) < self._capacity:
                self._free.append(buf)

    @contextmanager
    def borrow(self) -> Iterator[io.BytesIO]:
        """Check out a buffer for the duration of a with-block.

        The buffer goes back to the pool even when the block raises.
        """
        buf = self.acquire()
        try:
            yield buf
        finally:
            self.release(buf)
