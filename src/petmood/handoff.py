"""Hand results from worker threads to the owning thread."""

from __future__ import annotations

import logging
import queue
from typing import Any, Callable

logger = logging.getLogger("petmood")


class Mailbox:
    """FIFO of callbacks posted by producers and applied by one consumer.

    Capture and network threads never touch display state themselves; they
    ``post`` and the owning thread calls ``drain`` from its own loop.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[tuple[Callable[..., Any], tuple]]" = queue.Queue()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def drain(self, limit: int | None = None) -> int:
        applied = 0
        while limit is None or applied < limit:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                break
            callback(*args)
            applied += 1
        return applied

    def wait_and_apply(self, timeout: float | None = None) -> bool:
        """Block for one item and apply it. Returns False on timeout."""
        try:
            callback, args = self._queue.get(timeout=timeout)
        except queue.Empty:
            return False
        callback(*args)
        return True

    def __len__(self) -> int:
        return self._queue.qsize()
