"""Reentrancy guard for the engine's mutating entry points."""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import ReentrantCallRejected

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Admit one mutating call at a time; reject any other immediately.

    A nested attempt (a collaborator calling back into the engine) and a
    concurrent attempt from another thread are both refused rather than
    queued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entry_point: str | None = None

    @property
    def active(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def enter(self, entry_point: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            logger.warning(
                "Rejected %s while %s is in progress", entry_point, self._entry_point
            )
            raise ReentrantCallRejected(
                f"{entry_point} called while {self._entry_point} is in progress"
            )
        self._entry_point = entry_point
        try:
            yield
        finally:
            self._entry_point = None
            self._lock.release()
