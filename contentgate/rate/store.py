# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Counter stores for fixed-window rate limiting.

A store keeps one counter per (principal id, window index). The only
operation that may race is ``increment_if_below``, which every store must
perform as a single atomic check-and-increment: a request either observes
a count below the limit and increments it, or is refused and leaves the
counter untouched.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateWindow:
    """Request count of one principal in one fixed window."""
    principal_id: str
    window_index: int
    window_start: float
    count: int


class CounterStore(ABC):
    """Abstract base class for rate counter storage"""

    @abstractmethod
    async def get(self, principal_id: str, window_index: int) -> int:
        """Current count for a principal's window (0 if absent)"""
        pass

    @abstractmethod
    async def increment_if_below(self, principal_id: str, window_index: int,
                                 limit: int, ttl: Optional[int] = None) -> Tuple[bool, int]:
        """
        Atomically increment the counter if it is below ``limit``.

        Returns:
            (admitted, count) where ``count`` is the value after the call;
            on refusal the counter is unchanged.
        """
        pass

    @abstractmethod
    async def purge(self, before_window_index: int) -> int:
        """Drop windows older than ``before_window_index``; returns how many"""
        pass

    async def close(self) -> None:
        """Close the store and release resources"""
        pass


class MemoryCounterStore(CounterStore):
    """In-process counter store guarded by a re-entrant lock"""

    def __init__(self):
        self._counts: Dict[Tuple[str, int], int] = {}
        self._lock = threading.RLock()

    async def get(self, principal_id: str, window_index: int) -> int:
        with self._lock:
            return self._counts.get((principal_id, window_index), 0)

    async def increment_if_below(self, principal_id: str, window_index: int,
                                 limit: int, ttl: Optional[int] = None) -> Tuple[bool, int]:
        key = (principal_id, window_index)
        with self._lock:
            current = self._counts.get(key, 0)
            if current >= limit:
                return False, current
            self._counts[key] = current + 1
            return True, current + 1

    async def purge(self, before_window_index: int) -> int:
        with self._lock:
            stale = [key for key in self._counts if key[1] < before_window_index]
            for key in stale:
                del self._counts[key]

        if stale:
            logger.debug(f"Purged {len(stale)} stale rate windows")
        return len(stale)

    def snapshot(self) -> List[Tuple[str, int, int]]:
        """(principal id, window index, count) for every live counter"""
        with self._lock:
            return [(pid, index, count) for (pid, index), count in self._counts.items()]
