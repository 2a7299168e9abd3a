# ============================================================================
# FEED LOCK REGISTRY
# ============================================================================
# STATUS: Service - per-feed mutual exclusion
# PURPOSE: One exclusive lock per feed with a fixed global acquisition order
# EXPORTS: FeedLockRegistry
# DEPENDENCIES: threading, contextlib
# ============================================================================
"""
Feed Lock Registry.

Every load-merge-save cycle holds its feed's lock. A reconciliation on the
current feed may call into the archive feed while still holding the current
lock, so locks are ranked by their position in FEED_NAMES and must be taken
in strictly increasing rank. Taking them out of order raises
LockOrderViolationError before blocking.

Locking is process-local.

Usage:
    locks = FeedLockRegistry(["current", "archive"])
    with locks.acquire("current"):
        with locks.acquire("archive"):   # ok
            ...
    with locks.acquire("archive"):
        with locks.acquire("current"):   # LockOrderViolationError
            ...
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Sequence

from exceptions import ConfigurationError, LockOrderViolationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FeedLockRegistry")


class FeedLockRegistry:
    """
    Ranked, per-feed threading.Lock instances.
    """

    def __init__(self, feed_names: Sequence[str]):
        names = [name.lower() for name in feed_names]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Duplicate feed names in lock order: {names}")
        self._order: List[str] = names
        self._ranks: Dict[str, int] = {name: rank for rank, name in enumerate(names)}
        self._locks: Dict[str, threading.Lock] = {name: threading.Lock() for name in names}
        self._held = threading.local()

    @property
    def order(self) -> List[str]:
        return list(self._order)

    def rank(self, feed_name: str) -> int:
        try:
            return self._ranks[feed_name.lower()]
        except KeyError:
            raise ConfigurationError(
                f"Feed '{feed_name}' has no lock; configured feeds: {self._order}"
            )

    def held(self) -> List[str]:
        """Feeds whose locks the calling thread holds, outermost first."""
        return [self._order[rank] for rank in self._held_stack()]

    def _held_stack(self) -> List[int]:
        stack = getattr(self._held, "stack", None)
        if stack is None:
            stack = []
            self._held.stack = stack
        return stack

    @contextmanager
    def acquire(self, feed_name: str) -> Iterator[None]:
        """
        Hold `feed_name`'s lock for the duration of the block.

        Raises:
            LockOrderViolationError: The calling thread already holds a lock
                of equal or higher rank
            ConfigurationError: Unknown feed
        """
        rank = self.rank(feed_name)
        stack = self._held_stack()
        if stack and rank <= max(stack):
            raise LockOrderViolationError(
                f"Cannot acquire feed lock '{feed_name}' (rank {rank}) while holding "
                f"{self.held()}; lock order is {self._order}"
            )

        lock = self._locks[self._order[rank]]
        lock.acquire()
        stack.append(rank)
        logger.debug(f"Acquired feed lock '{feed_name}' (held: {self.held()})")
        try:
            yield
        finally:
            stack.pop()
            lock.release()
            logger.debug(f"Released feed lock '{feed_name}'")
