"""
Fetch bookkeeping for list and detail views.

Results are cached per key (the endpoint URL) and re-requested only when the
key changes or the cache is invalidated. Every request gets a generation
number; a completion whose generation is older than the last one that landed
is discarded, so a superseded response can never overwrite newer data.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .exceptions import AdminConsoleError

logger = logging.getLogger(__name__)

IDLE = 'idle'
LOADING = 'loading'
READY = 'ready'
ERROR = 'error'


@dataclass
class FetchState:
    """Outcome of the latest fetch for one key."""

    status: str = IDLE
    data: Any = None
    error: Optional[str] = None
    generation: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status in (IDLE, LOADING)

    @property
    def is_error(self) -> bool:
        return self.status == ERROR

    @property
    def is_ready(self) -> bool:
        return self.status == READY


class FetchTracker:
    """Per-view fetch cache guarded by a request-generation counter."""

    def __init__(self, name: str = "fetch"):
        self.name = name
        self._cache: Dict[str, FetchState] = {}
        self._generation = 0
        self._landed_generation = 0
        self.current_key: Optional[str] = None

    def begin(self, key: str) -> int:
        """Register a new request for ``key`` and return its generation."""
        self._generation += 1
        previous = self._cache.get(key)
        self._cache[key] = FetchState(
            status=LOADING,
            data=previous.data if previous else None,
            generation=self._generation,
        )
        logger.debug(f"[{self.name}] fetch #{self._generation} started for {key}")
        return self._generation

    def _accept(self, key: str, generation: int) -> bool:
        if generation < self._landed_generation:
            logger.info(
                f"[{self.name}] ignoring superseded fetch #{generation} for {key} "
                f"(#{self._landed_generation} already landed)"
            )
            return False
        self._landed_generation = generation
        self.current_key = key
        return True

    def complete(self, key: str, generation: int, data: Any) -> bool:
        """Store a successful result; returns False when the result was superseded."""
        if not self._accept(key, generation):
            return False
        self._cache[key] = FetchState(status=READY, data=data, generation=generation)
        return True

    def fail(self, key: str, generation: int, error: str) -> bool:
        """Store a failure; returns False when the failure was superseded."""
        if not self._accept(key, generation):
            return False
        self._cache[key] = FetchState(status=ERROR, error=error, generation=generation)
        return True

    def state(self, key: str) -> FetchState:
        return self._cache.get(key, FetchState())

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one cached key, or everything when ``key`` is None."""
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)
        logger.debug(f"[{self.name}] cache invalidated: {key or 'all'}")

    def load(self, key: str, loader: Callable[[], Any], force: bool = False) -> FetchState:
        """
        Return the cached state for ``key``, fetching it first when needed.

        Args:
            key: Cache key, normally the request URL
            loader: Callable performing the request and returning the data
            force: Re-fetch even when a ready result is cached

        Returns:
            FetchState for ``key``
        """
        cached = self._cache.get(key)
        if cached is not None and cached.is_ready and not force:
            self.current_key = key
            return cached

        generation = self.begin(key)
        try:
            data = loader()
        except (AdminConsoleError, ValueError) as e:
            logger.error(f"[{self.name}] fetch #{generation} for {key} failed: {e}")
            self.fail(key, generation, str(e))
        else:
            self.complete(key, generation, data)
        return self.state(key)
