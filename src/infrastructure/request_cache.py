"""Single-flight memoization of fetcher calls."""

import asyncio
import hashlib
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class RequestCache:
    """
    Map of call keys to in-flight or resolved futures.

    Concurrent callers with the same key share one future, so the producer
    runs once per key. Entries live as long as the cache object; a sync run
    builds one cache and drops it when done.
    """

    def __init__(self):
        self._entries: Dict[str, "asyncio.Future[Any]"] = {}

    @staticmethod
    def make_key(namespace: str, *parts: Any, token: Optional[str] = None) -> str:
        """Build a key that separates results fetched under different credentials."""
        if token:
            credential = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        else:
            credential = "anonymous"
        return "::".join([namespace, *(str(part) for part in parts), credential])

    def get_or_create(self, key: str, producer: Callable[[], Awaitable[Any]]) -> "asyncio.Future[Any]":
        """Return the future for ``key``, starting ``producer()`` only on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for {key}")
            entry = asyncio.ensure_future(producer())
            self._entries[key] = entry
        else:
            logger.debug(f"Cache hit for {key}")
        return entry

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
