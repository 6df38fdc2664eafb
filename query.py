import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from api import ApiError

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


def _freeze(part: Any) -> Any:
    # Parameter dicts become part of a key, so they must be hashable and order-independent
    if isinstance(part, dict):
        return tuple(sorted(((k, _freeze(v)) for k, v in part.items()), key=lambda item: item[0]))
    if isinstance(part, (list, tuple)):
        return tuple(_freeze(p) for p in part)
    return part


def make_key(key) -> tuple:
    if isinstance(key, (list, tuple)):
        return tuple(_freeze(part) for part in key)
    return (_freeze(key),)


def key_matches(key: tuple, prefix: tuple) -> bool:
    return key[:len(prefix)] == prefix


@dataclass
class QueryEntry:
    data: Any
    updated_at: float
    invalidated: bool = False


class QueryClient:
    """Per-session cache of read results, keyed by tuples.

    An entry is served from cache until it is older than `stale_time` or a
    mutation invalidates it. Invalidation matches on key prefixes, so
    invalidating ("user-bookings",) marks ("user-bookings", "PENDING") too.
    """

    def __init__(self, stale_time: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[tuple, QueryEntry] = {}

    def _is_fresh(self, entry: QueryEntry) -> bool:
        if entry.invalidated:
            return False
        return self._clock() - entry.updated_at < self.stale_time

    async def fetch_query(self, key, fn: Callable[[], Awaitable[Any]], retry: int = 0, enabled: bool = True) -> Any:
        if not enabled:
            return None

        key = make_key(key)
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            logger.debug("Cache hit %s", key)
            return entry.data

        attempt = 0
        while True:
            try:
                data = await fn()
                break
            except ApiError as e:
                if attempt >= retry:
                    raise
                attempt += 1
                logger.info("Retrying %s after error: %s (attempt %d of %d)", key, e.message, attempt, retry)

        self._entries[key] = QueryEntry(data=data, updated_at=self._clock())
        return data

    def invalidate(self, *prefixes) -> int:
        count = 0
        for prefix in prefixes:
            prefix = make_key(prefix)
            for key, entry in self._entries.items():
                if key_matches(key, prefix) and not entry.invalidated:
                    entry.invalidated = True
                    count += 1
            logger.debug("Invalidated %s", prefix)
        return count

    def get_query_data(self, key) -> Any:
        entry = self._entries.get(make_key(key))
        return entry.data if entry else None

    def set_query_data(self, key, data: Any):
        self._entries[make_key(key)] = QueryEntry(data=data, updated_at=self._clock())

    def is_invalidated(self, key) -> bool:
        entry = self._entries.get(make_key(key))
        return entry is not None and entry.invalidated

    def clear(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)


class SessionRegistry:
    """Per-session objects keyed by bearer token, least recently used evicted past `max_sessions`."""

    def __init__(self, factory: Callable[[], Any], max_sessions: int = 1000):
        self.factory = factory
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, Any] = OrderedDict()

    def get(self, session: Optional[str]) -> Any:
        session = session or ANONYMOUS
        if session in self._sessions:
            self._sessions.move_to_end(session)
            return self._sessions[session]

        value = self._sessions[session] = self.factory()
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Evicted session %s", evicted[:8])
        return value

    def drop(self, session: Optional[str]):
        self._sessions.pop(session or ANONYMOUS, None)

    def clear(self):
        self._sessions.clear()

    def __len__(self):
        return len(self._sessions)


class QueryClientRegistry(SessionRegistry):
    """One QueryClient per caller session, so cached user data is never shared."""

    def __init__(self, stale_time: float = 60.0, max_sessions: int = 1000):
        super().__init__(lambda: QueryClient(stale_time=stale_time), max_sessions)
        self.stale_time = stale_time
