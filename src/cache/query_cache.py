import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional, Set, Tuple

from clients.supabase_client import FetchError

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]
Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class QueryCacheEntry:
    key: QueryKey
    data: Any = None
    error: Optional[FetchError] = None
    fetched_at: Optional[float] = None
    stale: bool = True
    generation: int = 0
    has_data: bool = False


def matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == prefix


@dataclass
class _InFlight:
    task: "asyncio.Task[Any]"
    scope: "ViewScope"


class QueryCache:
    """Cached query results shared by every view reading the same key.

    Entries are only ever marked stale by `invalidate` and only replaced by
    the fetch path inside `read`. Refetching happens when a stale, missing or
    expired entry is next read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[QueryKey, QueryCacheEntry] = {}
        self._in_flight: Dict[QueryKey, _InFlight] = {}
        self._clock = clock

    def entry(self, key: QueryKey) -> Optional[QueryCacheEntry]:
        return self._entries.get(key)

    def keys(self) -> List[QueryKey]:
        return list(self._entries)

    def peek(self, key: QueryKey, default: Any = None) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry and entry.has_data else default

    def is_fresh(self, key: QueryKey, stale_after: Optional[float] = None) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.stale or not entry.has_data:
            return False
        if stale_after is not None and entry.fetched_at is not None:
            return self._clock() - entry.fetched_at < stale_after
        return True

    def is_loading(self, key: QueryKey) -> bool:
        return key in self._in_flight

    def invalidate(self, prefix: QueryKey) -> Set[QueryKey]:
        """Mark every entry whose key starts with `prefix` stale."""
        marked = set()
        for key, entry in self._entries.items():
            if matches(key, prefix):
                entry.stale = True
                entry.generation += 1
                marked.add(key)
        if marked:
            logger.debug("Invalidated %s", sorted(map(str, marked)))
        return marked

    def stale_keys(self) -> Set[QueryKey]:
        return {k for k, e in self._entries.items() if e.stale}

    async def read(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        scope: "ViewScope",
        stale_after: Optional[float] = None,
    ) -> Any:
        if scope.closed:
            raise asyncio.CancelledError()
        while True:
            if self.is_fresh(key, stale_after):
                return self._entries[key].data

            in_flight = self._in_flight.get(key)
            if in_flight is None or in_flight.scope.closed:
                task = asyncio.ensure_future(self._refresh(key, fetcher, scope))
                in_flight = _InFlight(task=task, scope=scope)
                self._in_flight[key] = in_flight
                scope.track(task)
                task.add_done_callback(lambda t, k=key: self._clear_in_flight(k, t))
            try:
                return await asyncio.shield(in_flight.task)
            except asyncio.CancelledError:
                # the view that owned the shared fetch went away; fetch again for ours
                if scope.closed or in_flight.scope is scope or not in_flight.task.cancelled():
                    raise

    def _clear_in_flight(self, key: QueryKey, task: "asyncio.Task[Any]") -> None:
        current = self._in_flight.get(key)
        if current is not None and current.task is task:
            del self._in_flight[key]

    async def _refresh(self, key: QueryKey, fetcher: Fetcher, scope: "ViewScope") -> Any:
        entry = self._entries.setdefault(key, QueryCacheEntry(key=key))
        started_generation = entry.generation
        try:
            data = await fetcher()
        except FetchError as e:
            if scope.closed:
                raise asyncio.CancelledError() from e
            entry.error = e
            raise
        if scope.closed:
            logger.debug("Dropping late response for %s", key)
            raise asyncio.CancelledError()
        entry.data = data
        entry.has_data = True
        entry.error = None
        entry.fetched_at = self._clock()
        # invalidated while the request was out: keep it stale
        entry.stale = entry.generation != started_generation
        return data


class ViewScope:
    """Tracks fetches started on behalf of one view so they die with it."""

    def __init__(self, name: str = "view"):
        self.name = name
        self.closed = False
        self._tasks: Set["asyncio.Task[Any]"] = set()

    def track(self, task: "asyncio.Task[Any]") -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for task in list(self._tasks):
            task.cancel()
        logger.debug("Closed view scope %s", self.name)
