import logging
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Set

from cache.query_cache import QueryCache, QueryKey
from clients.supabase_client import SupabaseClient
from models.models import SessionContext
from utils.constants import Channels, QueryKeys, Tables

logger = logging.getLogger(__name__)


class Stream(Enum):
    PROBLEMS = "problems"
    VOTES = "votes"


PROBLEM_STREAM_KEYS: FrozenSet[QueryKey] = frozenset(
    {
        (QueryKeys.PROBLEMS.value,),
        (QueryKeys.NEARBY_PROBLEMS.value,),
        (QueryKeys.PROBLEM_COUNT.value,),
    }
)
VOTE_STREAM_KEYS: FrozenSet[QueryKey] = PROBLEM_STREAM_KEYS | {
    (QueryKeys.VOTE_TOTALS.value,),
}


def invalidation_set(stream: Stream, viewer_id: Optional[str]) -> FrozenSet[QueryKey]:
    """Cache key prefixes made stale by one change event on `stream`.

    Vote events invalidate everything problem events do plus vote totals.
    """
    keys = set(VOTE_STREAM_KEYS if stream is Stream.VOTES else PROBLEM_STREAM_KEYS)
    if viewer_id:
        keys.add((QueryKeys.USER_VOTES.value, viewer_id))
    return frozenset(keys)


class InvalidationCoordinator:
    """Turns realtime change events into staleness flags on the query cache.

    It never refetches; readers pull fresh data on their next read.
    """

    STREAM_TABLES = {
        Stream.PROBLEMS: (Channels.PROBLEMS.value, Tables.PROBLEMS.value),
        Stream.VOTES: (Channels.VOTES.value, Tables.VOTES.value),
    }

    def __init__(
        self,
        cache: QueryCache,
        supabase_client: SupabaseClient,
        session: Optional[SessionContext] = None,
    ):
        self.cache = cache
        self.supabase_client = supabase_client
        self.session = session
        self._channels: List[Any] = []

    @property
    def viewer_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    @property
    def active(self) -> bool:
        return bool(self._channels)

    def handle(self, stream: Stream, payload: Any = None) -> Set[QueryKey]:
        marked: Set[QueryKey] = set()
        for prefix in invalidation_set(stream, self.viewer_id):
            marked |= self.cache.invalidate(prefix)
        logger.info("%s change: %d cached queries marked stale", stream.value, len(marked))
        return marked

    def on_local_report(self) -> Set[QueryKey]:
        return self.handle(Stream.VOTES)

    async def start(self) -> None:
        if self._channels:
            return
        for stream, (channel_name, table) in self.STREAM_TABLES.items():
            channel = await self.supabase_client.subscribe(
                channel_name, table, lambda payload, s=stream: self.handle(s, payload)
            )
            self._channels.append(channel)

    async def stop(self) -> None:
        channels, self._channels = self._channels, []
        for channel in channels:
            await self.supabase_client.unsubscribe(channel)

    async def __aenter__(self) -> "InvalidationCoordinator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
