import logging
from typing import Dict, List, Optional

from cache.query_cache import QueryCache, ViewScope
from clients.supabase_client import FetchError, SupabaseClient
from models.models import Problem, RawRow, SessionContext, VoteType
from utils.constants import TRENDING_LIMIT, FeedView, QueryKeys
from utils.feed_utils import assemble_view
from utils.vote_utils import build_user_votes, build_vote_totals

logger = logging.getLogger(__name__)


class DashboardQueries:
    """Named, scoped reads over the shared query cache."""

    def __init__(
        self,
        cache: QueryCache,
        supabase_client: SupabaseClient,
        vote_totals_stale_seconds: float = 15,
        user_votes_stale_seconds: float = 30,
        trending_limit: int = TRENDING_LIMIT,
    ):
        self.cache = cache
        self.supabase_client = supabase_client
        self.vote_totals_stale_seconds = vote_totals_stale_seconds
        self.user_votes_stale_seconds = user_votes_stale_seconds
        self.trending_limit = trending_limit

    async def problems(self, scope: ViewScope) -> List[RawRow]:
        return await self.cache.read(
            (QueryKeys.PROBLEMS.value,), self.supabase_client.fetch_problems, scope
        )

    async def nearby_problems(
        self, scope: ViewScope, latitude: float, longitude: float
    ) -> List[RawRow]:
        return await self.cache.read(
            (QueryKeys.NEARBY_PROBLEMS.value, latitude, longitude),
            lambda: self.supabase_client.fetch_nearby_problems(latitude, longitude),
            scope,
        )

    async def problem_count(self, scope: ViewScope) -> int:
        return await self.cache.read(
            (QueryKeys.PROBLEM_COUNT.value,),
            self.supabase_client.fetch_problem_count,
            scope,
        )

    async def vote_totals(self, scope: ViewScope) -> Dict[str, int]:
        async def fetch():
            return build_vote_totals(await self.supabase_client.fetch_vote_totals())

        return await self.cache.read(
            (QueryKeys.VOTE_TOTALS.value,),
            fetch,
            scope,
            stale_after=self.vote_totals_stale_seconds,
        )

    async def user_votes(
        self, scope: ViewScope, session: Optional[SessionContext]
    ) -> Dict[str, VoteType]:
        if session is None:
            return {}
        user_id = session.user_id

        async def fetch():
            return build_user_votes(await self.supabase_client.fetch_user_votes(user_id))

        return await self.cache.read(
            (QueryKeys.USER_VOTES.value, user_id),
            fetch,
            scope,
            stale_after=self.user_votes_stale_seconds,
        )

    async def _soft(self, coro, key, default):
        # secondary sources degrade to the last cached value
        try:
            return await coro
        except FetchError as e:
            logger.warning("Using cached %s after fetch failure: %s", key[0], e.message)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Using cached %s after malformed response: %s", key[0], e)
        return self.cache.peek(key, default)

    async def feed(
        self,
        view: FeedView,
        scope: ViewScope,
        session: Optional[SessionContext] = None,
        position: Optional[Dict[str, float]] = None,
    ) -> List[Problem]:
        """Assemble one feed view. Failures of the row source propagate."""
        if view is FeedView.NEARBY:
            if not position:
                return []
            rows = await self.nearby_problems(
                scope, position["latitude"], position["longitude"]
            )
        else:
            rows = await self.problems(scope)

        totals = await self._soft(
            self.vote_totals(scope), (QueryKeys.VOTE_TOTALS.value,), {}
        )
        votes = {}
        if session is not None:
            votes = await self._soft(
                self.user_votes(scope, session),
                (QueryKeys.USER_VOTES.value, session.user_id),
                {},
            )
        return assemble_view(view, rows, totals, votes, self.trending_limit)
