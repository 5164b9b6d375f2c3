import pytest
from unittest.mock import AsyncMock, MagicMock

from cache.dashboard_queries import DashboardQueries
from cache.query_cache import QueryCache, ViewScope
from clients.supabase_client import FetchError
from models.models import SessionContext, VoteType
from utils.constants import FeedView

ROWS = [
    {"id": "p1", "title": "Pothole", "votes_count": 1, "location": "POINT(77.6 12.9)"},
    {"id": "p2", "title": "Broken light", "votes_count": 4},
]


def fake_supabase():
    client = MagicMock()
    client.fetch_problems = AsyncMock(return_value=ROWS)
    client.fetch_nearby_problems = AsyncMock(return_value=ROWS[:1])
    client.fetch_problem_count = AsyncMock(return_value=2)
    client.fetch_vote_totals = AsyncMock(
        return_value=[{"problem_id": "p1", "net_votes": 7}]
    )
    client.fetch_user_votes = AsyncMock(
        return_value=[{"votable_id": "p2", "vote_type": "upvote"}]
    )
    return client


@pytest.mark.asyncio
async def test_all_feed_merges_every_source():
    queries = DashboardQueries(QueryCache(), fake_supabase())
    feed = await queries.feed(FeedView.ALL, ViewScope(), SessionContext(user_id="u1"))
    assert [p.id for p in feed] == ["p1", "p2"]
    assert feed[0].votes_count == 7
    assert (feed[0].latitude, feed[0].longitude) == (12.9, 77.6)
    assert feed[1].votes_count == 4
    assert feed[1].user_vote is VoteType.UPVOTE


@pytest.mark.asyncio
async def test_trending_feed_sorted_by_merged_votes():
    queries = DashboardQueries(QueryCache(), fake_supabase(), trending_limit=1)
    feed = await queries.feed(FeedView.TRENDING, ViewScope())
    assert [p.id for p in feed] == ["p1"]


@pytest.mark.asyncio
async def test_nearby_feed_uses_position_scope():
    client = fake_supabase()
    cache = QueryCache()
    queries = DashboardQueries(cache, client)
    feed = await queries.feed(
        FeedView.NEARBY, ViewScope(), None, {"latitude": 12.9, "longitude": 77.6}
    )
    client.fetch_nearby_problems.assert_awaited_once_with(12.9, 77.6)
    assert [p.id for p in feed] == ["p1"]
    assert cache.entry(("nearbyProblems", 12.9, 77.6)) is not None
    assert await queries.feed(FeedView.NEARBY, ViewScope(), None, None) == []


@pytest.mark.asyncio
async def test_anonymous_viewer_skips_user_votes():
    client = fake_supabase()
    queries = DashboardQueries(QueryCache(), client)
    feed = await queries.feed(FeedView.ALL, ViewScope(), None)
    client.fetch_user_votes.assert_not_awaited()
    assert all(p.user_vote is None for p in feed)


@pytest.mark.asyncio
async def test_vote_totals_failure_degrades_to_cached_value():
    client = fake_supabase()
    cache = QueryCache()
    queries = DashboardQueries(cache, client)
    scope = ViewScope()
    await queries.feed(FeedView.ALL, scope)

    cache.invalidate(("problemVoteTotals",))
    client.fetch_vote_totals.side_effect = FetchError("timeout")
    feed = await queries.feed(FeedView.ALL, scope)
    assert feed[0].votes_count == 7


@pytest.mark.asyncio
async def test_vote_totals_failure_without_cache_uses_row_counts():
    client = fake_supabase()
    client.fetch_vote_totals.side_effect = FetchError("timeout")
    queries = DashboardQueries(QueryCache(), client)
    feed = await queries.feed(FeedView.ALL, ViewScope())
    assert [p.votes_count for p in feed] == [1, 4]


@pytest.mark.asyncio
async def test_row_source_failure_propagates():
    client = fake_supabase()
    client.fetch_problems.side_effect = FetchError("relation does not exist")
    queries = DashboardQueries(QueryCache(), client)
    with pytest.raises(FetchError, match="relation does not exist"):
        await queries.feed(FeedView.ALL, ViewScope())


@pytest.mark.asyncio
async def test_reads_are_cached_until_invalidated():
    client = fake_supabase()
    cache = QueryCache()
    queries = DashboardQueries(cache, client)
    scope = ViewScope()
    assert await queries.problem_count(scope) == 2
    assert await queries.problem_count(scope) == 2
    client.fetch_problem_count.assert_awaited_once()
    cache.invalidate(("problemCount",))
    await queries.problem_count(scope)
    assert client.fetch_problem_count.await_count == 2


@pytest.mark.asyncio
async def test_malformed_vote_total_keeps_row_count():
    client = fake_supabase()
    client.fetch_problems.return_value = [{"id": "a", "votes_count": 3}]
    client.fetch_vote_totals.return_value = [{"problem_id": "a", "net_votes": "2.5"}]
    queries = DashboardQueries(QueryCache(), client)
    feed = await queries.feed(FeedView.ALL, ViewScope())
    assert [p.votes_count for p in feed] == [3]


@pytest.mark.asyncio
async def test_unreadable_vote_totals_payload_degrades():
    client = fake_supabase()
    client.fetch_vote_totals.return_value = 42
    queries = DashboardQueries(QueryCache(), client)
    feed = await queries.feed(FeedView.ALL, ViewScope())
    assert [p.votes_count for p in feed] == [1, 4]
