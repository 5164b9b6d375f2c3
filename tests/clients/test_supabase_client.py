from datetime import date
import pytest
from unittest.mock import AsyncMock, MagicMock

from clients.supabase_client import FetchError, SupabaseClient, normalize_profile


def make_client():
    client = SupabaseClient("https://example.supabase.co", "anon-key", correlations_rpc="corr_rpc")
    client._client = MagicMock()
    return client, client._client


def response(data=None, count=None):
    return MagicMock(data=data, count=count)


def test_requires_url_and_key():
    with pytest.raises(AssertionError):
        SupabaseClient("", "")


@pytest.mark.asyncio
async def test_fetch_problems_filters_and_orders():
    client, raw = make_client()
    query = raw.table.return_value.select.return_value.eq.return_value.order.return_value
    query.execute = AsyncMock(return_value=response([{"id": "p1"}]))

    assert await client.fetch_problems() == [{"id": "p1"}]
    raw.table.assert_called_with("problems")
    raw.table.return_value.select.assert_called_with("*")
    raw.table.return_value.select.return_value.eq.assert_called_with("is_flagged", False)
    raw.table.return_value.select.return_value.eq.return_value.order.assert_called_with(
        "created_at", desc=True
    )


@pytest.mark.asyncio
async def test_fetch_nearby_problems_calls_rpc():
    client, raw = make_client()
    raw.rpc.return_value.execute = AsyncMock(return_value=response(None))
    assert await client.fetch_nearby_problems(12.9, 77.6) == []
    raw.rpc.assert_called_with("nearby_problems", {"lat": 12.9, "lng": 77.6})


@pytest.mark.asyncio
async def test_count_rows_scoped_to_user():
    client, raw = make_client()
    select = raw.table.return_value.select
    select.return_value.eq.return_value.execute = AsyncMock(return_value=response(count=4))
    assert await client.count_rows("comments", "u1") == 4
    select.assert_called_with("id", count="exact", head=True)
    select.return_value.eq.assert_called_with("user_id", "u1")


@pytest.mark.asyncio
async def test_problem_count_defaults_to_zero():
    client, raw = make_client()
    raw.table.return_value.select.return_value.execute = AsyncMock(return_value=response(count=None))
    assert await client.fetch_problem_count() == 0


@pytest.mark.asyncio
async def test_backend_error_raised_as_fetch_error():
    client, raw = make_client()
    error = Exception("boom")
    error.message = "permission denied for table votes"
    raw.table.return_value.select.return_value.execute = AsyncMock(side_effect=error)
    with pytest.raises(FetchError) as exc_info:
        await client.fetch_vote_totals()
    assert exc_info.value.message == "permission denied for table votes"


@pytest.mark.asyncio
async def test_fetch_correlations_maps_filters():
    client, raw = make_client()
    raw.rpc.return_value.execute = AsyncMock(return_value=response([{"category_a": "roads"}]))
    filters = {
        "date_range": {"from": date(2024, 1, 1), "to": date(2024, 3, 31)},
        "categories": ["roads", "water"],
        "city": "Pune",
    }
    assert await client.fetch_correlations(filters) == [{"category_a": "roads"}]
    raw.rpc.assert_called_with(
        "corr_rpc",
        {
            "date_from": "2024-01-01",
            "date_to": "2024-03-31",
            "categories": ["roads", "water"],
            "city": "Pune",
        },
    )


@pytest.mark.asyncio
async def test_subscribe_and_unsubscribe():
    client, raw = make_client()
    channel = MagicMock(topic="realtime:problems-feed")
    channel.subscribe = AsyncMock()
    raw.channel.return_value = channel
    raw.remove_channel = AsyncMock()
    callback = MagicMock()

    assert await client.subscribe("problems-feed", "problems", callback) is channel
    raw.channel.assert_called_with("problems-feed")
    channel.on_postgres_changes.assert_called_with(
        "*", schema="public", table="problems", callback=callback
    )
    channel.subscribe.assert_awaited_once()

    await client.unsubscribe(channel)
    raw.remove_channel.assert_awaited_once_with(channel)


@pytest.mark.asyncio
async def test_get_session_without_session():
    client, raw = make_client()
    raw.auth.get_session = AsyncMock(return_value=None)
    assert await client.get_session() is None


@pytest.mark.asyncio
async def test_sign_in_builds_session_context():
    client, raw = make_client()
    session = MagicMock(access_token="jwt")
    session.user.id = "u1"
    session.user.email = "citizen@example.com"
    raw.auth.sign_in_with_password = AsyncMock(return_value=MagicMock(session=session))
    single = raw.table.return_value.select.return_value.eq.return_value.single.return_value
    single.execute = AsyncMock(
        return_value=response({"id": "u1", "full_name": "Asha", "points": 12, "badges": ["Community Voter"]})
    )

    ctx = await client.sign_in("citizen@example.com", "secret")
    assert ctx.user_id == "u1"
    assert ctx.access_token == "jwt"
    assert ctx.profile.full_name == "Asha"
    assert ctx.profile.badges == ["Community Voter"]


@pytest.mark.asyncio
async def test_sign_in_keeps_session_when_profile_lookup_fails():
    client, raw = make_client()
    session = MagicMock(access_token="jwt")
    session.user.id = "u1"
    session.user.email = None
    raw.auth.get_session = AsyncMock(return_value=session)
    single = raw.table.return_value.select.return_value.eq.return_value.single.return_value
    single.execute = AsyncMock(side_effect=Exception("no rows"))

    ctx = await client.get_session()
    assert ctx.user_id == "u1"
    assert ctx.profile is None


@pytest.mark.asyncio
async def test_sign_in_failure_raises_fetch_error():
    client, raw = make_client()
    raw.auth.sign_in_with_password = AsyncMock(side_effect=Exception("Invalid login credentials"))
    with pytest.raises(FetchError, match="Invalid login credentials"):
        await client.sign_in("a@b.c", "wrong")


def test_normalize_profile_fallbacks():
    profile = normalize_profile({"user_id": "u9", "username": "ravi", "badges": "oops"})
    assert profile.id == "u9"
    assert profile.full_name == "ravi"
    assert profile.points == 0
    assert profile.badges == []
    assert normalize_profile({"id": "u1"}).full_name == "Citizen"
