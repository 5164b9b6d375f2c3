import logging
from typing import Any, Callable, Dict, List, Optional
from supabase import AsyncClient, acreate_client
from models.models import CorrelationFilters, Profile, RawRow, SessionContext
from utils.constants import Tables

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A backend query, RPC or auth call failed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def normalize_profile(row: Dict[str, Any]) -> Profile:
    badges = row.get("badges")
    extra = {
        k: v
        for k, v in row.items()
        if k not in ("id", "full_name", "points", "badges")
    }
    return Profile(
        id=str(row.get("id") or row.get("user_id") or ""),
        full_name=row.get("full_name") or row.get("username") or "Citizen",
        points=int(row.get("points") or 0),
        badges=badges if isinstance(badges, list) else [],
        **extra,
    )


class SupabaseClient:
    def __init__(self, url: str, key: str, correlations_rpc: str = "problem_correlations"):
        assert url and key, "Supabase URL/key not found."
        self.url = url
        self.key = key
        self.correlations_rpc = correlations_rpc
        self._client: Optional[AsyncClient] = None

    async def instance(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.url, self.key)
        return self._client

    async def _execute(self, query, what: str):
        try:
            return await query.execute()
        except Exception as e:
            message = _error_message(e)
            logger.error("Supabase %s failed: %s", what, message)
            raise FetchError(message) from e

    async def fetch_problems(self) -> List[RawRow]:
        client = await self.instance()
        query = (
            client.table(Tables.PROBLEMS.value)
            .select("*")
            .eq("is_flagged", False)
            .order("created_at", desc=True)
        )
        resp = await self._execute(query, "fetch_problems")
        return resp.data or []

    async def fetch_nearby_problems(self, latitude: float, longitude: float) -> List[RawRow]:
        client = await self.instance()
        query = client.rpc("nearby_problems", {"lat": latitude, "lng": longitude})
        resp = await self._execute(query, "nearby_problems")
        return resp.data or []

    async def fetch_problem_count(self) -> int:
        return await self.count_rows(Tables.PROBLEMS.value)

    async def count_rows(self, table: str, user_id: Optional[str] = None) -> int:
        client = await self.instance()
        query = client.table(table).select("id", count="exact", head=True)
        if user_id:
            query = query.eq("user_id", user_id)
        resp = await self._execute(query, f"count {table}")
        return resp.count or 0

    async def fetch_user_votes(self, user_id: str) -> List[RawRow]:
        client = await self.instance()
        query = (
            client.table(Tables.VOTES.value)
            .select("votable_id, vote_type")
            .eq("user_id", user_id)
            .eq("votable_type", "problem")
        )
        resp = await self._execute(query, "fetch_user_votes")
        return resp.data or []

    async def fetch_vote_totals(self) -> List[RawRow]:
        client = await self.instance()
        query = client.table(Tables.VOTE_TOTALS.value).select("problem_id, net_votes")
        resp = await self._execute(query, "fetch_vote_totals")
        return resp.data or []

    async def fetch_profile(self, user_id: str) -> Profile:
        client = await self.instance()
        query = client.table(Tables.PROFILES.value).select("*").eq("id", user_id).single()
        resp = await self._execute(query, "fetch_profile")
        return normalize_profile(resp.data or {"id": user_id})

    async def create_problem(self, payload: Dict[str, Any]) -> List[RawRow]:
        client = await self.instance()
        query = client.table(Tables.PROBLEMS.value).insert(payload)
        resp = await self._execute(query, "create_problem")
        return resp.data or []

    async def fetch_correlations(self, filters: CorrelationFilters) -> List[RawRow]:
        client = await self.instance()
        params: Dict[str, Any] = {}
        date_range = filters.get("date_range") or {}
        if date_range.get("from"):
            params["date_from"] = date_range["from"].isoformat()
        if date_range.get("to"):
            params["date_to"] = date_range["to"].isoformat()
        if filters.get("categories"):
            params["categories"] = list(filters["categories"])
        if filters.get("city"):
            params["city"] = filters["city"]
        query = client.rpc(self.correlations_rpc, params)
        resp = await self._execute(query, self.correlations_rpc)
        return resp.data or []

    async def subscribe(self, channel_name: str, table: str, callback: Callable[[Any], None]):
        client = await self.instance()
        channel = client.channel(channel_name)
        channel.on_postgres_changes("*", schema="public", table=table, callback=callback)
        await channel.subscribe()
        logger.info("Subscribed to %s (%s)", channel_name, table)
        return channel

    async def unsubscribe(self, channel) -> None:
        client = await self.instance()
        await client.remove_channel(channel)
        logger.info("Unsubscribed from %s", getattr(channel, "topic", channel))

    async def sign_in(self, email: str, password: str) -> SessionContext:
        client = await self.instance()
        try:
            resp = await client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise FetchError(_error_message(e)) from e
        return await self._session_context(resp.session)

    async def get_session(self) -> Optional[SessionContext]:
        client = await self.instance()
        try:
            session = await client.auth.get_session()
        except Exception as e:
            raise FetchError(_error_message(e)) from e
        if not session:
            return None
        return await self._session_context(session)

    async def _session_context(self, session) -> SessionContext:
        user = session.user
        try:
            profile = await self.fetch_profile(user.id)
        except FetchError:
            logger.warning("Profile lookup failed for %s", user.id)
            profile = None
        return SessionContext(
            user_id=user.id,
            email=getattr(user, "email", None),
            access_token=session.access_token,
            profile=profile,
        )

    async def sign_out(self) -> None:
        client = await self.instance()
        try:
            await client.auth.sign_out()
        except Exception as e:
            raise FetchError(_error_message(e)) from e
