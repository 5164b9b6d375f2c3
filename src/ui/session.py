import logging
import weakref
import streamlit as st
from cache.dashboard_queries import DashboardQueries
from cache.invalidation import InvalidationCoordinator
from cache.query_cache import QueryCache
from clients.supabase_client import SupabaseClient
from models.models import SessionContext
from utils.async_runner import AsyncRunner
from workflows.impact_workflow import ImpactWorkflow

logger = logging.getLogger(__name__)


def _release(runner: AsyncRunner, coordinator: InvalidationCoordinator) -> None:
    if coordinator.active:
        logger.info("Releasing realtime channels of a discarded session")
        runner.spawn(coordinator.stop)


class SessionServices:
    """Backend client, query cache and realtime coordinator for one browser session.

    Realtime channels are released when the session signs out, or when the
    object is garbage collected after Streamlit drops the browser session.
    """

    def __init__(
        self,
        supabase_client: SupabaseClient,
        cache: QueryCache,
        runner: AsyncRunner,
        vote_totals_stale_seconds: float,
        user_votes_stale_seconds: float,
        trending_limit: int,
    ):
        self.supabase_client = supabase_client
        self.cache = cache
        self.runner = runner
        self.queries = DashboardQueries(
            cache,
            supabase_client,
            vote_totals_stale_seconds=vote_totals_stale_seconds,
            user_votes_stale_seconds=user_votes_stale_seconds,
            trending_limit=trending_limit,
        )
        self.coordinator = InvalidationCoordinator(cache, supabase_client)
        self.impact_workflow = ImpactWorkflow(supabase_client)
        self._finalizer = weakref.finalize(self, _release, runner, self.coordinator)
        self._finalizer.atexit = False

    def begin(self, session: SessionContext) -> None:
        self.coordinator.session = session
        self.runner.run(self.coordinator.start())
        logger.info("Session started for %s", session.user_id)

    def end(self) -> None:
        try:
            self.runner.run(self.coordinator.stop())
        finally:
            self.coordinator.session = None
        logger.info("Session ended")


def get_services() -> SessionServices:
    return st.session_state["services"]
