import asyncio
import logging
from typing import Any, Dict, Optional
from langgraph.graph import StateGraph, START, END
from clients.supabase_client import SupabaseClient
from models.models import ContributionMetrics, ImpactState, ImpactStats, Profile
from utils.badge_utils import compute_impact, fallback_impact
from utils.constants import Tables
from workflows.workflow import Workflow

logger = logging.getLogger(__name__)


class ImpactWorkflow(Workflow):
    """Fetches a citizen's contribution counts and scores them.

    Best effort: any failure yields the last known stats instead of raising.
    """

    def __init__(self, supabase_client: SupabaseClient) -> None:
        self.supabase_client = supabase_client
        self.graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(ImpactState)
        graph.add_node("fetch_counts", self._fetch_counts)
        graph.add_node("compute_impact", self._compute_impact)
        graph.add_edge(START, "fetch_counts")
        graph.add_edge("fetch_counts", "compute_impact")
        graph.add_edge("compute_impact", END)
        return graph.compile()

    def _coerce_state(self, payload: Dict[str, Any]) -> ImpactState:
        if not isinstance(payload, dict):
            raise ValueError("Input must be a dict")
        user_id = payload.get("user_id")
        if not user_id:
            raise ValueError("user_id is required")
        return ImpactState(
            user_id=user_id, previous_badges=list(payload.get("previous_badges") or [])
        )

    async def _fetch_counts(self, state: ImpactState) -> Dict[str, Any]:
        reports, comments, votes = await asyncio.gather(
            self.supabase_client.count_rows(Tables.PROBLEMS.value, state["user_id"]),
            self.supabase_client.count_rows(Tables.COMMENTS.value, state["user_id"]),
            self.supabase_client.count_rows(Tables.VOTES.value, state["user_id"]),
        )
        return {
            "metrics": ContributionMetrics(
                reports_count=reports, comments_count=comments, votes_count=votes
            )
        }

    def _compute_impact(self, state: ImpactState) -> Dict[str, Any]:
        return {"impact": compute_impact(state["metrics"], state["previous_badges"])}

    async def run(
        self,
        input: Dict[str, Any],
        previous: Optional[ImpactStats] = None,
        profile: Optional[Profile] = None,
    ) -> ImpactStats:
        try:
            output = await self.graph.ainvoke(self._coerce_state(input))
            return output["impact"]
        except Exception as e:
            logger.error("Error loading citizen impact stats: %s", e)
            return fallback_impact(previous, profile)
