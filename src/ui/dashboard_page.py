import asyncio
import logging
from typing import Any, Dict, List, Optional
import streamlit as st
from clients.supabase_client import FetchError
from models.models import Problem, VoteType
from ui.net_action import net_action, view_scope
from ui.Page import Page
from ui.session import SessionServices, get_services
from utils.badge_utils import display_badges, display_points
from utils.constants import PROBLEM_CATEGORIES, FeedView, Keys, Label
from utils.feed_utils import active_problems_summary, feed_result_status

logger = logging.getLogger(__name__)

VOTE_ICONS = {VoteType.UPVOTE: ":material/thumb_up:", VoteType.DOWNVOTE: ":material/thumb_down:"}


class DashboardPage(Page):
    """Citizen dashboard: impact, problem feeds and the local map."""

    def _position(self) -> Optional[Dict[str, float]]:
        with st.sidebar.expander("Your location", expanded=False):
            use_position = st.checkbox("Share my location")
            lat = st.number_input("Latitude", value=12.9716, format="%.5f")
            lng = st.number_input("Longitude", value=77.5946, format="%.5f")
        if not use_position:
            return None
        return {"latitude": float(lat), "longitude": float(lng)}

    async def _load(self, services: SessionServices, scope, position) -> Dict[str, Any]:
        session = st.session_state.session_context
        queries = services.queries
        views = [FeedView.ALL, FeedView.TRENDING, FeedView.NEARBY]
        results = await asyncio.gather(
            *(queries.feed(v, scope, session, position) for v in views),
            queries.problem_count(scope),
            return_exceptions=True,
        )
        return dict(zip([v.value for v in views] + ["count"], results))

    def _load_impact(self, services: SessionServices):
        session = st.session_state.session_context
        previous = st.session_state.impact_stats
        badges = previous.badges if previous else (session.profile.badges if session.profile else [])
        st.session_state.impact_stats = services.runner.run(
            services.impact_workflow.run(
                {"user_id": session.user_id, "previous_badges": badges},
                previous=previous,
                profile=session.profile,
            )
        )

    def _render_stats(self, data: Dict[str, Any], position):
        session = st.session_state.session_context
        impact = st.session_state.impact_stats
        points = display_points(impact, session.profile)
        badges = display_badges(impact, session.profile)
        total = data["count"] if not isinstance(data["count"], BaseException) else None
        all_rows, _, _ = feed_result_status(data["all"])
        nearby, nearby_loading, nearby_error = feed_result_status(data["nearby"])
        active, caption = active_problems_summary(
            has_position=position is not None,
            nearby=nearby,
            nearby_loading=nearby_loading,
            location_error=nearby_error,
            total_count=total,
            problems=all_rows,
        )

        col1, col2, col3 = st.columns(3)
        with col1.container(border=True):
            st.markdown("**:material/trending_up: Your Impact**")
            st.metric("Points", points, label_visibility="collapsed")
            st.caption("Points earned by voting, reporting, and commenting.")
        with col2.container(border=True):
            st.markdown("**:material/military_tech: Badges Earned**")
            st.metric("Badges", len(badges), label_visibility="collapsed")
            if badges:
                st.markdown(" ".join(f":blue-badge[{b}]" for b in badges))
            st.caption("Unlock more achievements by contributing.")
        with col3.container(border=True):
            st.markdown("**:material/location_on: Active Problems**")
            st.metric("Active", "—" if active is None else active, label_visibility="collapsed")
            st.caption(caption)

    def _render_problem(self, problem: Problem, tab: str):
        with st.container(border=True):
            st.markdown(f"**{problem.title}**")
            st.caption(f"{problem.category} · {problem.status} · {problem.created_at[:10]}")
            if problem.description:
                st.write(problem.description)
            vote = VOTE_ICONS.get(problem.user_vote, "")
            st.markdown(
                f":material/how_to_vote: {problem.votes_count} {vote}"
                f" · :material/chat: {problem.comments_count}"
            )
            if problem.latitude is not None and st.button(
                "Show on map", key=f"map-{tab}-{problem.id}"
            ):
                st.session_state.map_focus = {
                    "lat": problem.latitude,
                    "lng": problem.longitude,
                    "id": problem.id,
                    "pincode": problem.pincode,
                }
                st.toast("Open the Local Insights tab to see it on the map.")

    def _render_feed(self, result, tab: str, empty_text: str):
        if isinstance(result, FetchError):
            st.error(f"Could not load problems: {result.message}")
            return
        if isinstance(result, BaseException):
            st.error(str(result) or "Loading was interrupted. Please refresh.")
            return
        if not result:
            st.info(empty_text)
            return
        for problem in result:
            self._render_problem(problem, tab)

    def _render_map(self, problems: List[Problem]):
        focus = st.session_state.map_focus
        points = [p for p in problems if p.latitude is not None]
        if focus and focus.get("lat") is not None:
            st.caption(f"Focused on problem {focus['id']}")
            points = [p for p in points if p.id == focus["id"]] or points
        if not points:
            st.info("No located problems to show yet.")
            return
        st.map(
            {
                "latitude": [p.latitude for p in points],
                "longitude": [p.longitude for p in points],
            },
            zoom=14 if focus else None,
        )

    def _render_report_form(self, services: SessionServices):
        with st.expander(":material/add: Report a Problem"):
            with st.form("report_form", clear_on_submit=True):
                title = st.text_input(Label.TITLE.value + Label.MANDATORY_FIELD_MARKER.value, key=Keys.TITLE.value)
                description = st.text_area(Label.DESCRIPTION.value, key=Keys.DESCRIPTION.value)
                category = st.selectbox(Label.CATEGORY.value, PROBLEM_CATEGORIES, key=Keys.CATEGORY.value)
                pincode = st.text_input(Label.PINCODE.value, key=Keys.PINCODE.value)
                lat = st.number_input(Label.LATITUDE.value, value=None, format="%.5f", key=Keys.LATITUDE.value)
                lng = st.number_input(Label.LONGITUDE.value, value=None, format="%.5f", key=Keys.LONGITUDE.value)
                submitted = st.form_submit_button(Label.SUBMIT_BUTTON.value)

        if not submitted:
            return
        if not title:
            st.error("A title is required.")
            return

        session = st.session_state.session_context
        payload = {
            "title": title,
            "description": description,
            "category": category,
            "user_id": session.user_id,
        }
        if pincode:
            payload["pincode"] = pincode
        if lat is not None and lng is not None:
            payload["latitude"], payload["longitude"] = lat, lng
        try:
            with net_action("Submitting report..."):
                services.runner.run(services.supabase_client.create_problem(payload))
        except FetchError as e:
            st.error(f"Could not submit report: {e.message}")
            return
        logger.info("Problem reported by %s", session.user_id)
        services.runner.call(services.coordinator.on_local_report)
        self._load_impact(services)
        st.success("Problem reported. Thank you!")

    def render(self):
        services = get_services()
        session = st.session_state.session_context
        position = self._position()

        st.title("VoiceUp Dashboard")
        st.caption(
            f"{session.profile.full_name if session.profile else 'Citizen'}"
            f" · {display_points(st.session_state.impact_stats, session.profile)} points"
        )
        if st.session_state.impact_stats is None:
            self._load_impact(services)

        self._render_report_form(services)

        with view_scope(services.runner, "dashboard") as scope:
            with net_action("Loading problems..."):
                data = services.runner.run(self._load(services, scope, position))

        self._render_stats(data, position)

        all_tab, nearby_tab, trending_tab, insights_tab = st.tabs(
            ["All Problems", "Nearby", "Trending", ":material/map: Local Insights"]
        )
        with all_tab:
            self._render_feed(data["all"], "all", "No problems reported yet. Be the first to report one!")
        with nearby_tab:
            if position is None:
                st.info("Share your location in the sidebar to see nearby problems.")
            else:
                self._render_feed(data["nearby"], "nearby", "No problems found nearby.")
        with trending_tab:
            self._render_feed(data["trending"], "trending", "Nothing trending yet.")
        with insights_tab:
            feed = data["all"] if isinstance(data["all"], list) else []
            self._render_map(feed)
