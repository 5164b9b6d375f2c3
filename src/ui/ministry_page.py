import streamlit as st
from pydantic import ValidationError
from clients.supabase_client import FetchError
from models.models import Correlation
from ui.net_action import net_action
from ui.Page import Page
from ui.session import get_services
from utils.constants import PROBLEM_CATEGORIES
from utils.correlation_utils import average_correlation, top_correlation, update_filters
from utils.csv_utils import to_csv


class MinistryPage(Page):
    """Officials' view of geospatial problem correlations."""

    def _set_filter(self, name: str, value):
        st.session_state.correlation_filters = update_filters(
            st.session_state.correlation_filters, name, value
        )

    def _render_filters(self):
        with st.sidebar:
            st.subheader(":material/filter_alt: Filters")
            dates = st.date_input("Date Range", value=(), key="ministry_dates")
            categories = st.multiselect(
                "Categories",
                PROBLEM_CATEGORIES,
                format_func=lambda c: c.capitalize(),
                placeholder="Select categories...",
            )
            city = st.text_input("City", placeholder="Filter by city...")

        date_range = None
        if isinstance(dates, (list, tuple)) and len(dates) == 2:
            date_range = {"from": dates[0], "to": dates[1]}
        self._set_filter("date_range", date_range)
        self._set_filter("categories", categories)
        self._set_filter("city", city.strip())

    def _fetch(self):
        services = get_services()
        with net_action("Loading correlations..."):
            rows = services.runner.run(
                services.supabase_client.fetch_correlations(
                    st.session_state.correlation_filters
                )
            )
        correlations = []
        for row in rows:
            try:
                correlations.append(Correlation(**row))
            except ValidationError:
                continue
        return rows, correlations

    def render(self):
        st.title("Ministry Insights")
        self._render_filters()
        try:
            rows, correlations = self._fetch()
        except FetchError as e:
            st.error(f"Could not load correlations: {e.message}")
            return

        top = top_correlation(correlations)
        col1, col2, col3 = st.columns(3)
        with col1.container(border=True):
            st.caption("Top Correlation Pair")
            st.subheader(f"{top.category_a} & {top.category_b}" if top else "N/A")
            st.caption(f"in {top.city or 'N/A'}" if top else "")
        with col2.container(border=True):
            st.caption("Highest Score")
            st.subheader(f"{top.correlation_score:.2f}" if top else "N/A")
            st.caption("Peak data correlation")
        with col3.container(border=True):
            st.caption("Average Correlation")
            st.subheader(f"{average_correlation(correlations):.2f}")
            st.caption("Across all categories")

        located = [c for c in correlations if c.latitude is not None and c.longitude is not None]
        if located:
            st.map(
                {
                    "latitude": [c.latitude for c in located],
                    "longitude": [c.longitude for c in located],
                }
            )
        st.dataframe(rows, width="stretch")
        st.download_button(
            ":material/download: Export CSV",
            data=to_csv(rows),
            file_name="correlation_data.csv",
            mime="text/csv",
            disabled=not rows,
        )
