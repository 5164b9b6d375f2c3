import streamlit as st
from contextlib import contextmanager
from cache.query_cache import ViewScope
from utils.async_runner import AsyncRunner


@contextmanager
def net_action(text: str):
    with st.spinner(text, show_time=True):
        yield


@contextmanager
def view_scope(runner: AsyncRunner, name: str):
    """Fetches started inside the block are cancelled once the view is gone."""
    scope = ViewScope(name)
    try:
        yield scope
    finally:
        runner.call(scope.close)
