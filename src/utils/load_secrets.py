import logging
import os
import streamlit as st
from streamlit.errors import StreamlitAPIException

logger = logging.getLogger(__name__)


def load_env_vars():
    """Copy Streamlit secrets into the environment without overriding it."""
    try:
        secrets = dict(st.secrets)
    except (FileNotFoundError, StreamlitAPIException):
        logger.info("No Streamlit secrets found; using environment only.")
        return
    for k, v in secrets.items():
        if isinstance(v, str):
            os.environ.setdefault(k, v)
