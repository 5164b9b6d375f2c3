import streamlit as st
from langchain_core.messages import AIMessage
from utils.constants import ASSISTANT_GREETING, STATE_KEYS


def _defaults():
    return {
        "session_context": None,
        "impact_stats": None,
        "chatbot_messages": [AIMessage(content=ASSISTANT_GREETING)],
        "chatbot_turn": "human",
        "map_focus": None,
        "correlation_filters": {},
    }


def ensure_state():
    """Ensure default state values exist for this browser session."""
    for key, value in _defaults().items():
        st.session_state.setdefault(key, value)


def reset_state():
    """Drop everything tied to the signed-in viewer."""
    defaults = _defaults()
    for key in STATE_KEYS:
        st.session_state[key] = defaults[key]
