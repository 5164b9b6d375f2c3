import streamlit as st
from ui.auth import authenticate
from ui.state import ensure_state
from utils.constants import Pages
from utils.logging import setup_logging
from utils.styling import load_custom_css
from di.container import Container
from config.config import SETTINGS


def main():
    setup_logging(SETTINGS.log_level)
    ensure_state()
    load_custom_css()
    container = Container()
    if "services" not in st.session_state:
        st.session_state.services = container.session_services()

    st.sidebar.title("VoiceUp")
    if not authenticate():
        return

    selection = st.sidebar.radio(
        "Navigation",
        (
            Pages.DASHBOARD.value["key"],
            Pages.MINISTRY.value["key"],
            Pages.CHATBOT.value["key"],
        ),
        format_func=lambda x: {
            Pages.DASHBOARD.value["key"]: Pages.DASHBOARD.value["title"],
            Pages.MINISTRY.value["key"]: Pages.MINISTRY.value["title"],
            Pages.CHATBOT.value["key"]: Pages.CHATBOT.value["title"],
        }[x],
        label_visibility="hidden",
    )

    if selection == Pages.DASHBOARD.value["key"]:
        container.dashboard_page().render()
    elif selection == Pages.MINISTRY.value["key"]:
        container.ministry_page().render()
    elif selection == Pages.CHATBOT.value["key"]:
        container.chatbot_page().render()


if __name__ == "__main__":
    main()
