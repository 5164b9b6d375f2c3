import streamlit as st
from clients.supabase_client import FetchError
from ui.net_action import net_action
from ui.session import get_services
from ui.state import reset_state


def sign_out():
    """Tear down realtime channels and the Supabase session, then clear state."""
    services = get_services()
    try:
        services.end()
        services.runner.run(services.supabase_client.sign_out())
    except FetchError as e:
        st.warning(f"Sign out did not reach the server: {e.message}")
    finally:
        reset_state()
    st.toast("You have been signed out successfully.")


def authenticate() -> bool:
    """Return True when a viewer session exists, otherwise render the login form."""
    if st.session_state.session_context:
        st.sidebar.caption(st.session_state.session_context.email or "")
        st.sidebar.button("Sign Out", on_click=sign_out)
        return True

    services = get_services()
    st.title("Sign in to VoiceUp")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In")

    if not submitted:
        st.info("Please enter your email and password.")
        return False

    try:
        with net_action("Signing in..."):
            session = services.runner.run(
                services.supabase_client.sign_in(email, password)
            )
    except FetchError as e:
        st.error(f"Sign in failed: {e.message}")
        return False

    services.begin(session)
    st.session_state.session_context = session
    st.rerun()
