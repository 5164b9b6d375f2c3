import pytest
from unittest.mock import MagicMock

from clients.supabase_client import FetchError
from ui import auth


@pytest.fixture
def patched(monkeypatch):
    services = MagicMock()
    reset_state = MagicMock()
    st = MagicMock()
    monkeypatch.setattr(auth, "get_services", lambda: services)
    monkeypatch.setattr(auth, "reset_state", reset_state)
    monkeypatch.setattr(auth, "st", st)
    return services, reset_state, st


def test_sign_out_clears_state(patched):
    services, reset_state, st = patched
    auth.sign_out()
    services.end.assert_called_once()
    services.runner.run.assert_called_once()
    reset_state.assert_called_once()
    st.toast.assert_called_once()


def test_sign_out_clears_state_when_server_unreachable(patched):
    services, reset_state, st = patched
    services.runner.run.side_effect = FetchError("network down")
    auth.sign_out()
    st.warning.assert_called_once()
    reset_state.assert_called_once()


def test_sign_out_clears_state_when_unsubscribe_fails(patched):
    services, reset_state, _ = patched
    services.end.side_effect = RuntimeError("socket closed")
    with pytest.raises(RuntimeError):
        auth.sign_out()
    reset_state.assert_called_once()
