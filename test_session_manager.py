from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

import admin_console.session_manager as session_manager
from admin_console.session_manager import SessionManager


class _SessionState(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name, value):
        self[name] = value


@pytest.fixture
def st(monkeypatch):
    mock_st = SimpleNamespace(session_state=_SessionState())
    monkeypatch.setattr(session_manager, "st", mock_st)
    SessionManager.initialize()
    return mock_st


def test_initialize_sets_defaults(st):
    assert st.session_state.current_page == "properties"
    assert st.session_state.form_controllers == {}
    assert st.session_state.session_id.startswith("session_")


def test_initialize_keeps_existing_values(st):
    st.session_state.current_page = "users"
    SessionManager.initialize()
    assert SessionManager.get_current_page() == "users"


def test_unknown_page_raises(st):
    with pytest.raises(ValueError):
        SessionManager.set_current_page("reports")


def test_page_change_discards_forms_and_widget_state(st):
    controller = SessionManager.get_form_controller("property_create", lambda: SimpleNamespace(touched={"name"}))
    st.session_state["property_create__name"] = "Azure"
    st.session_state["properties_table_page_index"] = 2

    SessionManager.set_current_page("users")

    assert controller is not None
    assert st.session_state.form_controllers == {}
    assert "property_create__name" not in st.session_state
    assert st.session_state["properties_table_page_index"] == 2


def test_same_page_keeps_forms(st):
    SessionManager.get_form_controller("property_create", MagicMock)
    SessionManager.set_current_page("properties")
    assert "property_create" in st.session_state.form_controllers


def test_form_controller_created_once(st):
    factory = MagicMock(return_value="controller")
    assert SessionManager.get_form_controller("user_create", factory) == "controller"
    assert SessionManager.get_form_controller("user_create", factory) == "controller"
    factory.assert_called_once()

    SessionManager.drop_form_controller("user_create")
    SessionManager.get_form_controller("user_create", factory)
    assert factory.call_count == 2


def test_open_property_navigates_to_edit(st):
    SessionManager.open_property(42)
    assert SessionManager.get_selected_property_id() == "42"
    assert SessionManager.get_current_page() == "property_edit"


def test_open_user_navigates_to_edit(st):
    SessionManager.open_user({'id': 3, 'name': 'Ana'})
    assert SessionManager.get_selected_user() == {'id': 3, 'name': 'Ana'}
    assert SessionManager.get_current_page() == "user_edit"


def test_token_change_invalidates_fetches(st):
    tracker = SessionManager.get_fetch_tracker("properties")
    tracker.load("http://api.test/api/properties", lambda: ['cached'])

    SessionManager.set_token("  abc123 ")

    assert SessionManager.get_token() == "abc123"
    assert not tracker.state("http://api.test/api/properties").is_ready


def test_blank_token_is_none(st):
    SessionManager.set_token("   ")
    assert SessionManager.get_token() is None


def test_api_client_reads_token_per_request(st):
    with patch.object(session_manager, "get_config_value",
                      side_effect=lambda section, key, default=None: {
                          ('api', 'base_url'): 'http://api.test/',
                          ('api', 'timeout'): 5,
                      }.get((section, key), default)):
        client = SessionManager.get_api_client()
        assert SessionManager.get_api_client() is client

    assert client.base_url == "http://api.test"
    assert client._auth_headers() == {}
    SessionManager.set_token("abc123")
    assert client._auth_headers() == {"Authorization": "Bearer abc123"}


def test_session_info(st):
    SessionManager.set_user_id(" 7 ")
    info = SessionManager.get_session_info()
    assert info['user_id'] == "7"
    assert info['has_token'] is False
    assert info['open_forms'] == []
