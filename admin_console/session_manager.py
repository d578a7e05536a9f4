"""
Session state management for the property admin console.
Holds the session token, the navigation state, fetch trackers and the live
form controllers for the current page.
"""

import streamlit as st
from typing import Any, Callable, Dict, Optional
from datetime import datetime
import logging

from .api_client import ApiClient
from .config_loader import get_config_value
from .data_fetcher import FetchTracker

logger = logging.getLogger(__name__)

# Default values
DEFAULT_PAGE = "properties"

# Pages that never keep a form controller alive once left
PAGES = (
    "properties",
    "property_new",
    "property_edit",
    "users",
    "user_new",
    "user_edit",
)


class SessionManager:
    """Manages Streamlit session state for the admin console."""

    @staticmethod
    def initialize():
        """Initialize all session state variables with default values."""
        defaults = {
            'current_page': DEFAULT_PAGE,
            'auth_token': None,
            'user_id': None,
            'selected_property_id': None,
            'selected_user': None,
            'fetch_trackers': {},
            'form_controllers': {},
            'api_client': None,
            'last_activity': datetime.now(),
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if not st.session_state.session_id:
            st.session_state.session_id = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

        logger.debug(f"Session initialized: {st.session_state.session_id}")

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------
    @staticmethod
    def get_token() -> Optional[str]:
        """Session token; read on every request through the ApiClient token provider."""
        return st.session_state.get('auth_token') or None

    @staticmethod
    def set_token(token: Optional[str]):
        token = (token or '').strip() or None
        if token != st.session_state.get('auth_token'):
            logger.info("Session token updated")
            st.session_state.auth_token = token
            # Cached data belongs to the previous identity.
            SessionManager.invalidate_fetches()

    @staticmethod
    def get_user_id() -> Optional[str]:
        return st.session_state.get('user_id') or None

    @staticmethod
    def set_user_id(user_id: Optional[str]):
        st.session_state.user_id = (str(user_id).strip() if user_id else None) or None

    @staticmethod
    def get_api_client() -> ApiClient:
        """Session-wide ApiClient bound to the configured base URL."""
        client = st.session_state.get('api_client')
        base_url = get_config_value('api', 'base_url', 'http://localhost:8000')
        if client is None or client.base_url != base_url.rstrip('/'):
            client = ApiClient(
                base_url,
                token_provider=SessionManager.get_token,
                timeout=float(get_config_value('api', 'timeout', 15)),
            )
            st.session_state.api_client = client
        return client

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    @staticmethod
    def get_current_page() -> str:
        """Get the current page."""
        return st.session_state.get('current_page', DEFAULT_PAGE)

    @staticmethod
    def set_current_page(page: str):
        """Set the current page and discard form state belonging to the old one."""
        if page not in PAGES:
            raise ValueError(f"Unknown page: {page}")

        old_page = st.session_state.get('current_page')
        if old_page != page:
            logger.info(f"Page transition: {old_page} -> {page}")
            SessionManager._cleanup_form_state()
            st.session_state.current_page = page
            SessionManager.update_activity()

    @staticmethod
    def open_property(property_id: Any):
        """Navigate to the edit page of one property."""
        st.session_state.selected_property_id = str(property_id)
        SessionManager.set_current_page('property_edit')

    @staticmethod
    def get_selected_property_id() -> Optional[str]:
        return st.session_state.get('selected_property_id')

    @staticmethod
    def open_user(user: Dict[str, Any]):
        """Navigate to the edit page of one user row."""
        st.session_state.selected_user = dict(user)
        SessionManager.set_current_page('user_edit')

    @staticmethod
    def get_selected_user() -> Optional[Dict[str, Any]]:
        return st.session_state.get('selected_user')

    # ------------------------------------------------------------------
    # Fetches, forms and tables
    # ------------------------------------------------------------------
    @staticmethod
    def get_fetch_tracker(name: str) -> FetchTracker:
        trackers = st.session_state.setdefault('fetch_trackers', {})
        if name not in trackers:
            trackers[name] = FetchTracker(name)
        return trackers[name]

    @staticmethod
    def invalidate_fetches(name: Optional[str] = None):
        """Invalidate one tracker's cache, or all of them."""
        trackers = st.session_state.get('fetch_trackers', {})
        for tracker_name, tracker in trackers.items():
            if name is None or tracker_name == name:
                tracker.invalidate()

    @staticmethod
    def get_form_controller(key: str, factory: Callable[[], Any]) -> Any:
        """
        Return the controller stored under ``key``, creating it on first use.

        Args:
            key: Form instance key (e.g. 'property_edit_42')
            factory: Zero-argument callable building a new FormController
        """
        controllers = st.session_state.setdefault('form_controllers', {})
        if key not in controllers:
            logger.debug(f"Creating form controller: {key}")
            controllers[key] = factory()
        return controllers[key]

    @staticmethod
    def drop_form_controller(key: str):
        st.session_state.get('form_controllers', {}).pop(key, None)

    # ------------------------------------------------------------------
    @staticmethod
    def update_activity():
        """Update last activity timestamp."""
        st.session_state.last_activity = datetime.now()

    @staticmethod
    def get_session_id() -> str:
        """Get the session ID."""
        return st.session_state.get('session_id', 'unknown')

    @staticmethod
    def _cleanup_form_state():
        """Forms are discarded when their page is left."""
        controllers = st.session_state.get('form_controllers', {})
        for key, controller in controllers.items():
            if getattr(controller, 'touched', None):
                logger.warning(f"Leaving form '{key}' with unsubmitted changes")
            # Widget keys follow FormRenderer.widget_key: "{form_key}__{field}"
            for widget_key in [k for k in list(st.session_state.keys()) if str(k).startswith(f"{key}__")]:
                del st.session_state[widget_key]
        st.session_state.form_controllers = {}

    @staticmethod
    def get_session_info() -> Dict[str, Any]:
        """Get session information for debugging."""
        return {
            'session_id': SessionManager.get_session_id(),
            'current_page': SessionManager.get_current_page(),
            'has_token': SessionManager.get_token() is not None,
            'user_id': SessionManager.get_user_id(),
            'selected_property_id': SessionManager.get_selected_property_id(),
            'open_forms': list(st.session_state.get('form_controllers', {}).keys()),
        }

