"""
User pages: the paginated user list and the add/edit user forms.
"""

import streamlit as st
from typing import Any, Dict
import logging

from .config_loader import get_config_value
from .error_handler import ErrorHandler
from .exceptions import SchemaLoadError
from .form_view import FormView
from .forms import USERS_PATH, build_user_create_form, build_user_edit_form, user_columns
from .models import parse_record_list
from .session_manager import SessionManager
from .table_viewer import TableViewer
from .ui_feedback import LoadingIndicator

logger = logging.getLogger(__name__)

LIST_TRACKER = "users"


class UserView:
    """User list plus add/edit forms."""

    @staticmethod
    def render_list():
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.subheader("👥 Users")
        with col2:
            refresh = st.button("🔄 Refresh", key="users_refresh")
        with col3:
            if st.button("➕ Add User", key="users_new"):
                SessionManager.set_current_page('user_new')
                st.rerun()

        client = SessionManager.get_api_client()
        tracker = SessionManager.get_fetch_tracker(LIST_TRACKER)

        with LoadingIndicator.spinner("Loading users..."):
            state = tracker.load(
                client.url(USERS_PATH),
                lambda: parse_record_list(client.fetch_with_token(USERS_PATH)),
                force=refresh,
            )

        TableViewer.render(
            state,
            user_columns(on_edit=UserView._open_user),
            key="users_table",
            page_size=int(get_config_value('ui', 'page_size', 5)),
            empty_message="No users found.",
            export_name="users.csv",
        )

    @staticmethod
    def render_create():
        st.subheader("➕ Add User")
        UserView._back_button("user_new_back")

        client = SessionManager.get_api_client()
        try:
            controller = SessionManager.get_form_controller('user_create', lambda: build_user_create_form(client))
        except SchemaLoadError as e:
            ErrorHandler.handle_error(e, "loading the user form", show_details=True)
            return

        FormView.render(
            controller,
            'user_create',
            submit_label="Add User",
            success_message="User added successfully!",
            on_success=lambda: SessionManager.set_current_page('users'),
        )

    @staticmethod
    def render_edit():
        UserView._back_button("user_edit_back")

        user = SessionManager.get_selected_user()
        if not user:
            st.info("Select a user from the list to edit it.")
            return

        st.subheader(f"✏️ {user.get('name') or 'User'}")

        client = SessionManager.get_api_client()
        form_key = f"user_edit_{user.get('id')}"
        try:
            controller = SessionManager.get_form_controller(form_key, lambda: build_user_edit_form(client, user))
        except SchemaLoadError as e:
            ErrorHandler.handle_error(e, "loading the user edit form", show_details=True)
            return

        FormView.render(
            controller,
            form_key,
            submit_label="Save Changes",
            success_message="User updated successfully!",
            show_changes=True,
            on_success=lambda: SessionManager.set_current_page('users'),
        )

    @staticmethod
    def _open_user(record: Dict[str, Any]):
        SessionManager.open_user(record)
        st.rerun()

    @staticmethod
    def _back_button(key: str):
        if st.button("⬅ Back to users", key=key):
            SessionManager.set_current_page('users')
            st.rerun()
