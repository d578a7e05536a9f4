"""
Property pages: the paginated list, the create form and the edit form.
"""

import streamlit as st
from typing import Any, Dict
import logging

from .config_loader import get_config_value
from .error_handler import ErrorHandler
from .exceptions import SchemaLoadError
from .form_view import FormView
from .forms import (
    PROPERTIES_PATH,
    build_property_create_form,
    build_property_edit_form,
    property_columns,
)
from .models import parse_property_response, parse_record_list
from .session_manager import SessionManager
from .table_viewer import TableViewer
from .ui_feedback import LoadingIndicator

logger = logging.getLogger(__name__)

LIST_TRACKER = "properties"
DETAIL_TRACKER = "property_detail"


class PropertyListView:
    """Paginated list of properties with a Details action per row."""

    @staticmethod
    def render():
        """Render the property list page."""
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.subheader("🏠 Properties")
        with col2:
            refresh = st.button("🔄 Refresh", key="properties_refresh")
        with col3:
            if st.button("➕ New", key="properties_new"):
                SessionManager.set_current_page('property_new')
                st.rerun()

        client = SessionManager.get_api_client()
        tracker = SessionManager.get_fetch_tracker(LIST_TRACKER)
        url = client.url(PROPERTIES_PATH)

        with LoadingIndicator.spinner("Loading properties..."):
            state = tracker.load(
                url,
                lambda: parse_record_list(client.fetch_with_token(PROPERTIES_PATH)),
                force=refresh,
            )

        TableViewer.render(
            state,
            property_columns(on_details=PropertyListView._open_details),
            key="properties_table",
            page_size=int(get_config_value('ui', 'page_size', 5)),
            empty_message="No properties found.",
            export_name="properties.csv",
        )

    @staticmethod
    def _open_details(record: Dict[str, Any]):
        SessionManager.open_property(record.get('id'))
        st.rerun()


class PropertyFormView:
    """Create and edit pages for a single property."""

    @staticmethod
    def render_create():
        """Render the Submit Property form."""
        st.subheader("➕ Submit Property")

        client = SessionManager.get_api_client()
        try:
            controller = SessionManager.get_form_controller(
                'property_create',
                lambda: build_property_create_form(client, SessionManager.get_user_id())
            )
        except SchemaLoadError as e:
            ErrorHandler.handle_error(e, "loading the property form", show_details=True)
            return

        if not SessionManager.get_user_id():
            st.warning("No user id in the session; the property will be submitted without an owner account.")

        FormView.render(
            controller,
            'property_create',
            submit_label="Submit Property",
            success_message="Property submitted successfully!",
            on_success=lambda: SessionManager.set_current_page('properties'),
        )

    @staticmethod
    def render_edit():
        """Render the edit form of the selected property."""
        property_id = SessionManager.get_selected_property_id()

        if st.button("⬅ Back to list", key="property_edit_back"):
            SessionManager.set_current_page('properties')
            st.rerun()

        if not property_id:
            st.info("Select a property from the list to edit it.")
            return

        st.subheader(f"✏️ Property #{property_id}")

        client = SessionManager.get_api_client()
        tracker = SessionManager.get_fetch_tracker(DETAIL_TRACKER)
        path = f"{PROPERTIES_PATH}/{property_id}"

        with LoadingIndicator.spinner("Loading property..."):
            state = tracker.load(
                client.url(path),
                lambda: parse_property_response(client.fetch_with_token(path)),
            )

        if state.is_error:
            st.error(state.error)
            return
        if state.data is None:
            st.warning("Property not found.")
            return

        form_key = f"property_edit_{property_id}"
        try:
            controller = SessionManager.get_form_controller(
                form_key,
                lambda: build_property_edit_form(client, state.data, property_id)
            )
        except SchemaLoadError as e:
            ErrorHandler.handle_error(e, "loading the property edit form", show_details=True)
            return

        FormView.render(
            controller,
            form_key,
            submit_label="Save Changes",
            success_message="Property updated successfully!",
            show_changes=True,
            on_success=lambda: SessionManager.drop_form_controller(form_key),
        )
