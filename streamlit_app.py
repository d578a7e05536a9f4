"""
Main Streamlit application for the property admin console.
List, create and edit properties and users through the listing platform's REST API.
"""

import streamlit as st
import logging

from admin_console.config_loader import get_config_value, load_config, validate_config, get_config_summary
from admin_console.session_manager import SessionManager
from admin_console.ui_feedback import flush_notifications


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


# Configure logging dynamically from config
try:
    log_level_str = get_config_value('logging', 'level', 'INFO')
    log_format = get_config_value('logging', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.basicConfig(level=get_logging_level(log_level_str), format=log_format)
    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured to level: {log_level_str}")
except Exception as e:
    # Fallback to INFO if config reading fails
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)
    logger.error(f"Failed to configure logging from config: {e}, using INFO level")

page_title = get_config_value('ui', 'page_title', 'ADMIN')

# Page configuration
st.set_page_config(
    page_title=page_title,
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Sidebar entries and the page each one opens
NAV_PAGES = {
    'properties': '🏠 Properties',
    'property_new': '➕ Submit Property',
    'users': '👥 Users',
}

# Detail pages highlight their parent entry in the sidebar
NAV_PARENTS = {
    'property_edit': 'properties',
    'user_new': 'users',
    'user_edit': 'users',
}


def main():
    """Main application entry point."""
    from admin_console.error_handler import ErrorHandler

    try:
        SessionManager.initialize()
        validate_configuration()

        render_sidebar()
        flush_notifications()
        render_main_content()

    except Exception as e:
        ErrorHandler.handle_error(e, "application", show_details=True)


def validate_configuration():
    """Warn once per session when config.yaml has structural problems."""
    if st.session_state.get('config_checked'):
        return

    config = load_config()
    if not validate_config(config):
        st.warning("⚠️ **Configuration Issues Detected**")
        st.warning("Some configuration settings are invalid, using defaults where necessary.")
    logger.info(f"Configuration: {get_config_summary(config)}")
    st.session_state['config_checked'] = True


def render_sidebar():
    """Render application sidebar."""
    with st.sidebar:
        st.title(f"🏠 {page_title}")
        sidebar_title = get_config_value('ui', 'sidebar_title', 'Navigation')
        st.header(sidebar_title)

        current = SessionManager.get_current_page()
        selected = NAV_PARENTS.get(current, current)
        options = list(NAV_PAGES.keys())

        page = st.radio(
            "Select View:",
            options=options,
            format_func=lambda x: NAV_PAGES[x],
            index=options.index(selected) if selected in options else 0
        )

        if page != selected:
            SessionManager.set_current_page(page)
            st.rerun()

        st.divider()

        # Session credentials; login itself happens outside the console.
        st.header("Session")

        token = st.text_input(
            "API Token:",
            value=SessionManager.get_token() or "",
            type="password",
            help="Bearer token sent with every API request"
        )
        SessionManager.set_token(token)

        user_id = st.text_input(
            "User ID:",
            value=SessionManager.get_user_id() or "",
            help="Account id attached to new properties"
        )
        SessionManager.set_user_id(user_id)

        st.divider()

        if st.button("🔄 Refresh Data", help="Re-fetch all lists"):
            SessionManager.invalidate_fetches()
            st.rerun()

        st.caption(f"API: {get_config_value('api', 'base_url', '')}")

        if get_config_value('app', 'debug', False):
            with st.expander("🐞 Session"):
                st.json(SessionManager.get_session_info())


def render_main_content():
    """Render main content area based on current page."""
    from admin_console.property_views import PropertyFormView, PropertyListView
    from admin_console.user_views import UserView

    page = SessionManager.get_current_page()

    if page == 'properties':
        PropertyListView.render()
    elif page == 'property_new':
        PropertyFormView.render_create()
    elif page == 'property_edit':
        PropertyFormView.render_edit()
    elif page == 'users':
        UserView.render_list()
    elif page == 'user_new':
        UserView.render_create()
    elif page == 'user_edit':
        UserView.render_edit()
    else:
        st.error(f"Unknown page: {page}")


if __name__ == "__main__":
    main()
