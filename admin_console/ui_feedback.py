"""
UI feedback utilities for the property admin console.
Provides toast notifications and loading indicators.
"""

import streamlit as st
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)


class LoadingIndicator:
    """Loading indicator utilities."""

    @staticmethod
    @contextmanager
    def spinner(message: str = "Loading..."):
        """Context manager for spinner loading indicator."""
        with st.spinner(message):
            yield

    @staticmethod
    def placeholder(message: str = "Loading..."):
        """Static loading line shown while a fetch has not resolved."""
        st.info(f"⏳ {message}")


class Notify:
    """
    Toast notification helper.

    The API includes: success, info, warn, error.

    Usage:
    Notify.success("Inquiry submitted successfully!")
    Notify.error("No response from server. Please try again later.")
    """

    ICONS = {
        'success': '✅',
        'info': 'ℹ️',
        'warning': '⚠️',
        'error': '❌'
    }

    @staticmethod
    def _display_notification(message: str, notification_type: str = 'info') -> None:
        """Internal method to display notification based on type."""
        icon = Notify.ICONS.get(notification_type, 'ℹ️')
        logger.debug(f"Notify[{notification_type}]: {message}")
        try:
            st.toast(message, icon=icon)
        except Exception as e:
            # A toast can fail outside a script run context; fall back to an inline message.
            logger.error(f"Error using st.toast: {e}", exc_info=True)
            full_message = f"{icon} {message}"
            if notification_type == 'success':
                st.success(full_message)
            elif notification_type == 'warning':
                st.warning(full_message)
            elif notification_type == 'error':
                st.error(full_message)
            else:
                st.info(full_message)

    @staticmethod
    def success(message: str) -> None:
        """Show success notification."""
        Notify._display_notification(message, 'success')

    @staticmethod
    def info(message: str) -> None:
        """Show info notification."""
        Notify._display_notification(message, 'info')

    @staticmethod
    def warn(message: str) -> None:
        """Show warning notification."""
        Notify._display_notification(message, 'warning')

    @staticmethod
    def error(message: str) -> None:
        """Show error notification."""
        Notify._display_notification(message, 'error')


def queue_notification(message: str, notification_type: str = 'info') -> None:
    """
    Store a notification to be shown on the next script run.

    Used before st.rerun(), which would otherwise discard a toast raised in
    the same run.
    """
    st.session_state.setdefault('pending_notifications', []).append((message, notification_type))


def flush_notifications() -> int:
    """Show and clear queued notifications; returns how many were shown."""
    pending = st.session_state.get('pending_notifications') or []
    for message, notification_type in pending:
        Notify._display_notification(message, notification_type)
    st.session_state['pending_notifications'] = []
    return len(pending)
