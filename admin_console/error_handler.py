"""
Error handling utilities for the property admin console.
Maps submission and fetch failures to user-facing notifications.
"""

import streamlit as st
import logging
from typing import Optional

from .exceptions import (
    AdminConsoleError,
    ConfigurationLoadError,
    FetchError,
    FormValidationError,
    NetworkError,
    SchemaLoadError,
    ServerError,
    UNEXPECTED_ERROR_MESSAGE,
)
from .ui_feedback import Notify, queue_notification

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    CONFIGURATION = "configuration"
    SCHEMA = "schema"
    VALIDATION = "validation"
    NETWORK = "network"
    SERVER = "server"
    FETCH = "fetch"
    SYSTEM = "system"


class ErrorHandler:
    """Error handling for the admin console."""

    @staticmethod
    def classify(error: Exception) -> str:
        """Return the ErrorType constant for an exception."""
        if isinstance(error, FormValidationError):
            return ErrorType.VALIDATION
        if isinstance(error, NetworkError):
            return ErrorType.NETWORK
        if isinstance(error, ServerError):
            return ErrorType.SERVER
        if isinstance(error, FetchError):
            return ErrorType.FETCH
        if isinstance(error, SchemaLoadError):
            return ErrorType.SCHEMA
        if isinstance(error, ConfigurationLoadError):
            return ErrorType.CONFIGURATION
        return ErrorType.SYSTEM

    @staticmethod
    def get_user_message(error: Exception) -> str:
        """
        User-facing text for an error.

        Network errors always show the generic no-response text, server errors
        show the server's message verbatim when it sent one, anything outside
        the taxonomy shows the generic unexpected-error text.
        """
        if isinstance(error, AdminConsoleError):
            return error.message
        return UNEXPECTED_ERROR_MESSAGE

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        user_message: Optional[str] = None,
        show_details: bool = False
    ) -> None:
        """
        Log an error and show it to the user.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            user_message: Custom user-friendly message
            show_details: Whether to show recovery suggestions and context
        """
        error_type = ErrorHandler.classify(error)
        if error_type == ErrorType.SYSTEM:
            logger.error(f"Error in {context}: {error}", exc_info=True)
        else:
            logger.error(f"{error_type} error in {context}: {error}")

        message = user_message or ErrorHandler.get_user_message(error)
        ErrorHandler._display_error(message, error, context, show_details)

    @staticmethod
    def notify_submission_error(error: Exception, deferred: bool = False) -> str:
        """
        Toast a failed submission and return the text shown.

        Validation failures are rendered inline next to the fields, so they
        only get a short warning toast.

        Args:
            error: The submission error
            deferred: Queue the toast for the next script run (use before st.rerun)
        """
        message = ErrorHandler.get_user_message(error)
        notification_type = 'warning' if isinstance(error, FormValidationError) else 'error'
        if deferred:
            queue_notification(message, notification_type)
        elif notification_type == 'warning':
            Notify.warn(message)
        else:
            Notify.error(message)
        return message

    @staticmethod
    def _display_error(
        user_message: str,
        error: Exception,
        context: str,
        show_details: bool = False
    ) -> None:
        """Display error message to user with recovery suggestions."""
        st.error(user_message)

        if show_details and isinstance(error, AdminConsoleError):
            with st.expander("🔍 Details"):
                st.write(f"**Error Type:** {type(error).__name__}")
                st.write(f"**Context:** {context}")
                for suggestion in error.recovery_suggestions:
                    st.write(f"- {suggestion}")


