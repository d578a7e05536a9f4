"""
Custom exception classes for the property admin console.

This module provides the error taxonomy used by the form submission pipeline,
the REST client and the configuration/schema loaders. Every exception carries
a user-facing message, a context dictionary and recovery suggestions.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "No response from server. Please try again later."
UNEXPECTED_ERROR_MESSAGE = "Unexpected error occurred. Please try again."
SERVER_ERROR_FALLBACK = "Failed to submit. Please try again later."
FETCH_ERROR_MESSAGE = "Failed to fetch data"


class AdminConsoleError(Exception):
    """
    Base exception for admin console errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationLoadError(AdminConsoleError):
    """
    Exception raised when configuration file loading fails.

    This includes YAML parsing errors, file not found, permission issues, etc.
    """

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if config.yaml exists and is readable",
            "Verify YAML syntax is correct",
            "Application will use default configuration as fallback"
        ]

        super().__init__(message, context, recovery_suggestions)


class SchemaLoadError(AdminConsoleError):
    """Exception raised when a validation schema cannot be loaded or is malformed."""

    def __init__(self, schema_path: Path, issue: str, message: Optional[str] = None):
        self.schema_path = schema_path
        self.issue = issue

        if message is None:
            message = f"Invalid schema {schema_path}: {issue}"

        super().__init__(
            message,
            {'schema_path': str(schema_path), 'issue': issue},
            [
                "Check the schema file exists in the schemas directory",
                "Verify every field declares a supported type",
                "Verify every section references a declared controller field"
            ]
        )


class FormValidationError(AdminConsoleError):
    """
    Raised locally when the active field set fails validation.

    Never reaches the network layer; the field errors are rendered inline.
    """

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        count = len(self.field_errors)
        super().__init__(
            f"Please fix {count} field error{'s' if count != 1 else ''} before submitting.",
            {'fields': sorted(self.field_errors)},
            ["Review the highlighted fields and try again"]
        )


class NetworkError(AdminConsoleError):
    """Raised when a request was sent but no response was received."""

    def __init__(self, url: str, original_error: Optional[Exception] = None):
        self.url = url
        self.original_error = original_error
        context = {'url': url}
        if original_error is not None:
            context['original_error_type'] = type(original_error).__name__
            context['original_error_message'] = str(original_error)
        super().__init__(
            NO_RESPONSE_MESSAGE,
            context,
            ["Check your network connection", "Verify the API base URL in config.yaml"]
        )


class ServerError(AdminConsoleError):
    """Raised on a 4xx/5xx response; the server-provided message is kept verbatim."""

    def __init__(self, url: str, status_code: int, server_message: Optional[str] = None,
                 body: Any = None):
        self.url = url
        self.status_code = status_code
        self.server_message = server_message
        self.body = body
        super().__init__(
            server_message or SERVER_ERROR_FALLBACK,
            {'url': url, 'status_code': status_code},
            ["Correct the highlighted values and submit again"]
        )


class UnexpectedSubmissionError(AdminConsoleError):
    """Raised for any submission failure that is neither a network nor a server error."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(
            UNEXPECTED_ERROR_MESSAGE,
            {
                'original_error_type': type(original_error).__name__,
                'original_error_message': str(original_error)
            },
            ["Try again", "Check the application logs for details"]
        )


class FetchError(AdminConsoleError):
    """Raised when a GET request fails; the response body is not inspected."""

    def __init__(self, url: str, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        self.url = url
        self.status_code = status_code
        self.original_error = original_error
        context: Dict[str, Any] = {'url': url, 'status_code': status_code}
        if original_error is not None:
            context['original_error_type'] = type(original_error).__name__
        super().__init__(
            FETCH_ERROR_MESSAGE,
            context,
            ["Refresh the page", "Check that your session token is still valid"]
        )


# Errors that end a submission attempt; the form keeps its values for a manual retry.
SUBMISSION_ERRORS = (NetworkError, ServerError, UnexpectedSubmissionError)
