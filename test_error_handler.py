"""
Unit tests for error classification and user notification.
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

import admin_console.error_handler as error_handler
from admin_console.error_handler import ErrorHandler, ErrorType
from admin_console.exceptions import (
    ConfigurationLoadError,
    FetchError,
    FormValidationError,
    NetworkError,
    NO_RESPONSE_MESSAGE,
    SchemaLoadError,
    ServerError,
    UNEXPECTED_ERROR_MESSAGE,
    UnexpectedSubmissionError,
)

URL = "http://api.test/api/users"


class _DummyContext:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class TestClassify:
    """Test cases for ErrorHandler.classify()."""

    @pytest.mark.parametrize("error,expected", [
        (FormValidationError({'price': 'Price must be positive'}), ErrorType.VALIDATION),
        (NetworkError(URL), ErrorType.NETWORK),
        (ServerError(URL, 500), ErrorType.SERVER),
        (FetchError(URL, 404), ErrorType.FETCH),
        (SchemaLoadError(Path("x.yaml"), "bad"), ErrorType.SCHEMA),
        (ConfigurationLoadError(Path("config.yaml"), OSError("denied")), ErrorType.CONFIGURATION),
        (UnexpectedSubmissionError(RuntimeError("boom")), ErrorType.SYSTEM),
        (KeyError("x"), ErrorType.SYSTEM),
    ])
    def test_classify(self, error, expected):
        assert ErrorHandler.classify(error) == expected


class TestUserMessages:
    """Test cases for user-facing text."""

    def test_server_message_verbatim(self):
        assert ErrorHandler.get_user_message(ServerError(URL, 422, "Email taken")) == "Email taken"

    def test_network_message(self):
        assert ErrorHandler.get_user_message(NetworkError(URL)) == NO_RESPONSE_MESSAGE

    def test_foreign_exception_is_generic(self):
        assert ErrorHandler.get_user_message(ValueError("internal detail")) == UNEXPECTED_ERROR_MESSAGE

    def test_validation_failure_warns(self):
        with patch.object(error_handler.Notify, "warn") as mock_warn, \
                patch.object(error_handler.Notify, "error") as mock_error:
            message = ErrorHandler.notify_submission_error(FormValidationError({'a': 'x', 'b': 'y'}))

        mock_warn.assert_called_once_with(message)
        mock_error.assert_not_called()
        assert "2 field errors" in message

    def test_server_failure_errors(self):
        with patch.object(error_handler.Notify, "error") as mock_error:
            message = ErrorHandler.notify_submission_error(ServerError(URL, 500))

        mock_error.assert_called_once_with("Failed to submit. Please try again later.")
        assert message == "Failed to submit. Please try again later."

    def test_deferred_notification_is_queued(self):
        with patch.object(error_handler, "queue_notification") as mock_queue, \
                patch.object(error_handler.Notify, "error") as mock_error:
            message = ErrorHandler.notify_submission_error(NetworkError(URL), deferred=True)

        mock_queue.assert_called_once_with(NO_RESPONSE_MESSAGE, 'error')
        mock_error.assert_not_called()
        assert message == NO_RESPONSE_MESSAGE

    def test_deferred_validation_failure_is_a_warning(self):
        with patch.object(error_handler, "queue_notification") as mock_queue:
            ErrorHandler.notify_submission_error(FormValidationError({'a': 'x'}), deferred=True)

        assert mock_queue.call_args.args[1] == 'warning'


class TestHandleError:
    """Test cases for ErrorHandler.handle_error()."""

    def test_displays_message_and_details(self, monkeypatch):
        st = SimpleNamespace(error=MagicMock(), write=MagicMock(),
                             expander=MagicMock(return_value=_DummyContext()))
        monkeypatch.setattr(error_handler, "st", st)

        ErrorHandler.handle_error(SchemaLoadError(Path("x.yaml"), "bad"), "loading", show_details=True)

        st.error.assert_called_once_with("Invalid schema x.yaml: bad")
        st.expander.assert_called_once()
        assert st.write.call_count >= 2

    def test_custom_user_message(self, monkeypatch):
        st = SimpleNamespace(error=MagicMock(), write=MagicMock(), expander=MagicMock())
        monkeypatch.setattr(error_handler, "st", st)

        ErrorHandler.handle_error(RuntimeError("boom"), "main", user_message="Something broke")

        st.error.assert_called_once_with("Something broke")
        st.expander.assert_not_called()
