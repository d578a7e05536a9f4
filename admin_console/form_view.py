"""
Shared form page layout: fields, pending-changes panel and the action row.
"""

import streamlit as st
from typing import Callable, Optional
import logging

from .error_handler import ErrorHandler
from .form_controller import FormController, SubmissionResult
from .form_diff import format_value
from .form_renderer import FormRenderer
from .session_manager import SessionManager
from .ui_feedback import LoadingIndicator, queue_notification

logger = logging.getLogger(__name__)


class FormView:
    """Renders a FormController as a page with submit and reset buttons."""

    @staticmethod
    def render(
        controller: FormController,
        form_key: str,
        submit_label: str,
        success_message: str,
        show_changes: bool = False,
        on_success: Optional[Callable[[], None]] = None,
    ):
        """
        Render the fields and the action row of one form.

        Args:
            controller: Form state owner
            form_key: Widget key prefix, unique per form instance
            submit_label: Text of the primary button
            success_message: Toast shown after a 2xx response
            show_changes: Show the pending-changes panel (edit forms)
            on_success: Called after a successful submission, before the rerun
        """
        # Set by the submit button's on_click before this run started.
        pending = controller.loading

        FormRenderer.render(controller, form_key, disabled=pending)

        if show_changes:
            FormView._render_changes(controller)

        st.divider()
        col1, col2, _ = st.columns([1, 1, 2])

        with col1:
            st.button(
                f"💾 {submit_label}",
                type="primary",
                key=f"{form_key}_submit",
                disabled=pending,
                on_click=controller.request_submit,
            )

        with col2:
            if st.button("🔄 Reset", key=f"{form_key}_reset", disabled=pending):
                controller.reset()
                FormRenderer.clear_widgets(controller, form_key)
                st.rerun()

        if pending:
            FormView.submit(controller, form_key, success_message, on_success)

    @staticmethod
    def submit(
        controller: FormController,
        form_key: str,
        success_message: str,
        on_success: Optional[Callable[[], None]] = None,
    ) -> SubmissionResult:
        """Run one submission attempt and surface its outcome."""
        with LoadingIndicator.spinner("Submitting..."):
            result = controller.submit()

        if not result.success:
            # Rerun so the controls drawn disabled above become usable again.
            ErrorHandler.notify_submission_error(result.error, deferred=True)
            st.rerun()
            return result

        logger.info(f"Form '{form_key}' submitted (HTTP {result.response.status_code})")
        FormRenderer.clear_widgets(controller, form_key)
        SessionManager.invalidate_fetches()
        # The rerun below would swallow a toast raised in this run.
        queue_notification(success_message, 'success')
        if on_success is not None:
            on_success()
        st.rerun()
        return result

    @staticmethod
    def _render_changes(controller: FormController):
        changes = controller.changes()
        with st.expander(f"🔍 Pending changes ({len(changes)})", expanded=bool(changes)):
            if not changes:
                st.caption("No changes")
                return
            for change in changes:
                label = controller.schema.fields[change['field']].display_label
                st.markdown(
                    f"**{label}**: {format_value(change['old'])} → {format_value(change['new'])}"
                )
