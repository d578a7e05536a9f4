"""
Widget rendering for schema-driven forms.

Draws one Streamlit widget per active field of a FormController and feeds
widget changes back through FormController.set_field(). Widget state is kept
under ``{form_key}__{field}`` keys in st.session_state.
"""

import streamlit as st
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging

from dateutil import parser as date_parser

from .form_controller import FormController
from .validation import FieldSpec

logger = logging.getLogger(__name__)

SELECT_PROMPT = "-- Select --"


class FormRenderer:
    """Renders the active fields of a form controller."""

    @staticmethod
    def widget_key(form_key: str, field_name: str) -> str:
        return f"{form_key}__{field_name}"

    @staticmethod
    def render(controller: FormController, form_key: str, disabled: bool = False) -> Dict[str, str]:
        """
        Render every active field in schema order.

        Args:
            controller: Form state owner
            form_key: Prefix for widget keys, unique per form instance
            disabled: Render widgets read-only (e.g. while submitting)

        Returns:
            The visible error mapping after this run's changes
        """
        active = controller.active_fields
        for name, spec in controller.schema.fields.items():
            if name not in active or spec.type == 'hidden':
                continue
            FormRenderer._render_field(controller, form_key, spec, disabled)
            # Active set may change after each field (controller fields come first).
            active = controller.active_fields

        errors = controller.visible_errors()
        FormRenderer._render_errors(controller, errors)
        return errors

    @staticmethod
    def clear_widgets(controller: FormController, form_key: str):
        """Drop widget state so the next run re-reads the controller values."""
        for name in controller.schema.field_names():
            st.session_state.pop(FormRenderer.widget_key(form_key, name), None)

    # ------------------------------------------------------------------
    @staticmethod
    def _render_field(controller: FormController, form_key: str, spec: FieldSpec, disabled: bool):
        key = FormRenderer.widget_key(form_key, spec.name)
        current = controller.values.get(spec.name)

        # The file uploader owns its widget state; everything else is seeded once.
        if spec.type != 'files' and key not in st.session_state:
            st.session_state[key] = FormRenderer._to_widget_value(spec, current)

        kwargs = {
            'label': spec.display_label,
            'key': key,
            'help': spec.help,
            'disabled': disabled,
        }

        if spec.type == 'files':
            new_value = FormRenderer._render_files(controller, spec, kwargs)
        elif spec.type == 'text':
            new_value = st.text_area(**kwargs)
        elif spec.type == 'boolean':
            new_value = bool(st.checkbox(**kwargs))
        elif spec.type == 'date':
            new_value = FormRenderer._from_date(spec, st.date_input(**kwargs))
        elif spec.type == 'choice':
            new_value = FormRenderer._render_selectbox(spec, current, kwargs)
        elif spec.type == 'array':
            options = list(dict.fromkeys([*spec.choices, *(current or [])]))
            new_value = list(st.multiselect(options=options, **kwargs))
        elif spec.type == 'password':
            new_value = st.text_input(type='password', **kwargs)
        else:
            # Numbers are typed as text so malformed input reaches validation.
            new_value = st.text_input(**kwargs)

        if FormRenderer._differs(spec, current, new_value):
            controller.set_field(spec.name, new_value)

    @staticmethod
    def _render_selectbox(spec: FieldSpec, current: Any, kwargs: Dict[str, Any]) -> Any:
        blank = spec.placeholder if spec.placeholder is not None else ''
        options = [blank, *spec.choices]
        if current not in options:
            # Value from the server outside the configured choices.
            options.append(current)
        return st.selectbox(
            options=options,
            format_func=lambda x: SELECT_PROMPT if x == blank else str(x),
            **kwargs
        )

    @staticmethod
    def _render_files(controller: FormController, spec: FieldSpec, kwargs: Dict[str, Any]) -> List[Any]:
        existing = [item for item in controller.initial_values.get(spec.name) or [] if isinstance(item, str)]
        if existing:
            st.caption(f"{len(existing)} existing image(s) kept on the server")
            st.image(existing, width=120)

        uploads = st.file_uploader(accept_multiple_files=True, **kwargs) or []
        return existing + list(uploads)

    @staticmethod
    def _render_errors(controller: FormController, errors: Dict[str, str]):
        if not errors:
            return
        if controller.submit_attempted:
            st.error("Please fix the following fields:")
        for name, message in errors.items():
            st.caption(f"⚠️ {controller.schema.fields[name].display_label}: {message}")

    # ------------------------------------------------------------------
    @staticmethod
    def _to_widget_value(spec: FieldSpec, value: Any) -> Any:
        if spec.type == 'boolean':
            if isinstance(value, bool):
                return value
            return str(value).strip().lower() in ('1', 'true')
        if spec.type == 'date':
            return FormRenderer._to_date(value)
        if spec.type == 'array':
            return list(value or [])
        if value is None:
            return ''
        return value if spec.type == 'choice' else str(value)

    @staticmethod
    def _to_date(value: Any) -> Optional[date]:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not value or value == 'N/A':
            return None
        try:
            return date_parser.parse(str(value)).date()
        except (ValueError, OverflowError) as e:
            logger.warning(f"Failed to parse date string '{value}': {e}")
            return None

    @staticmethod
    def _from_date(spec: FieldSpec, value: Any) -> Any:
        if isinstance(value, date):
            return value.strftime("%Y-%m-%d")
        return spec.placeholder if spec.placeholder is not None else ''

    @staticmethod
    def _differs(spec: FieldSpec, current: Any, new_value: Any) -> bool:
        if spec.type == 'files':
            current_names = [getattr(item, 'name', item) for item in current or []]
            new_names = [getattr(item, 'name', item) for item in new_value]
            return current_names != new_names
        if spec.type == 'date':
            return FormRenderer._to_date(current) != FormRenderer._to_date(new_value)
        if spec.type == 'boolean':
            return FormRenderer._to_widget_value(spec, current) != new_value
        if spec.type == 'array':
            return list(current or []) != list(new_value)
        if spec.type == 'choice':
            return ('' if current is None else current) != new_value
        return ('' if current is None else str(current)) != new_value
