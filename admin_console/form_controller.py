"""
Form controller for the property and user forms.

Owns the field values, the touched set and the submission loading flag for
one form instance. Visibility of conditional sections is derived from the
current values on demand, validation runs only over active fields, and
submission goes through an injected ApiClient so the session token is never
looked up globally from here.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from .api_client import ApiClient, ApiResponse
from .exceptions import (
    AdminConsoleError,
    FormValidationError,
    SUBMISSION_ERRORS,
    UnexpectedSubmissionError,
)
from .form_diff import calculate_changes
from .serialization import TransportPayload, serialize
from .validation import ValidationSchema, is_blank, validate_values

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of one submit() call."""

    success: bool
    response: Optional[ApiResponse] = None
    error: Optional[AdminConsoleError] = None
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        if self.success:
            return "Submitted successfully!"
        return self.error.message if self.error else ""


class FormController:
    """State and submission pipeline for one form instance."""

    def __init__(
        self,
        schema: ValidationSchema,
        api_client: ApiClient,
        endpoint: Optional[str] = None,
        seed: Optional[Mapping[str, Any]] = None,
    ):
        self.schema = schema
        self.api_client = api_client
        self.endpoint = endpoint or schema.endpoint
        self.initial_values = self.initialize(seed)
        self.values: Dict[str, Any] = copy.deepcopy(self.initial_values)
        self.touched: Set[str] = set()
        self.loading = False
        self.submit_attempted = False
        self.errors: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def initialize(self, seed: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Build the initial values: schema defaults overridden by ``seed``.

        Seed values for undeclared fields are ignored. A blank seed value on a
        field that declares a placeholder becomes the placeholder ("N/A"), so
        "not provided" stays distinguishable from "explicitly empty".
        """
        values = {name: copy.deepcopy(spec.empty_value()) for name, spec in self.schema.fields.items()}

        for name, value in (seed or {}).items():
            spec = self.schema.fields.get(name)
            if spec is None:
                continue
            if spec.placeholder is not None and is_blank(value):
                values[name] = spec.placeholder
            elif value is None:
                continue
            else:
                values[name] = copy.deepcopy(value)

        return values

    def set_field(self, name: str, value: Any) -> Dict[str, Any]:
        """
        Return a new values mapping with ``name`` updated and store it.

        The field is marked touched. Values of fields hidden by the change are
        kept in memory; they are simply no longer active.
        """
        if name not in self.schema.fields:
            raise KeyError(f"Unknown field: {name}")

        updated = dict(self.values)
        updated[name] = value
        self.values = updated
        self.touched.add(name)
        logger.debug(f"Field '{name}' set; open sections: {self.schema.open_sections(updated)}")
        return updated

    @property
    def active_fields(self) -> Set[str]:
        return self.schema.active_fields(self.values)

    def is_active(self, name: str) -> bool:
        return name in self.active_fields

    def reset(self) -> None:
        """Return to the initial (seeded) state."""
        self.values = copy.deepcopy(self.initial_values)
        self.touched = set()
        self.submit_attempted = False
        self.errors = {}
        self.loading = False

    # ------------------------------------------------------------------
    # Validation / serialization
    # ------------------------------------------------------------------
    def validate(self, values: Optional[Mapping[str, Any]] = None,
                 touched_only: bool = False) -> Dict[str, str]:
        """Map of active field name to error message."""
        values = self.values if values is None else values
        return validate_values(self.schema, values, self.touched, touched_only)

    def visible_errors(self) -> Dict[str, str]:
        """Errors to display: touched fields only until a submit was attempted."""
        return self.validate(touched_only=not self.submit_attempted)

    def serialize(self, values: Optional[Mapping[str, Any]] = None) -> TransportPayload:
        values = self.values if values is None else values
        return serialize(self.schema, values, self.schema.active_fields(values))

    def changes(self) -> List[Dict[str, Any]]:
        """Active fields whose current value differs from the initial value."""
        return calculate_changes(self.initial_values, self.values, sorted(
            self.active_fields, key=self.schema.field_names().index
        ))

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def request_submit(self) -> None:
        """
        Mark a submission as pending.

        Used as the submit button's on_click callback: it runs before the next
        script run, so that run draws every control disabled and then calls
        submit(), which clears the flag again.
        """
        self.loading = True

    def submit(self, values: Optional[Mapping[str, Any]] = None) -> SubmissionResult:
        """
        Validate, serialize and POST the form.

        Validation failures never reach the network. Network, server and
        unexpected errors end the attempt with the entered values kept; there
        is no automatic retry. On success the controller resets.

        Args:
            values: Values to submit (defaults to the current values)

        Returns:
            SubmissionResult describing the outcome
        """
        values = self.values if values is None else values
        self.submit_attempted = True

        field_errors = self.validate(values)
        if field_errors:
            self.errors = field_errors
            self.loading = False
            logger.warning(f"Submission of '{self.schema.title}' blocked by {len(field_errors)} field errors")
            return SubmissionResult(False, error=FormValidationError(field_errors), field_errors=field_errors)

        self.errors = {}
        self.loading = True
        try:
            payload = self.serialize(values)
            logger.info(f"Submitting '{self.schema.title}' to {self.endpoint} as {payload.kind}")
            response = self.api_client.post(self.endpoint, payload)
        except SUBMISSION_ERRORS as e:
            logger.error(f"Submission of '{self.schema.title}' failed: {e}")
            return SubmissionResult(False, error=e)
        except Exception as e:
            logger.error(f"Unexpected error submitting '{self.schema.title}': {e}", exc_info=True)
            return SubmissionResult(False, error=UnexpectedSubmissionError(e))
        finally:
            self.loading = False

        self.reset()
        return SubmissionResult(True, response=response)
