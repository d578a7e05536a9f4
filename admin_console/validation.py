"""
Declarative validation for admin console forms.

A ValidationSchema is an ordered list of FieldSpecs, each holding an ordered
list of FieldRules (kind + message). Rules run in schema order and the first
failing rule of a field produces that field's message. Only active fields
(see sections.py) are evaluated.
"""

import logging
import math
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from dateutil import parser as date_parser

from .sections import ConditionalSection, active_fields, open_sections

logger = logging.getLogger(__name__)

PLACEHOLDER = "N/A"

RULE_KINDS = {'required', 'type', 'pattern', 'range', 'min_items'}

# Field types understood by the form controller and the widget renderer.
FIELD_TYPES = {
    'string', 'text', 'number', 'integer', 'boolean', 'date',
    'choice', 'array', 'files', 'hidden', 'password'
}


@dataclass(frozen=True)
class FieldRule:
    """One validation rule: a kind, its parameters and a human-readable message."""

    kind: str
    message: str
    params: Tuple[Tuple[str, Any], ...] = ()

    def param(self, name: str, default: Any = None) -> Any:
        for key, value in self.params:
            if key == name:
                return value
        return default


@dataclass
class FieldSpec:
    """Declaration of one form field."""

    name: str
    type: str = 'string'
    label: str = ''
    default: Any = None
    placeholder: Optional[str] = None
    choices: List[str] = field(default_factory=list)
    rules: List[FieldRule] = field(default_factory=list)
    help: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace('_', ' ').title()

    def empty_value(self) -> Any:
        """Initial value when neither a default nor a seed is provided."""
        if self.default is not None:
            return self.default
        if self.type in ('array', 'files'):
            return []
        if self.type == 'boolean':
            return False
        if self.placeholder is not None:
            return self.placeholder
        return ''


@dataclass
class ValidationSchema:
    """Ordered field declarations plus the conditional sections gating them."""

    title: str
    fields: "OrderedDict[str, FieldSpec]"
    sections: List[ConditionalSection] = field(default_factory=list)
    endpoint: str = ''

    def field_names(self) -> List[str]:
        return list(self.fields.keys())

    def active_fields(self, values: Mapping[str, Any]) -> Set[str]:
        """Names of the fields currently active for ``values``."""
        return active_fields(self.sections, values, self.fields.keys())

    def open_sections(self, values: Mapping[str, Any]) -> List[str]:
        return open_sections(self.sections, values, self.fields.keys())


def is_blank(value: Any, spec: Optional[FieldSpec] = None) -> bool:
    """True for None, whitespace-only strings and the 'not provided' placeholder."""
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        if stripped == '':
            return True
        if spec is not None and spec.placeholder is not None and stripped == spec.placeholder:
            return True
    return False


def to_number(value: Any, integer: bool = False) -> Optional[float]:
    """
    Parse numeric form input.

    Plain decimal or exponent notation only; thousands separators such as
    "1,500" are rejected. Returns None for anything that is not a finite number
    (or not a whole number when ``integer`` is set).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if '_' in text:
            return None
        try:
            number = float(text)
        except (TypeError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    if integer and not number.is_integer():
        return None
    return number


def _check_type(spec: FieldSpec, rule: FieldRule, value: Any) -> bool:
    expected = rule.param('expected', spec.type)

    if expected in ('number', 'integer'):
        return to_number(value, integer=expected == 'integer') is not None

    if expected == 'boolean':
        if isinstance(value, bool):
            return True
        return str(value).strip().lower() in ('0', '1', 'true', 'false')

    if expected == 'date':
        if hasattr(value, 'year') and hasattr(value, 'month') and hasattr(value, 'day'):
            return True
        try:
            date_parser.parse(str(value))
            return True
        except (ValueError, OverflowError):
            return False

    if expected == 'choice':
        choices = [str(c) for c in spec.choices]
        if isinstance(value, (list, tuple)):
            return all(str(item) in choices for item in value)
        return str(value) in choices

    if expected == 'array':
        return isinstance(value, (list, tuple))

    return isinstance(value, str)


def _check_range(rule: FieldRule, value: Any) -> bool:
    number = to_number(value)
    if number is None:
        # Non-numeric input is reported by the type rule.
        return True
    if rule.param('positive') and number <= 0:
        return False
    minimum = rule.param('min')
    if minimum is not None and number < minimum:
        return False
    maximum = rule.param('max')
    if maximum is not None and number > maximum:
        return False
    return True


def check_rule(spec: FieldSpec, rule: FieldRule, value: Any) -> bool:
    """
    Evaluate one rule against a value.

    Args:
        spec: Field declaration the rule belongs to
        rule: Rule to evaluate
        value: Current field value

    Returns:
        True when the value satisfies the rule
    """
    if rule.kind == 'required':
        if spec.type in ('array', 'files'):
            return value is not None
        return not is_blank(value, spec)

    if rule.kind == 'min_items':
        count = len(value) if isinstance(value, (list, tuple)) else 0
        return count >= int(rule.param('count', 1))

    # Remaining rules only apply to provided values.
    if is_blank(value, spec):
        return True

    if rule.kind == 'type':
        return _check_type(spec, rule, value)

    if rule.kind == 'pattern':
        pattern = rule.param('regex', '')
        try:
            return re.match(pattern, str(value)) is not None
        except re.error:
            logger.error(f"Invalid regex pattern for field {spec.name}: {pattern}")
            return True

    if rule.kind == 'range':
        return _check_range(rule, value)

    logger.warning(f"Unknown rule kind '{rule.kind}' on field {spec.name}")
    return True


def validate_field(spec: FieldSpec, value: Any) -> Optional[str]:
    """Return the message of the first failing rule, or None."""
    for rule in spec.rules:
        if not check_rule(spec, rule, value):
            return rule.message
    return None


def validate_values(
    schema: ValidationSchema,
    values: Mapping[str, Any],
    touched: Optional[Iterable[str]] = None,
    touched_only: bool = False
) -> Dict[str, str]:
    """
    Validate values against the schema.

    Args:
        schema: Validation schema
        values: Current field values
        touched: Field names the user interacted with
        touched_only: Report errors for touched fields only

    Returns:
        Mapping of field name to error message, in schema order
    """
    active = schema.active_fields(values)
    touched_set = set(touched or ())
    errors: Dict[str, str] = {}

    for name, spec in schema.fields.items():
        if name not in active:
            continue
        if touched_only and name not in touched_set:
            continue
        message = validate_field(spec, values.get(name))
        if message:
            errors[name] = message

    if errors:
        logger.debug(f"Validation of '{schema.title}' failed for: {list(errors)}")
    return errors
