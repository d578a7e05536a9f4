"""
Change tracking between a seeded form and its current values.

Uses DeepDiff with light normalization (numeric strings, blank strings,
placeholders, uploaded files) so that cosmetic differences such as "1500"
versus 1500 are not reported as edits.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from deepdiff import DeepDiff

from .validation import PLACEHOLDER

logger = logging.getLogger(__name__)

_ROOT_KEY_RE = re.compile(r"^root\[['\"]([^'\"]+)['\"]\]")


def _normalize_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value in ('', PLACEHOLDER):
            return None
        try:
            number = float(value.replace(',', ''))
        except ValueError:
            return value
        return int(number) if number.is_integer() else number
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item) for item in value]
    if hasattr(value, 'getvalue') or hasattr(value, 'read'):
        # Uploaded file objects compare by name.
        return f"<file {getattr(value, 'name', 'upload')}>"
    return value


def _root_key(path: str) -> Optional[str]:
    match = _ROOT_KEY_RE.match(path)
    return match.group(1) if match else None


def calculate_changes(
    original: Mapping[str, Any],
    modified: Mapping[str, Any],
    fields: Optional[Iterable[str]] = None
) -> List[Dict[str, Any]]:
    """
    List the fields whose value differs between two form states.

    Args:
        original: Seeded values
        modified: Current values
        fields: Restrict the comparison to these field names

    Returns:
        One entry per changed field, in ``modified`` key order:
        {'field': name, 'old': original value, 'new': current value}
    """
    keys = list(fields) if fields is not None else list(dict.fromkeys([*original.keys(), *modified.keys()]))
    orig = {k: _normalize_value(original.get(k)) for k in keys}
    mod = {k: _normalize_value(modified.get(k)) for k in keys}

    diff = DeepDiff(orig, mod, ignore_order=True, view='tree')

    changed = set()
    for report_type in diff:
        for level in diff[report_type]:
            key = _root_key(level.path())
            if key is not None:
                changed.add(key)

    changes = [
        {'field': key, 'old': original.get(key), 'new': modified.get(key)}
        for key in keys
        if key in changed
    ]
    logger.debug(f"Detected {len(changes)} changed fields")
    return changes


def has_changes(original: Mapping[str, Any], modified: Mapping[str, Any],
                fields: Optional[Iterable[str]] = None) -> bool:
    return bool(calculate_changes(original, modified, fields))


def format_value(value: Any, max_length: int = 80) -> str:
    """Short display form of a field value."""
    if value is None or value == '':
        return '-'
    if isinstance(value, (list, tuple)):
        text = ', '.join(format_value(item, max_length) for item in value) or '-'
    elif hasattr(value, 'getvalue') or hasattr(value, 'read'):
        text = getattr(value, 'name', 'upload')
    else:
        text = str(value)
    if len(text) > max_length:
        text = text[:max_length - 3] + '...'
    return text
