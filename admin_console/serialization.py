"""
Transport payload serialization for form submissions.

serialize() returns a tagged payload: JsonPayload when every active value is a
scalar, MultipartPayload (ordered key/value pairs) as soon as an array or a
file list is present. Arrays become repeated ``key[]`` string entries, file
lists repeated ``key[]`` binary entries, and booleans are encoded "0"/"1".
"""

import logging
import mimetypes
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .validation import FieldSpec, ValidationSchema, to_number

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FilePart:
    """One binary entry of a multipart payload."""

    filename: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    def as_requests_tuple(self) -> Tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


@dataclass
class JsonPayload:
    """Plain key -> string mapping, sent as a JSON body."""

    data: Dict[str, str] = field(default_factory=dict)

    kind = 'json'


@dataclass
class MultipartPayload:
    """Ordered key/value pairs, sent as multipart/form-data."""

    pairs: List[Tuple[str, Union[str, FilePart]]] = field(default_factory=list)

    kind = 'multipart'

    def form_fields(self) -> List[Tuple[str, str]]:
        """Text entries, in payload order."""
        return [(key, value) for key, value in self.pairs if not isinstance(value, FilePart)]

    def file_fields(self) -> List[Tuple[str, Tuple[str, bytes, str]]]:
        """Binary entries in the (name, (filename, content, content_type)) form requests expects."""
        return [
            (key, value.as_requests_tuple())
            for key, value in self.pairs
            if isinstance(value, FilePart)
        ]

    def count(self, key: str) -> int:
        return sum(1 for pair_key, _ in self.pairs if pair_key == key)


TransportPayload = Union[JsonPayload, MultipartPayload]


def stringify(value: Any) -> str:
    """Encode a scalar field value for transport."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, Decimal):
        return format(value, 'f')
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def encode_field(spec: FieldSpec, value: Any) -> str:
    """Encode one scalar value; numeric fields are sent in normalized form ("1e3" -> "1000")."""
    if spec.type in ('number', 'integer'):
        number = to_number(value, integer=spec.type == 'integer')
        if number is not None:
            return stringify(number)
    return stringify(value)


def to_file_part(item: Any) -> Optional[FilePart]:
    """
    Convert an uploaded file object to a FilePart.

    Accepts FilePart, objects exposing getvalue() (Streamlit UploadedFile,
    BytesIO) or read(), and raw bytes. Strings (URLs of images already stored
    on the server) are not uploads and yield None.
    """
    if isinstance(item, FilePart):
        return item
    if isinstance(item, str) or item is None:
        return None
    if isinstance(item, (bytes, bytearray)):
        return FilePart("upload", bytes(item))

    if hasattr(item, 'getvalue'):
        content = item.getvalue()
    elif hasattr(item, 'read'):
        content = item.read()
    else:
        logger.warning(f"Skipping unsupported file object of type {type(item).__name__}")
        return None

    filename = getattr(item, 'name', None) or "upload"
    content_type = getattr(item, 'type', None)
    if not content_type:
        content_type = mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
    return FilePart(str(filename), bytes(content), content_type)


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def serialize(
    schema: ValidationSchema,
    values: Mapping[str, Any],
    active: Optional[Iterable[str]] = None
) -> TransportPayload:
    """
    Serialize the active field values into a transport payload.

    Args:
        schema: Form schema (defines field order and which fields hold files)
        values: Current field values
        active: Active field names; computed from the schema when omitted

    Returns:
        MultipartPayload if any active value is an array or file list,
        JsonPayload otherwise
    """
    active_set = set(active) if active is not None else schema.active_fields(values)
    names = [name for name in schema.field_names() if name in active_set]

    if not any(_is_collection(values.get(name)) for name in names):
        data = {
            name: encode_field(schema.fields[name], values[name])
            for name in names
            if values.get(name) is not None
        }
        logger.debug(f"Serialized {len(data)} fields as JSON")
        return JsonPayload(data)

    pairs: List[Tuple[str, Union[str, FilePart]]] = []
    for name in names:
        value = values.get(name)
        if value is None:
            continue

        spec = schema.fields[name]
        if spec.type == 'files':
            items = value if _is_collection(value) else [value]
            for item in items:
                part = to_file_part(item)
                if part is None:
                    logger.debug(f"Not re-uploading existing file reference in '{name}'")
                    continue
                pairs.append((f"{name}[]", part))
        elif _is_collection(value):
            for item in value:
                pairs.append((f"{name}[]", stringify(item)))
        else:
            pairs.append((name, encode_field(spec, value)))

    logger.debug(f"Serialized {len(pairs)} multipart entries")
    return MultipartPayload(pairs)
