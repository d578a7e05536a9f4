"""
Pydantic models for the REST API wire format.
Covers property and user records plus the list/read response wrappers.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class Owner(BaseModel):
    """Owner contact embedded in a property record."""

    model_config = ConfigDict(extra='ignore')

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PropertyRecord(BaseModel):
    """Full property as returned by GET /api/properties/{id}."""

    model_config = ConfigDict(extra='ignore')

    id: Optional[Union[int, str]] = None
    type: Optional[str] = None
    name: Optional[str] = None
    location: Optional[str] = None
    price: Optional[Union[float, str]] = None
    area: Optional[Union[float, str]] = None
    parking: Optional[Union[bool, int, str]] = None
    description: Optional[str] = None
    unit_number: Optional[Union[int, str]] = None
    unit_type: Optional[str] = None
    unit_status: Optional[str] = None
    title: Optional[str] = None
    payment: Optional[str] = None
    turnover: Optional[str] = None
    terms: Optional[str] = None
    category: Optional[str] = None
    badge: Optional[str] = None
    published: Optional[Union[bool, int, str]] = None
    status: Optional[str] = None
    sale_type: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    images: List[Any] = Field(default_factory=list)
    owner: Owner = Field(default_factory=Owner)

    @field_validator('amenities', mode='before')
    @classmethod
    def parse_amenities(cls, value: Any) -> Any:
        """Amenities may arrive JSON-encoded, e.g. '["Pool","Gym"]'."""
        if value is None or value == '':
            return []
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                logger.warning(f"Amenities string is not valid JSON: {value!r}")
                return [item.strip() for item in value.split(',') if item.strip()]
            return parsed if isinstance(parsed, list) else [parsed]
        return value

    @field_validator('images', mode='before')
    @classmethod
    def parse_images(cls, value: Any) -> Any:
        if value is None or value == '':
            return []
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                return [value]
            return parsed if isinstance(parsed, list) else [parsed]
        return value

    @field_validator('owner', mode='before')
    @classmethod
    def default_owner(cls, value: Any) -> Any:
        return value or {}


class UserRecord(BaseModel):
    """Row of GET /api/users."""

    model_config = ConfigDict(extra='ignore')

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    email: Optional[str] = None
    type: Optional[str] = None


class RecordListResponse(BaseModel):
    """Collection wrapper: {code, message, records}."""

    model_config = ConfigDict(extra='ignore')

    code: Optional[int] = None
    message: Optional[str] = None
    records: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator('records', mode='before')
    @classmethod
    def default_records(cls, value: Any) -> Any:
        return value or []


class PropertyResponse(BaseModel):
    """Read wrapper: {record: {...}}."""

    model_config = ConfigDict(extra='ignore')

    code: Optional[int] = None
    message: Optional[str] = None
    record: Optional[PropertyRecord] = None


def parse_record_list(payload: Any) -> List[Dict[str, Any]]:
    """
    Extract the records list from a collection response.

    Args:
        payload: Decoded JSON body

    Returns:
        List of record dictionaries (empty for a missing or null records key)

    Raises:
        ValueError: If the body does not match the collection wrapper
    """
    try:
        return RecordListResponse.model_validate(payload).records
    except ValidationError as e:
        logger.error(f"Unexpected collection response shape: {e}")
        raise ValueError(f"Unexpected collection response: {e}") from e


def parse_property_response(payload: Any) -> Optional[PropertyRecord]:
    """Extract the property record from a read response, or None when absent."""
    try:
        return PropertyResponse.model_validate(payload).record
    except ValidationError as e:
        logger.error(f"Unexpected property response shape: {e}")
        raise ValueError(f"Unexpected property response: {e}") from e
