"""
Property and user form wiring: list columns, create defaults and edit seeds.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .api_client import ApiClient
from .form_controller import FormController
from .models import PropertyRecord, UserRecord
from .schema_loader import get_form_schema
from .table_viewer import CellAction, Column
from .validation import PLACEHOLDER

logger = logging.getLogger(__name__)

PROPERTIES_PATH = "/api/properties"
USERS_PATH = "/api/users"

# Edit-form fields that show "N/A" instead of an empty value when not provided
PLACEHOLDER_FIELDS = ('description', 'title', 'payment', 'turnover', 'terms', 'sale_type')


def format_price(value: Any) -> str:
    """Peso amount with two decimals; unparsable values are shown as-is."""
    try:
        return f"₱{float(str(value).replace(',', '')):.2f}"
    except (TypeError, ValueError):
        return "" if value is None else str(value)


def property_columns(on_details: Optional[Callable[[Any], None]] = None) -> List[Column]:
    return [
        Column('name', 'Name', width=3),
        Column('location', 'Location', width=3),
        Column('price', 'Min Price', render=lambda record: format_price(record.get('price')), width=2),
        Column('details', 'Actions', render=lambda record: CellAction('Details', on_details), width=1),
    ]


def user_columns(on_edit: Optional[Callable[[Any], None]] = None) -> List[Column]:
    return [
        Column('name', 'Name', width=3),
        Column('email', 'Email', width=3),
        Column('type', 'Type', width=2),
        Column('edit', 'Actions', render=lambda record: CellAction('Edit', on_edit), width=1),
    ]


def property_create_seed(user_id: Optional[str]) -> Dict[str, Any]:
    """Initial values of the create form beyond the schema defaults."""
    return {'user_id': user_id} if user_id else {}


def seed_from_property(record: PropertyRecord, property_id: Any = None) -> Dict[str, Any]:
    """
    Flatten a fetched property into edit-form values.

    Owner contact details move to top-level fields, optional descriptive fields
    fall back to "N/A", ``published``/``parking`` become booleans and existing
    image URLs are kept as strings (they are displayed, never re-uploaded).
    """
    values = record.model_dump(exclude={'owner'})
    owner = record.owner
    values.update({
        'first_name': owner.first_name or '',
        'last_name': owner.last_name or '',
        'email': owner.email or '',
        'phone': owner.phone or '',
    })

    for name in PLACEHOLDER_FIELDS:
        if not values.get(name):
            values[name] = PLACEHOLDER

    for name in ('published', 'parking'):
        values[name] = _as_bool(values.get(name))

    values['images'] = [image for image in record.images if isinstance(image, str)]
    values['id'] = str(property_id if property_id is not None else record.id)
    return values


def seed_from_user(user: Mapping[str, Any]) -> Dict[str, Any]:
    record = UserRecord.model_validate(user)
    values = record.model_dump()
    values['id'] = str(record.id) if record.id is not None else None
    return values


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('1', 'true', 'yes')


def build_property_create_form(api_client: ApiClient, user_id: Optional[str]) -> FormController:
    return FormController(get_form_schema('property_create'), api_client,
                          endpoint=PROPERTIES_PATH, seed=property_create_seed(user_id))


def build_property_edit_form(api_client: ApiClient, record: PropertyRecord,
                             property_id: Any) -> FormController:
    return FormController(get_form_schema('property_edit'), api_client,
                          endpoint=PROPERTIES_PATH, seed=seed_from_property(record, property_id))


def build_user_create_form(api_client: ApiClient) -> FormController:
    return FormController(get_form_schema('user_create'), api_client, endpoint=USERS_PATH)


def build_user_edit_form(api_client: ApiClient, user: Mapping[str, Any]) -> FormController:
    return FormController(get_form_schema('user_edit'), api_client,
                          endpoint=USERS_PATH, seed=seed_from_user(user))
