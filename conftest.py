"""
Shared pytest fixtures: the shipped form schemas and a valid property form.
"""

from pathlib import Path

import pytest

from admin_console.schema_loader import load_schema

SCHEMAS_DIR = Path(__file__).parent / "schemas"


@pytest.fixture
def property_schema():
    return load_schema("property_schema.yaml", schemas_dir=SCHEMAS_DIR)


@pytest.fixture
def property_edit_schema():
    return load_schema("property_edit_schema.yaml", schemas_dir=SCHEMAS_DIR)


@pytest.fixture
def user_schema():
    return load_schema("user_schema.yaml", schemas_dir=SCHEMAS_DIR)


@pytest.fixture
def user_edit_schema():
    return load_schema("user_edit_schema.yaml", schemas_dir=SCHEMAS_DIR)


@pytest.fixture
def valid_property_values():
    """A For Rent listing that passes every rule of the create schema."""
    return {
        'first_name': 'Juan',
        'last_name': 'Dela Cruz',
        'email': 'juan@example.com',
        'phone': '09171234567',
        'type': 'Owner',
        'name': 'Azure Tower',
        'unit_type': '1BR',
        'unit_status': 'Furnished',
        'location': 'Makati',
        'price': '25000',
        'area': '32',
        'unit_number': '12',
        'parking': True,
        'description': 'Corner unit',
        'status': 'For Rent',
        'terms': 'one-year',
        'sale_type': '',
        'payment': '',
        'title': '',
        'turnover': '',
        'amenities': ['Pool', 'Gym'],
        'images': [],
        'category': 'Condo',
        'badge': 'New',
        'published': False,
        'user_id': '7',
        'submit_status': 'Pending',
    }
