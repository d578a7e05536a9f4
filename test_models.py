"""
Unit tests for the API wire-format models.
"""

import pytest

from admin_console.models import PropertyRecord, parse_property_response, parse_record_list


class TestPropertyRecord:
    """Test cases for PropertyRecord parsing."""

    def test_amenities_json_string_is_decoded(self):
        record = PropertyRecord.model_validate({'amenities': '["Pool","Gym"]'})
        assert record.amenities == ['Pool', 'Gym']

    def test_amenities_comma_string_fallback(self):
        record = PropertyRecord.model_validate({'amenities': 'Pool, Gym'})
        assert record.amenities == ['Pool', 'Gym']

    def test_amenities_list_and_null(self):
        assert PropertyRecord.model_validate({'amenities': ['Garden']}).amenities == ['Garden']
        assert PropertyRecord.model_validate({'amenities': None}).amenities == []

    def test_missing_owner_defaults_to_empty_contact(self):
        record = PropertyRecord.model_validate({'name': 'Azure Tower', 'owner': None})
        assert record.owner.first_name is None
        assert record.owner.email is None

    def test_images_json_string(self):
        record = PropertyRecord.model_validate({'images': '["a.jpg", "b.jpg"]'})
        assert record.images == ['a.jpg', 'b.jpg']

    def test_unknown_keys_are_ignored(self):
        record = PropertyRecord.model_validate({'name': 'Azure Tower', 'created_at': '2025-01-01'})
        assert not hasattr(record, 'created_at')


class TestResponseWrappers:
    """Test cases for the list/read wrappers."""

    def test_record_list(self):
        payload = {'code': 200, 'message': 'ok', 'records': [{'id': 1}, {'id': 2}]}
        assert parse_record_list(payload) == [{'id': 1}, {'id': 2}]

    def test_null_or_missing_records_are_empty(self):
        assert parse_record_list({'code': 200, 'records': None}) == []
        assert parse_record_list({'code': 200}) == []

    def test_bad_record_list_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_record_list({'records': 'nope'})
        with pytest.raises(ValueError):
            parse_record_list(['not', 'a', 'wrapper'])

    def test_property_response(self):
        record = parse_property_response({'record': {
            'id': 42, 'name': 'Azure Tower', 'amenities': '["Pool"]',
            'owner': {'first_name': 'Juan', 'phone': '0917'},
        }})
        assert record.id == 42
        assert record.amenities == ['Pool']
        assert record.owner.first_name == 'Juan'

    def test_property_response_without_record(self):
        assert parse_property_response({'code': 404, 'message': 'Not found'}) is None
