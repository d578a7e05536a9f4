"""
Unit tests for schema loading.
"""

import json

import pytest

from admin_console.exceptions import SchemaLoadError
from admin_console.schema_loader import build_rules, load_schema
from conftest import SCHEMAS_DIR


class TestShippedSchemas:
    """Test cases for the schema files in schemas/."""

    @pytest.mark.parametrize("schema_file,endpoint", [
        ("property_schema.yaml", "/api/properties"),
        ("property_edit_schema.yaml", "/api/properties"),
        ("user_schema.yaml", "/api/users"),
        ("user_edit_schema.yaml", "/api/users"),
    ])
    def test_loads(self, schema_file, endpoint):
        schema = load_schema(schema_file, schemas_dir=SCHEMAS_DIR)
        assert schema.fields
        assert schema.endpoint == endpoint

    def test_property_sections(self, property_schema):
        names = [section.name for section in property_schema.sections]
        assert names == ['rent', 'sale', 'ready_for_occupancy', 'pre_selling']
        rfo = property_schema.sections[2]
        assert rfo.parent == 'sale'
        assert set(rfo.fields) == {'payment', 'title'}

    def test_edit_schema_carries_method_override(self, property_edit_schema, user_edit_schema):
        for schema in (property_edit_schema, user_edit_schema):
            spec = schema.fields['_method']
            assert spec.type == 'hidden'
            assert spec.default == 'PUT'

    def test_edit_schema_placeholders(self, property_edit_schema):
        assert property_edit_schema.fields['terms'].placeholder == 'N/A'
        assert property_edit_schema.fields['name'].placeholder is None

    def test_cached_until_modified(self):
        first = load_schema("user_schema.yaml", schemas_dir=SCHEMAS_DIR)
        assert load_schema("user_schema.yaml", schemas_dir=SCHEMAS_DIR) is first


class TestBuildRules:
    """Test cases for rule construction."""

    def test_rule_order(self):
        rules = build_rules('price', {
            'type': 'number', 'required': True, 'positive': True,
            'messages': {'range': 'Price must be positive'},
        })
        assert [rule.kind for rule in rules] == ['required', 'type', 'range']
        assert rules[0].message == 'Price is required'
        assert rules[2].message == 'Price must be positive'

    def test_min_length_becomes_pattern(self):
        rules = build_rules('password', {'type': 'password', 'min_length': 8})
        assert rules[0].kind == 'pattern'
        assert rules[0].param('regex') == r"^[\s\S]{8,}$"
        assert rules[0].message == 'Password must be at least 8 characters'

    def test_min_items(self):
        rules = build_rules('amenities', {'type': 'array', 'min_items': 1, 'choices': ['Pool']})
        assert [rule.kind for rule in rules] == ['type', 'min_items']


class TestInvalidSchemas:
    """Test cases for malformed schema files."""

    def _write(self, tmp_path, name, text):
        (tmp_path / name).write_text(text)
        return name

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaLoadError, match="file not found"):
            load_schema("nope.yaml", schemas_dir=tmp_path)

    @pytest.mark.parametrize("text,issue", [
        ("- a\n- b\n", "dictionary"),
        ("title: x\n", "non-empty 'fields'"),
        ("fields:\n  a:\n    type: widget\n", "unsupported type"),
        ("fields:\n  a:\n    type: choice\n", "must define choices"),
        ("fields:\n  a: {}\nsections:\n  - name: s\n    field: b\n", "not a declared field"),
        ("fields:\n  a: {}\nsections:\n  - name: s\n    field: a\n    fields: [c]\n", "undeclared field"),
        ("fields:\n  a: {}\nsections:\n  - name: s\n    field: a\n    parent: p\n", "declared before"),
    ])
    def test_structure_errors(self, tmp_path, text, issue):
        name = self._write(tmp_path, "bad.yaml", text)
        with pytest.raises(SchemaLoadError, match=issue):
            load_schema(name, schemas_dir=tmp_path)

    def test_yaml_syntax_error(self, tmp_path):
        name = self._write(tmp_path, "broken.yaml", "fields: [unclosed\n")
        with pytest.raises(SchemaLoadError, match="YAML parsing error"):
            load_schema(name, schemas_dir=tmp_path)

    def test_unsupported_extension(self, tmp_path):
        name = self._write(tmp_path, "schema.txt", "fields: {}")
        with pytest.raises(SchemaLoadError, match="unsupported schema file format"):
            load_schema(name, schemas_dir=tmp_path)

    def test_json_schema(self, tmp_path):
        name = self._write(tmp_path, "form.json", json.dumps({
            'title': 'Inquiry',
            'endpoint': '/api/inquiries',
            'fields': {'message': {'type': 'text', 'required': True}},
        }))
        schema = load_schema(name, schemas_dir=tmp_path)
        assert schema.title == 'Inquiry'
        assert schema.fields['message'].rules[0].message == 'Message is required'
