"""
Schema loader for the property admin console.
Loads YAML form schemas and builds ValidationSchema objects from them.
"""

import os
import json
import yaml
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple
import logging

from .config_loader import get_config_value
from .exceptions import SchemaLoadError
from .sections import ConditionalSection
from .validation import FIELD_TYPES, FieldRule, FieldSpec, ValidationSchema

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path("schemas")

# Parsed schemas keyed by (path, mtime) so edits on disk are picked up.
_schema_cache: Dict[Tuple[str, float], ValidationSchema] = {}


def get_schemas_dir() -> Path:
    return Path(get_config_value('schema', 'directory', str(SCHEMAS_DIR)))


def validate_schema_definition(schema: Any, schema_path: Path) -> None:
    """
    Validate the raw schema structure.

    Args:
        schema: Parsed YAML/JSON document
        schema_path: Source path, used in error messages

    Raises:
        SchemaLoadError: If the structure is invalid
    """
    if not isinstance(schema, dict):
        raise SchemaLoadError(schema_path, "schema must be a dictionary")

    fields = schema.get('fields')
    if not isinstance(fields, dict) or not fields:
        raise SchemaLoadError(schema_path, "schema must contain a non-empty 'fields' mapping")

    for field_name, field_config in fields.items():
        if not isinstance(field_config, dict):
            raise SchemaLoadError(schema_path, f"field '{field_name}' config must be a dictionary")
        field_type = field_config.get('type', 'string')
        if field_type not in FIELD_TYPES:
            raise SchemaLoadError(
                schema_path,
                f"field '{field_name}' has unsupported type '{field_type}'"
            )
        if field_type == 'choice' and not field_config.get('choices'):
            raise SchemaLoadError(schema_path, f"choice field '{field_name}' must define choices")

    section_names = set()
    for section in schema.get('sections') or []:
        if not isinstance(section, dict):
            raise SchemaLoadError(schema_path, "each section must be a dictionary")
        name = section.get('name')
        if not name:
            raise SchemaLoadError(schema_path, "each section must have a name")
        controller = section.get('field')
        if controller not in fields:
            raise SchemaLoadError(
                schema_path, f"section '{name}' controller '{controller}' is not a declared field"
            )
        for gated in section.get('fields') or []:
            if gated not in fields:
                raise SchemaLoadError(
                    schema_path, f"section '{name}' gates undeclared field '{gated}'"
                )
        parent = section.get('parent')
        if parent is not None and parent not in section_names:
            raise SchemaLoadError(
                schema_path, f"section '{name}' parent '{parent}' must be declared before it"
            )
        section_names.add(name)


def build_rules(field_name: str, config: Dict[str, Any]) -> List[FieldRule]:
    """
    Build the ordered rule list for one field.

    Order: required, type check, pattern, minimum length, numeric range,
    minimum array size.
    Messages come from the field's ``messages`` mapping when provided.
    """
    label = config.get('label') or field_name.replace('_', ' ').title()
    field_type = config.get('type', 'string')
    messages = config.get('messages') or {}
    rules: List[FieldRule] = []

    if config.get('required'):
        rules.append(FieldRule('required', messages.get('required', f"{label} is required")))

    if field_type in ('number', 'integer'):
        default_message = f"{label} must be {'a whole number' if field_type == 'integer' else 'a number'}"
        rules.append(FieldRule('type', messages.get('type', default_message),
                               (('expected', field_type),)))
    elif field_type == 'boolean':
        rules.append(FieldRule('type', messages.get('type', f"{label} must be true or false"),
                               (('expected', 'boolean'),)))
    elif field_type == 'date':
        rules.append(FieldRule('type', messages.get('type', f"{label} must be a valid date"),
                               (('expected', 'date'),)))
    elif field_type == 'choice' or (field_type == 'array' and config.get('choices')):
        choices = ', '.join(str(c) for c in config.get('choices', []))
        rules.append(FieldRule('type', messages.get('type', f"{label} must be one of: {choices}"),
                               (('expected', 'choice'),)))

    if config.get('pattern'):
        rules.append(FieldRule('pattern', messages.get('pattern', f"{label} format is invalid"),
                               (('regex', config['pattern']),)))

    if config.get('min_length') is not None:
        length = int(config['min_length'])
        rules.append(FieldRule(
            'pattern',
            messages.get('min_length', f"{label} must be at least {length} characters"),
            (('regex', rf"^[\s\S]{{{length},}}$"),)
        ))

    positive = bool(config.get('positive'))
    min_value = config.get('min_value')
    max_value = config.get('max_value')
    if positive or min_value is not None or max_value is not None:
        if positive:
            default_message = f"{label} must be positive"
        elif min_value is not None and max_value is not None:
            default_message = f"{label} must be between {min_value} and {max_value}"
        elif min_value is not None:
            default_message = f"{label} must be at least {min_value}"
        else:
            default_message = f"{label} must be at most {max_value}"
        rules.append(FieldRule('range', messages.get('range', default_message),
                               (('positive', positive), ('min', min_value), ('max', max_value))))

    if config.get('min_items') is not None:
        count = int(config['min_items'])
        rules.append(FieldRule(
            'min_items',
            messages.get('min_items', f"At least {count} {label.lower()} required"),
            (('count', count),)
        ))

    return rules


def build_schema(raw: Dict[str, Any], schema_path: Path) -> ValidationSchema:
    """Turn a validated raw schema document into a ValidationSchema."""
    validate_schema_definition(raw, schema_path)

    fields: "OrderedDict[str, FieldSpec]" = OrderedDict()
    for field_name, config in raw['fields'].items():
        fields[field_name] = FieldSpec(
            name=field_name,
            type=config.get('type', 'string'),
            label=config.get('label', ''),
            default=config.get('default'),
            placeholder=config.get('placeholder'),
            choices=[str(c) for c in config.get('choices', [])],
            rules=build_rules(field_name, config),
            help=config.get('help'),
        )

    sections = []
    for section in raw.get('sections') or []:
        equals = section.get('equals')
        if not isinstance(equals, list):
            equals = [equals]
        sections.append(ConditionalSection(
            name=section['name'],
            controller=section['field'],
            equals=frozenset(str(v) for v in equals),
            fields=tuple(section.get('fields') or ()),
            parent=section.get('parent'),
            label=section.get('label', ''),
        ))

    return ValidationSchema(
        title=raw.get('title', schema_path.stem),
        fields=fields,
        sections=sections,
        endpoint=raw.get('endpoint', ''),
    )


def load_schema(schema_file: str, schemas_dir: Optional[Path] = None) -> ValidationSchema:
    """
    Load a form schema from a YAML or JSON file.

    Args:
        schema_file: File name relative to the schemas directory
        schemas_dir: Override for the schemas directory

    Returns:
        ValidationSchema built from the file

    Raises:
        SchemaLoadError: If the file is missing, unparsable or invalid
    """
    full_path = (schemas_dir or get_schemas_dir()) / schema_file

    if not full_path.exists():
        raise SchemaLoadError(full_path, "file not found")

    mtime = os.path.getmtime(full_path)
    cache_key = (str(full_path), mtime)
    if cache_key in _schema_cache:
        return _schema_cache[cache_key]

    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            if full_path.suffix.lower() in ['.yaml', '.yml']:
                raw = yaml.safe_load(f)
            elif full_path.suffix.lower() == '.json':
                raw = json.load(f)
            else:
                raise SchemaLoadError(full_path, f"unsupported schema file format: {full_path.suffix}")
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {full_path}: {e}")
        raise SchemaLoadError(full_path, f"YAML parsing error: {e}") from e
    except json.JSONDecodeError as e:
        logger.error(f"JSON parsing error in {full_path}: {e}")
        raise SchemaLoadError(full_path, f"JSON parsing error: {e}") from e

    schema = build_schema(raw, full_path)
    _schema_cache[cache_key] = schema
    logger.info(f"Successfully loaded schema: {schema_file} ({len(schema.fields)} fields)")
    return schema


def get_form_schema(form_key: str) -> ValidationSchema:
    """
    Load the schema configured for a form.

    Args:
        form_key: One of 'property_create', 'property_edit', 'user_create', 'user_edit'
    """
    schema_file = get_config_value('schema', form_key)
    if not schema_file:
        raise SchemaLoadError(Path(form_key), f"no schema configured for '{form_key}'")
    return load_schema(schema_file)
