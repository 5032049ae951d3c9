"""
Form definition loader.
Builds a FormConfig from a YAML or JSON field definition file.

Definition format::

    title: "Signup"
    fields:
      age:
        type: integer
        label: "Age"
        default: 20
        required: true
        min_value: 18
        messages:
          min_value: "too young"
"""

import json
import re
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
import logging

import yaml

from . import parsers, validators
from .exceptions import SchemaLoadError
from .schema import FormConfig, Validation, ValueStringParser

logger = logging.getLogger(__name__)

# Supported field types
SUPPORTED_FIELD_TYPES = {
    'string', 'number', 'integer', 'float', 'boolean', 'enum', 'array'
}

SCALAR_ITEM_TYPES = {'string', 'number', 'integer', 'float', 'boolean'}

TYPE_DEFAULTS = {
    'string': "",
    'enum': "",
    'integer': 0,
    'number': 0.0,
    'float': 0.0,
    'boolean': False,
}


def load_form_definition(schema_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a form definition from a YAML or JSON file.
    
    Args:
        schema_path: Path to the definition file
        
    Returns:
        Definition dictionary
        
    Raises:
        SchemaLoadError: If the file is missing, unparsable or invalid
    """
    full_path = Path(schema_path)
    
    if not full_path.exists():
        raise SchemaLoadError(full_path, "file not found")
    
    suffix = full_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise SchemaLoadError(full_path, f"unsupported file format '{full_path.suffix}'")
    
    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            if suffix == '.json':
                definition = json.load(f)
            else:
                definition = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaLoadError(full_path, "YAML parsing error", e) from e
    except json.JSONDecodeError as e:
        raise SchemaLoadError(full_path, "JSON parsing error", e) from e
    except (IOError, OSError) as e:
        raise SchemaLoadError(full_path, "file could not be read", e) from e
    
    problems = validate_form_definition(definition)
    if problems:
        raise SchemaLoadError(full_path, "; ".join(problems))
    
    logger.info(f"Successfully loaded form definition: {full_path}")
    return definition


def validate_form_definition(definition: Any) -> List[str]:
    """
    Check the structure of a form definition.
    
    Args:
        definition: Parsed definition
        
    Returns:
        List of problems; empty when the definition is usable
    """
    if not isinstance(definition, dict):
        return ["Definition must be a dictionary"]
    
    fields = definition.get('fields')
    if not isinstance(fields, dict) or not fields:
        return ["Definition must contain a non-empty 'fields' dictionary"]
    
    problems = []
    for field_name, field_config in fields.items():
        problems.extend(validate_field_config(field_name, field_config))
    return problems


def validate_field_config(field_name: str, field_config: Any) -> List[str]:
    """
    Check an individual field definition.
    
    Args:
        field_name: Name of the field
        field_config: Field configuration dictionary
        
    Returns:
        List of problems for this field
    """
    if not isinstance(field_config, dict):
        return [f"Field '{field_name}' config must be a dictionary"]
    
    field_type = field_config.get('type')
    if field_type is None:
        return [f"Field '{field_name}' must have a 'type'"]
    if field_type not in SUPPORTED_FIELD_TYPES:
        return [f"Field '{field_name}' has unsupported type '{field_type}'"]
    
    problems = []
    
    if field_type == 'enum':
        choices = field_config.get('choices')
        if not isinstance(choices, list) or not choices:
            problems.append(f"Enum field '{field_name}' choices must be a non-empty list")
    
    if field_type == 'array':
        items_type = (field_config.get('items') or {}).get('type', 'string')
        if items_type not in SCALAR_ITEM_TYPES:
            problems.append(f"Array field '{field_name}' items must be a scalar type, got '{items_type}'")
    
    if field_type in ('number', 'integer', 'float'):
        for constraint in ('min_value', 'max_value'):
            value = field_config.get(constraint)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                problems.append(f"Field '{field_name}' {constraint} must be a number")
    
    if field_type in ('string', 'array'):
        for constraint in ('min_length', 'max_length'):
            value = field_config.get(constraint)
            if value is not None and (not isinstance(value, int) or value < 0):
                problems.append(f"Field '{field_name}' {constraint} must be a non-negative integer")
    
    if 'pattern' in field_config:
        try:
            re.compile(field_config['pattern'])
        except re.error as e:
            problems.append(f"Field '{field_name}' has invalid regex pattern: {e}")
    
    return problems


def parser_for(field_config: Dict[str, Any]) -> ValueStringParser:
    """Pick the value string parser for a field type."""
    field_type = field_config.get('type', 'string')
    
    if field_type == 'integer':
        return parsers.integer_parser()
    if field_type in ('number', 'float'):
        return parsers.float_parser()
    if field_type == 'boolean':
        return parsers.boolean_parser
    if field_type == 'array':
        items_config = field_config.get('items') or {'type': 'string'}
        return parsers.list_parser(parser_for(items_config))
    return parsers.string_parser


def default_for(field_config: Dict[str, Any]) -> Any:
    if 'default' in field_config:
        return field_config['default']
    if field_config.get('type') == 'array':
        return []
    return TYPE_DEFAULTS.get(field_config.get('type', 'string'), "")


def build_validations(field_name: str, field_config: Dict[str, Any]) -> Optional[List[Validation]]:
    """
    Translate field constraints into a validation chain.
    
    Order: required, type check, length, range, pattern, choices.
    
    Returns:
        Chain for the field, or None when it has no constraints
    """
    messages = field_config.get('messages') or {}
    options = {}
    if field_config.get('block_change_on_error'):
        options['block_change_on_error'] = True
    
    field_type = field_config.get('type', 'string')
    chain: List[Validation] = []
    
    if field_config.get('required'):
        chain.append(validators.required(messages.get('required', "This field is required."), **options))
    
    if field_type in ('number', 'integer', 'float'):
        chain.append(validators.is_number(messages.get('type', "Must be a number."), **options))
    
    if 'min_length' in field_config:
        chain.append(validators.min_length(field_config['min_length'], messages.get('min_length'), **options))
    if 'max_length' in field_config:
        chain.append(validators.max_length(field_config['max_length'], messages.get('max_length'), **options))
    
    if 'min_value' in field_config:
        chain.append(validators.min_value(field_config['min_value'], messages.get('min_value'), **options))
    if 'max_value' in field_config:
        chain.append(validators.max_value(field_config['max_value'], messages.get('max_value'), **options))
    
    if 'pattern' in field_config:
        chain.append(validators.pattern(field_config['pattern'], messages.get('pattern'), **options))
    
    if field_type == 'enum':
        chain.append(validators.one_of(field_config['choices'], messages.get('choices'), **options))
    
    if not chain:
        logger.debug(f"Field '{field_name}' has no constraints")
        return None
    return chain


def build_form_config(definition: Dict[str, Any],
                      initial_value: Optional[Dict[str, Any]] = None) -> FormConfig:
    """
    Build a FormConfig from a form definition.
    
    Args:
        definition: Definition dictionary (see module docstring)
        initial_value: Values overriding field defaults, e.g. a loaded record
        
    Returns:
        FormConfig for the definition
    """
    problems = validate_form_definition(definition)
    if problems:
        raise SchemaLoadError(None, "; ".join(problems))
    
    fields = definition['fields']
    overrides = initial_value or {}
    
    schema = {}
    value_string_parsers = {}
    values = {}
    for field_name, field_config in fields.items():
        values[field_name] = overrides.get(field_name, default_for(field_config))
        value_string_parsers[field_name] = parser_for(field_config)
        schema[field_name] = build_validations(field_name, field_config)
    
    logger.info(f"Built form config with {len(fields)} fields")
    return FormConfig(
        schema=schema,
        initial_value=values,
        value_string_parsers=value_string_parsers,
    )


def load_form_config(schema_path: Union[str, Path],
                     initial_value: Optional[Dict[str, Any]] = None) -> FormConfig:
    """Load a definition file and build its FormConfig."""
    return build_form_config(load_form_definition(schema_path), initial_value)


def field_labels(definition: Dict[str, Any]) -> Dict[str, str]:
    """Map field names to display labels."""
    return {
        name: config.get('label', name.replace('_', ' ').title())
        for name, config in definition.get('fields', {}).items()
    }
