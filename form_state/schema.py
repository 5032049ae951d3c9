"""
Declarative types for form schemas.
A form is described by its initial value, one validation chain per field and
one value string parser per field.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Callable, Optional, List, Tuple
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import FormConfigError, MissingParserError, UnknownFieldError

logger = logging.getLogger(__name__)


class ParseStatus(str, Enum):
    """Classification of a raw string produced by a value string parser."""
    FULL = 'full'
    PARTIAL = 'partial'


ValidatorFn = Callable[[Any], bool]
ParseResult = Tuple[ParseStatus, Any]
ValueStringParser = Callable[[str], ParseResult]


@dataclass(frozen=True)
class Validation:
    """
    One entry of a field's validation chain.
    
    Attributes:
        validator: Authoritative predicate, used by validate() and check_error_on()
        msg: Message shown when the predicate fails
        instant_validator: Optional looser predicate used while the user edits
        block_change_on_error: When set, a failure stops handle_data_change from
            committing the typed value
    """
    validator: ValidatorFn
    msg: str
    instant_validator: Optional[ValidatorFn] = None
    block_change_on_error: bool = False
    
    def predicate(self, instant: bool = False) -> ValidatorFn:
        """Pick the predicate for a live edit (instant) or an authoritative check."""
        if instant and self.instant_validator is not None:
            return self.instant_validator
        return self.validator


class FieldError(BaseModel):
    """Error state of a single field."""
    model_config = ConfigDict(frozen=True)
    
    error: bool = False
    msg: str = ""
    
    @classmethod
    def clear(cls) -> 'FieldError':
        return cls(error=False, msg="")
    
    @classmethod
    def failed(cls, msg: str) -> 'FieldError':
        return cls(error=True, msg=msg)


class FormConfig(BaseModel):
    """
    Everything a form controller needs, supplied once at construction.
    
    The key set of ``initial_value`` fixes the fields of the form. Schema keys
    must be a subset of it and every key needs a value string parser.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        frozen=True,
    )
    
    fields_schema: Dict[str, Any] = Field(default_factory=dict, alias='schema')
    initial_value: Dict[str, Any]
    value_string_parsers: Dict[str, Callable[[str], Any]]
    
    @field_validator('initial_value', mode='before')
    @classmethod
    def _dump_models(cls, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump()
        return value
    
    @field_validator('fields_schema', mode='before')
    @classmethod
    def _normalize_chains(cls, value: Any) -> Dict[str, Optional[List[Validation]]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise FormConfigError(
                f"Schema must be a mapping of field name to validations, got {type(value).__name__}"
            )
        
        normalized = {}
        for key, chain in value.items():
            if chain is None:
                normalized[key] = None
                continue
            if isinstance(chain, (str, bytes)) or not hasattr(chain, '__iter__'):
                raise FormConfigError(
                    f"Validations for field '{key}' must be a sequence",
                    context={'key': key, 'type': type(chain).__name__}
                )
            entries = list(chain)
            for entry in entries:
                if not isinstance(entry, Validation):
                    raise FormConfigError(
                        f"Invalid validation entry for field '{key}': {entry!r}",
                        context={'key': key, 'type': type(entry).__name__},
                        recovery_suggestions=["Build chain entries with form_state.schema.Validation"]
                    )
            normalized[key] = entries
        return normalized
    
    @model_validator(mode='after')
    def _check_field_coverage(self) -> 'FormConfig':
        keys = list(self.initial_value.keys())
        
        missing = [key for key in keys if key not in self.value_string_parsers]
        if missing:
            raise MissingParserError(missing)
        
        for key in self.fields_schema:
            if key not in self.initial_value:
                raise UnknownFieldError(key, keys, f"Schema names unknown field: {key!r}")
        
        extra_parsers = [key for key in self.value_string_parsers if key not in self.initial_value]
        if extra_parsers:
            logger.debug(f"Ignoring parsers for undeclared fields: {extra_parsers}")
        
        return self
    
    @property
    def keys(self) -> List[str]:
        return list(self.initial_value.keys())
    
    def validations_for(self, key: str) -> Optional[List[Validation]]:
        """Return the chain for a field, or None when the field is not validated."""
        return self.fields_schema.get(key) or None
