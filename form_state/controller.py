"""
Form state controller.

Holds three parallel projections of a form, keyed by the fields of its
initial value:

- ``data``: typed values, advanced by handle_data_change() and validate()
- ``p_data``: raw text of every field, advanced by handle_change()
- ``errors``: FieldError per field

``data`` and ``p_data`` may disagree while a field holds partial or invalid
text; validate() reconciles them from the text.
"""

from types import MappingProxyType
from typing import Any, Callable, ContextManager, Dict, Mapping, Optional, Union
import logging

from .exceptions import InvalidErrorStateError, UnknownFieldError
from .parsers import to_value_string
from .schema import FieldError, FormConfig, ParseStatus
from .state_store import StateStore
from .validation import run_validation_chain

logger = logging.getLogger(__name__)

DATA = 'data'
P_DATA = 'p_data'
ERRORS = 'errors'

ErrorsUpdate = Union[
    Mapping[str, Union[FieldError, Dict[str, Any]]],
    Callable[[Dict[str, FieldError]], Dict[str, FieldError]],
]


def _merge(key: str, value: Any) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Functional update replacing one entry of the latest applied map."""
    def update(current: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(current)
        merged[key] = value
        return merged
    return update


class FormController:
    """Maintains typed values, raw strings and errors of one form."""
    
    def __init__(self, config: FormConfig, store: Optional[StateStore] = None):
        """
        Initialize form state from the configuration.
        
        No validation runs here, even if the initial value would fail.
        Slices already present in the store (a rerun against session state)
        are kept as they are.
        
        Args:
            config: Schema, initial value and value string parsers
            store: State store; a fresh in-memory store when omitted
        """
        self.config = config
        self.store = store if store is not None else StateStore()
        self._initial_value = dict(config.initial_value)
        
        created = self.store.init_slice(DATA, dict(self._initial_value))
        self.store.init_slice(P_DATA, {
            key: to_value_string(value) for key, value in self._initial_value.items()
        })
        self.store.init_slice(ERRORS, {
            key: FieldError.clear() for key in self._initial_value
        })
        
        if created:
            logger.debug(f"Initialized form state for fields: {list(self._initial_value)}")
        else:
            logger.debug("Reusing existing form state from store")
    
    def __repr__(self) -> str:
        return f"FormController(fields={list(self._initial_value)})"
    
    # Current snapshots
    @property
    def data(self) -> Mapping[str, Any]:
        return MappingProxyType(self.store.get(DATA))
    
    @property
    def p_data(self) -> Mapping[str, str]:
        return MappingProxyType(self.store.get(P_DATA))
    
    @property
    def errors(self) -> Mapping[str, FieldError]:
        return MappingProxyType(self.store.get(ERRORS))
    
    @property
    def initial_value(self) -> Mapping[str, Any]:
        return MappingProxyType(self._initial_value)
    
    @property
    def has_errors(self) -> bool:
        return any(entry.error for entry in self.store.get(ERRORS).values())
    
    def batch(self) -> ContextManager[StateStore]:
        """Group several operations so their updates apply together."""
        return self.store.batch()
    
    def _check_key(self, key: str) -> None:
        if key not in self._initial_value:
            raise UnknownFieldError(key, list(self._initial_value))
    
    def _parse(self, key: str, value_string: str):
        status, value = self.config.value_string_parsers[key](value_string)
        return ParseStatus(status), value
    
    def handle_data_change(self, key: str, value: Any) -> bool:
        """
        Commit a typed value for a field, bypassing string parsing.
        
        The field's chain runs with instant validators where given. A failing
        entry sets the field error; if that entry blocks changes the typed
        value is not committed.
        
        Args:
            key: Field name
            value: Typed value
            
        Returns:
            True if the value was committed to data
        """
        self._check_key(key)
        self.store.set(ERRORS, _merge(key, FieldError.clear()))
        
        outcome = run_validation_chain(self.config.validations_for(key), value, instant=True)
        if outcome.error:
            self.store.set(ERRORS, _merge(key, outcome.to_field_error()))
            if outcome.block:
                logger.debug(f"Blocked change of '{key}' to {value!r}: {outcome.msg}")
                return False
        
        self.store.set(DATA, _merge(key, value))
        logger.debug(f"Committed '{key}' = {value!r}")
        return True
    
    def handle_change(self, key: str, value_string: str) -> None:
        """
        Commit raw text for a field.
        
        Fully parsed text is checked with the field's chain (instant
        validators where given) and the field error is set on failure.
        Partial text is not validated. The text is always stored in p_data,
        even when the failing entry blocks changes; data is left untouched.
        
        Args:
            key: Field name
            value_string: Raw input text
        """
        self._check_key(key)
        self.store.set(ERRORS, _merge(key, FieldError.clear()))
        
        status, value = self._parse(key, value_string)
        if status == ParseStatus.FULL:
            outcome = run_validation_chain(self.config.validations_for(key), value, instant=True)
            if outcome.error:
                self.store.set(ERRORS, _merge(key, outcome.to_field_error()))
        else:
            logger.debug(f"Skipping validation of partial input for '{key}': {value_string!r}")
        
        self.store.set(P_DATA, _merge(key, value_string))
    
    def validate(self) -> bool:
        """
        Check the whole form from its raw text.
        
        Every validated field is re-parsed from p_data (parse status is
        ignored) and checked with its authoritative validators. Fields without
        validations keep their initial value. The error map is replaced with
        the result; data is replaced only when every field passes.
        
        Returns:
            True if the form is valid
        """
        p_data = self.store.get(P_DATA)
        data = dict(self._initial_value)
        errors = {key: FieldError.clear() for key in self._initial_value}
        is_valid = True
        
        for key in self.config.fields_schema:
            validations = self.config.validations_for(key)
            if not validations:
                continue
            
            _, value = self._parse(key, p_data[key])
            data[key] = value
            
            outcome = run_validation_chain(validations, value)
            if outcome.error:
                errors[key] = outcome.to_field_error()
                is_valid = False
        
        self.store.set(ERRORS, errors)
        if is_valid:
            self.store.set(DATA, data)
        
        failed = [key for key, entry in errors.items() if entry.error]
        if is_valid:
            logger.info("Form validation passed")
        else:
            logger.info(f"Form validation failed for fields: {failed}")
        return is_valid
    
    def reset_data(self) -> None:
        """
        Restore typed values to the initial value.
        
        p_data and errors are left as they are, so the text of a field can
        disagree with its typed value until the next validate().
        """
        self.store.set(DATA, dict(self._initial_value))
        logger.info("Form data reset to initial value")
    
    def check_error_on(self, key: str) -> Optional[FieldError]:
        """
        Re-check a single field from its raw text.
        
        Uses authoritative validators only and touches no other field.
        
        Args:
            key: Field name
            
        Returns:
            The field's new error entry, or None if the field is not validated
        """
        self._check_key(key)
        _, value = self._parse(key, self.store.get(P_DATA)[key])
        
        validations = self.config.validations_for(key)
        if not validations:
            return None
        
        entry = run_validation_chain(validations, value).to_field_error()
        self.store.set(ERRORS, _merge(key, entry))
        return entry
    
    def _checked_error_map(self, errors: Mapping[str, Any]) -> Dict[str, FieldError]:
        """Coerce an error map and check it covers every field consistently."""
        problems = []
        missing = [key for key in self._initial_value if key not in errors]
        if missing:
            problems.append(f"missing entries for {missing}")
        unknown = [key for key in errors if key not in self._initial_value]
        if unknown:
            problems.append(f"unknown fields {unknown}")
        
        checked = {}
        for key, entry in errors.items():
            if not isinstance(entry, FieldError):
                entry = FieldError(**entry)
            if entry.error != bool(entry.msg):
                problems.append(f"'{key}' error flag and message disagree")
            checked[key] = entry
        
        if problems:
            raise InvalidErrorStateError(problems)
        return checked
    
    def set_errors(self, errors: ErrorsUpdate) -> None:
        """
        Override error state directly.
        
        Args:
            errors: Mapping of field name to FieldError (or its dict form),
                merged over the current map, or a function from the current
                map to the next one
                
        Raises:
            InvalidErrorStateError: If the resulting map drops a field, names an
                unknown one, or has an entry whose flag and message disagree
        """
        if callable(errors):
            self.store.set(ERRORS, lambda current: self._checked_error_map(errors(dict(current))))
            return
        
        for key in errors:
            self._check_key(key)
        overrides = self._checked_error_map({**self.store.get(ERRORS), **errors})
        overrides = {key: overrides[key] for key in errors}
        
        def update(current: Dict[str, FieldError]) -> Dict[str, FieldError]:
            merged = dict(current)
            merged.update(overrides)
            return merged
        
        self.store.set(ERRORS, update)
        logger.debug(f"Errors overridden for fields: {list(overrides)}")


def create_form(schema: Optional[Mapping[str, Any]], initial_value: Any,
                value_string_parsers: Mapping[str, Callable],
                store: Optional[StateStore] = None) -> FormController:
    """
    Build a FormController from its three configuration parts.
    
    Args:
        schema: Field name to validation chain (None/absent means unvalidated)
        initial_value: Mapping or pydantic model with the initial typed values
        value_string_parsers: Field name to parser; required for every field
        store: Optional state store
        
    Returns:
        FormController instance
    """
    config = FormConfig(
        schema=dict(schema or {}),
        initial_value=initial_value,
        value_string_parsers=dict(value_string_parsers),
    )
    return FormController(config, store=store)
