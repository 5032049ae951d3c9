"""
Custom exception classes for form state errors.

Validation failures are never raised; they live in the error map. These
exceptions cover contract violations by the code that builds a form:
missing parsers, unknown field keys and unreadable form definitions.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class FormStateError(Exception):
    """
    Base exception for form state errors.
    
    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """
    
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)
    
    def __str__(self) -> str:
        return self.message
    
    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class FormConfigError(FormStateError):
    """Raised when a form configuration is structurally invalid."""


class MissingParserError(FormConfigError):
    """
    Raised when fields of the initial value have no value string parser.
    
    Every field needs a parser; there is no default.
    """
    
    def __init__(self, missing_keys: List[str], message: Optional[str] = None):
        self.missing_keys = list(missing_keys)
        
        if message is None:
            message = f"No value string parser for field(s): {', '.join(self.missing_keys)}"
        
        context = {
            'missing_keys': self.missing_keys
        }
        
        recovery_suggestions = [
            "Add a parser for every key of the initial value",
            "Use form_state.parsers.string_parser for plain text fields"
        ]
        
        super().__init__(message, context, recovery_suggestions)


class UnknownFieldError(FormStateError, KeyError):
    """
    Raised when an operation or schema names a field outside the form.
    
    The key set is fixed when the form is created.
    """
    
    def __init__(self, key: Any, known_keys: Optional[List[Any]] = None,
                 message: Optional[str] = None):
        self.key = key
        self.known_keys = list(known_keys or [])
        
        if message is None:
            message = f"Unknown form field: {key!r}"
        
        context = {
            'key': key,
            'known_keys': self.known_keys
        }
        
        recovery_suggestions = [
            "Check the field name for typos",
            "Fields can only be declared through the initial value"
        ]
        
        FormStateError.__init__(self, message, context, recovery_suggestions)
    
    def __str__(self) -> str:
        return self.message


class SchemaLoadError(FormStateError):
    """
    Raised when a form definition file cannot be loaded or interpreted.
    
    This includes YAML/JSON parsing errors, missing files and unsupported
    field types.
    """
    
    def __init__(self, schema_path: Optional[Path], issue: str,
                 original_error: Optional[Exception] = None,
                 message: Optional[str] = None):
        self.schema_path = schema_path
        self.issue = issue
        self.original_error = original_error
        
        if message is None:
            location = f" {schema_path}" if schema_path else ""
            message = f"Failed to load form definition{location}: {issue}"
        
        context = {
            'schema_path': str(schema_path) if schema_path else None,
            'issue': issue,
        }
        if original_error is not None:
            context['original_error_type'] = type(original_error).__name__
            context['original_error_message'] = str(original_error)
        
        recovery_suggestions = [
            "Verify YAML syntax is correct",
            "Ensure the definition has a 'fields' mapping",
            "Check field types against the supported list"
        ]
        
        super().__init__(message, context, recovery_suggestions)


class InvalidErrorStateError(FormStateError, ValueError):
    """
    Raised when an error map override would leave the error state inconsistent.
    
    Every field keeps exactly one entry, and an entry's error flag is set
    exactly when it carries a message.
    """
    
    def __init__(self, problems: List[str], message: Optional[str] = None):
        self.problems = list(problems)
        
        if message is None:
            message = f"Invalid error state: {'; '.join(self.problems)}"
        
        recovery_suggestions = [
            "Build entries with FieldError.failed(msg) or FieldError.clear()",
            "Return an entry for every field from functional updates"
        ]
        
        super().__init__(message, {'problems': self.problems}, recovery_suggestions)
