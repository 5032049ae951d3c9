"""
Form state and validation engine.
Keeps typed values, raw strings and per-field errors of a form consistent.
"""

from .schema import (
    FieldError,
    FormConfig,
    ParseStatus,
    Validation,
)
from .controller import FormController, create_form
from .state_store import StateStore, SessionStateStore
from .exceptions import (
    FormStateError,
    FormConfigError,
    MissingParserError,
    UnknownFieldError,
    SchemaLoadError,
    InvalidErrorStateError,
)

__all__ = [
    'FieldError',
    'FormConfig',
    'ParseStatus',
    'Validation',
    'FormController',
    'create_form',
    'StateStore',
    'SessionStateStore',
    'FormStateError',
    'FormConfigError',
    'MissingParserError',
    'UnknownFieldError',
    'SchemaLoadError',
    'InvalidErrorStateError',
]
