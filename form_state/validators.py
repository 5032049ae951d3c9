"""
Builders for common validation chain entries.
Constraint names follow the field options of form definition files.
"""

import math
import re
from typing import Any, Iterable, Optional, Sized

from .schema import Validation, ValidatorFn


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not (
        isinstance(value, float) and math.isnan(value)
    )


def required(msg: str = "This field is required.", **options) -> Validation:
    """Fail on None, empty strings/collections and NaN."""
    def check(value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, float) and math.isnan(value):
            return False
        if isinstance(value, str):
            return bool(value.strip())
        if isinstance(value, Sized):
            return len(value) > 0
        return True
    
    return Validation(validator=check, msg=msg, **options)


def min_length(length: int, msg: Optional[str] = None, **options) -> Validation:
    return Validation(
        validator=lambda value: value is not None and len(value) >= length,
        msg=msg or f"Must be at least {length} characters.",
        **options
    )


def max_length(length: int, msg: Optional[str] = None, **options) -> Validation:
    return Validation(
        validator=lambda value: value is None or len(value) <= length,
        msg=msg or f"Must be at most {length} characters.",
        **options
    )


def min_value(minimum: float, msg: Optional[str] = None, **options) -> Validation:
    return Validation(
        validator=lambda value: _is_number(value) and value >= minimum,
        msg=msg or f"Must be at least {minimum}.",
        **options
    )


def max_value(maximum: float, msg: Optional[str] = None, **options) -> Validation:
    return Validation(
        validator=lambda value: _is_number(value) and value <= maximum,
        msg=msg or f"Must be at most {maximum}.",
        **options
    )


def is_number(msg: str = "Must be a number.", **options) -> Validation:
    return Validation(validator=_is_number, msg=msg, **options)


def pattern(regex: str, msg: Optional[str] = None, **options) -> Validation:
    """Full-match a regular expression against string values; empty strings pass."""
    compiled = re.compile(regex)
    
    def check(value: Any) -> bool:
        if value in (None, ""):
            return True
        return isinstance(value, str) and compiled.fullmatch(value) is not None
    
    return Validation(
        validator=check,
        msg=msg or f"Value doesn't match required pattern: {regex}",
        **options
    )


def one_of(choices: Iterable[Any], msg: Optional[str] = None, **options) -> Validation:
    allowed = list(choices)
    
    # Prefixes of a choice are fine while typing
    def instant_check(value: Any) -> bool:
        if isinstance(value, str):
            return any(str(choice).startswith(value) for choice in allowed)
        return value in allowed
    
    options.setdefault('instant_validator', instant_check)
    return Validation(
        validator=lambda value: value in allowed,
        msg=msg or f"Must be one of: {', '.join(str(choice) for choice in allowed)}",
        **options
    )


def custom(validator: ValidatorFn, msg: str, **options) -> Validation:
    return Validation(validator=validator, msg=msg, **options)
