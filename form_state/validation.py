"""
Validation chain interpreter.

A chain is evaluated in declared order and stops at the first failing entry.
Failures are reported as data; a predicate that raises is a schema bug and
the exception propagates to the caller.
"""

from typing import Any, NamedTuple, Optional, Sequence
import logging

from .schema import FieldError, Validation

logger = logging.getLogger(__name__)


class ChainOutcome(NamedTuple):
    """Result of evaluating one field's chain."""
    error: bool
    msg: str
    block: bool
    
    def to_field_error(self) -> FieldError:
        if self.error:
            return FieldError.failed(self.msg)
        return FieldError.clear()


PASSED = ChainOutcome(error=False, msg="", block=False)


def run_validation_chain(validations: Optional[Sequence[Validation]], value: Any,
                         instant: bool = False) -> ChainOutcome:
    """
    Evaluate a validation chain against a typed value.
    
    Args:
        validations: Ordered chain entries; None or empty means no validation
        value: Typed value to check
        instant: Prefer each entry's instant validator (live edits)
        
    Returns:
        ChainOutcome of the first failing entry, or PASSED
    """
    if not validations:
        return PASSED
    
    for index, entry in enumerate(validations):
        predicate = entry.predicate(instant)
        if not predicate(value):
            logger.debug(f"Validation {index} failed for value {value!r}: {entry.msg}")
            return ChainOutcome(error=True, msg=entry.msg, block=entry.block_change_on_error)
    
    return PASSED
