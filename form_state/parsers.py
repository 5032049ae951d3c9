"""
Stock value string parsers.

A parser turns the raw text of an input into ``(ParseStatus, value)``.
PARTIAL marks text that is still being typed (``"-"``, ``"1."``, ``""``) and
is not worth validating yet. Number parsers report text that can never become
a number as FULL with ``nan`` so range validators fail on it.
"""

import json
import math
import re
from typing import Any, Callable, List
import logging

from .schema import ParseResult, ParseStatus, ValueStringParser

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r'^[+-]?\d+$')
_INTEGER_PREFIX_RE = re.compile(r'^[+-]?$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
_FLOAT_PREFIX_RE = re.compile(r'^[+-]?((\d+\.?\d*|\.\d*)([eE][+-]?)?)?$')

TRUE_STRINGS = {'true', 'yes', 'y', '1', 'on'}
FALSE_STRINGS = {'false', 'no', 'n', '0', 'off'}


def to_value_string(value: Any) -> str:
    """
    Convert a typed value to the text shown in its input.
    
    Args:
        value: Typed field value
        
    Returns:
        String representation used to seed the raw text of a field
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(to_value_string(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    return str(value)


def string_parser(value_string: str) -> ParseResult:
    """Text fields: every string is a complete value."""
    return ParseStatus.FULL, value_string


def _numeric_prefix(text: str, cast: Callable[[str], Any], fallback: Any) -> Any:
    digits = text.rstrip('eE+-').rstrip('.')
    if not digits or digits in ('+', '-'):
        return fallback
    try:
        return cast(digits)
    except ValueError:
        return fallback


def integer_parser(fallback: int = 0) -> ValueStringParser:
    """
    Build a parser for integer fields.
    
    Args:
        fallback: Value reported while the text is empty or only a sign
        
    Returns:
        Parser function
    """
    def parse(value_string: str) -> ParseResult:
        text = value_string.strip()
        if _INTEGER_RE.match(text):
            return ParseStatus.FULL, int(text)
        if _INTEGER_PREFIX_RE.match(text):
            return ParseStatus.PARTIAL, fallback
        return ParseStatus.FULL, math.nan
    
    return parse


def float_parser(fallback: float = 0.0) -> ValueStringParser:
    """
    Build a parser for decimal fields.
    
    Args:
        fallback: Value reported while no digits have been typed
        
    Returns:
        Parser function
    """
    def parse(value_string: str) -> ParseResult:
        text = value_string.strip()
        if _FLOAT_RE.match(text):
            return ParseStatus.FULL, float(text)
        if _FLOAT_PREFIX_RE.match(text):
            return ParseStatus.PARTIAL, _numeric_prefix(text, float, fallback)
        return ParseStatus.FULL, math.nan
    
    return parse


def boolean_parser(value_string: str) -> ParseResult:
    text = value_string.strip().lower()
    if text in TRUE_STRINGS:
        return ParseStatus.FULL, True
    if text in FALSE_STRINGS:
        return ParseStatus.FULL, False
    return ParseStatus.PARTIAL, False


def list_parser(item_parser: ValueStringParser = string_parser,
                separator: str = ",") -> ValueStringParser:
    """
    Build a parser for separator-delimited lists.
    
    The list is PARTIAL while it ends with a separator or while any item is
    partial.
    
    Args:
        item_parser: Parser applied to each stripped item
        separator: Item separator
        
    Returns:
        Parser function
    """
    def parse(value_string: str) -> ParseResult:
        text = value_string.strip()
        if not text:
            return ParseStatus.FULL, []
        
        status = ParseStatus.FULL
        if text.endswith(separator):
            status = ParseStatus.PARTIAL
            text = text[:-len(separator)]
        
        items: List[Any] = []
        for raw_item in text.split(separator):
            item_status, item = item_parser(raw_item.strip())
            if item_status == ParseStatus.PARTIAL:
                status = ParseStatus.PARTIAL
            items.append(item)
        
        return status, items
    
    return parse
