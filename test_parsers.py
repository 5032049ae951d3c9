"""
Unit tests for stock value string parsers and validation builders.
"""

import math
import pytest

from form_state import validators
from form_state.parsers import (
    to_value_string, string_parser, integer_parser, float_parser,
    boolean_parser, list_parser
)
from form_state.schema import ParseStatus


class TestToValueString:
    """Test cases for to_value_string."""
    
    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (20, "20"),
        (2.5, "2.5"),
        ("text", "text"),
        (["a", "b"], "a,b"),
        ([1, 2], "1,2"),
        ({"k": 1}, '{"k": 1}'),
    ])
    def test_conversions(self, value, expected):
        assert to_value_string(value) == expected


class TestIntegerParser:
    """Test cases for integer_parser."""
    
    def test_complete_numbers(self):
        parse = integer_parser()
        
        assert parse("42") == (ParseStatus.FULL, 42)
        assert parse(" -7 ") == (ParseStatus.FULL, -7)
    
    def test_incomplete_input_is_partial(self):
        parse = integer_parser(fallback=5)
        
        assert parse("") == (ParseStatus.PARTIAL, 5)
        assert parse("-") == (ParseStatus.PARTIAL, 5)
    
    def test_garbage_is_full_nan(self):
        status, value = integer_parser()("12a")
        
        assert status == ParseStatus.FULL
        assert math.isnan(value)


class TestFloatParser:
    """Test cases for float_parser."""
    
    def test_complete_numbers(self):
        parse = float_parser()
        
        assert parse("3.25") == (ParseStatus.FULL, 3.25)
        assert parse(".5") == (ParseStatus.FULL, 0.5)
        assert parse("1e3") == (ParseStatus.FULL, 1000.0)
    
    def test_typing_prefixes_are_partial(self):
        parse = float_parser(fallback=0.0)
        
        assert parse("") == (ParseStatus.PARTIAL, 0.0)
        assert parse("-") == (ParseStatus.PARTIAL, 0.0)
        assert parse(".") == (ParseStatus.PARTIAL, 0.0)
        assert parse("2e") == (ParseStatus.PARTIAL, 2.0)
        assert parse("-1.5e-") == (ParseStatus.PARTIAL, -1.5)
    
    def test_garbage_is_full_nan(self):
        status, value = float_parser()("abc")
        
        assert status == ParseStatus.FULL
        assert math.isnan(value)


class TestOtherParsers:
    """Test cases for string, boolean and list parsers."""
    
    def test_string_parser_is_always_full(self):
        assert string_parser("") == (ParseStatus.FULL, "")
        assert string_parser(" x ") == (ParseStatus.FULL, " x ")
    
    def test_boolean_parser(self):
        assert boolean_parser("Yes") == (ParseStatus.FULL, True)
        assert boolean_parser("false") == (ParseStatus.FULL, False)
        assert boolean_parser("tr") == (ParseStatus.PARTIAL, False)
    
    def test_list_parser(self):
        parse = list_parser()
        
        assert parse("") == (ParseStatus.FULL, [])
        assert parse("a, b") == (ParseStatus.FULL, ["a", "b"])
        assert parse("a,") == (ParseStatus.PARTIAL, ["a"])
    
    def test_list_parser_with_item_parser(self):
        parse = list_parser(integer_parser(), separator=";")
        
        assert parse("1;2") == (ParseStatus.FULL, [1, 2])
        assert parse("1;-") == (ParseStatus.PARTIAL, [1, 0])


class TestValidators:
    """Test cases for validation builders."""
    
    def test_required(self):
        check = validators.required().validator
        
        assert check("x") is True
        assert check(0) is True
        assert check("  ") is False
        assert check([]) is False
        assert check(None) is False
        assert check(math.nan) is False
    
    def test_lengths(self):
        assert validators.min_length(2).validator("ab") is True
        assert validators.min_length(2).validator("a") is False
        assert validators.max_length(2).validator("abc") is False
        assert validators.max_length(2).msg == "Must be at most 2 characters."
    
    def test_ranges_reject_nan_and_non_numbers(self):
        at_least = validators.min_value(18, "too young").validator
        
        assert at_least(18) is True
        assert at_least(17.5) is False
        assert at_least(math.nan) is False
        assert at_least("20") is False
        assert validators.max_value(10).validator(11) is False
    
    def test_pattern(self):
        check = validators.pattern(r"\d{3}").validator
        
        assert check("123") is True
        assert check("1234") is False
        assert check("") is True
    
    def test_one_of_instant_allows_prefixes(self):
        entry = validators.one_of(["basic", "pro"])
        
        assert entry.predicate(instant=True)("ba") is True
        assert entry.predicate(instant=False)("ba") is False
        assert entry.validator("pro") is True
    
    def test_options_are_forwarded(self):
        entry = validators.max_length(3, block_change_on_error=True)
        
        assert entry.block_change_on_error is True
