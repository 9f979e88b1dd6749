"""
Unit tests for shared numeric value parser.
"""

import math
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_data.value_parser import parse_numeric_value, parse_year


def test_parse_currency():
    assert parse_numeric_value("$1,234.56") == 1234.56
    assert parse_numeric_value("USD 823,932.75") == 823932.75
    assert parse_numeric_value("€ 1 500") == 1500.0


def test_parse_plain_numbers():
    assert parse_numeric_value("800000") == 800000.0
    assert parse_numeric_value(42) == 42.0
    assert parse_numeric_value(" 12.5 ") == 12.5


def test_parse_parentheses_negative():
    assert parse_numeric_value("(1,234)") == -1234.0
    assert parse_numeric_value("-15.5") == -15.5


def test_parse_european_decimal():
    assert parse_numeric_value("1.234,56") == 1234.56


def test_unparseable_values_return_none():
    assert parse_numeric_value("") is None
    assert parse_numeric_value("n/a") is None
    assert parse_numeric_value("abc") is None
    assert parse_numeric_value(None) is None
    assert parse_numeric_value(True) is None
    assert parse_numeric_value(float("nan")) is None
    assert parse_numeric_value(math.inf) is None


def test_parse_year():
    assert parse_year("2024") == 2024
    assert parse_year("2024.0") == 2024
    assert parse_year(2032.0) == 2032
    assert parse_year(" 2028 ") == 2028


def test_parse_year_rejects_non_integers():
    assert parse_year("2024.5") is None
    assert parse_year("twenty") is None
    assert parse_year("") is None
    assert parse_year(None) is None
    assert parse_year(True) is None
