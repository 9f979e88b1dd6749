"""
Shared numeric parsing utilities for monetary values and years.

Monetary values may carry currency symbols/codes and thousands separators
(e.g., "$1,234.56", "USD 823,932.75"); these are treated as noise.
"""

from __future__ import annotations

import math
import re
from typing import Any

import pandas as pd

_NULL_TOKENS = {"", "null", "n/a", "na", "none", "nan", "-", "--"}
_CURRENCY_CODES = [
    "usd", "eur", "gbp", "jpy", "cny", "cad", "aud",
    "chf", "inr", "krw", "aed", "sar",
]
_CURRENCY_SYMBOLS = r"[$€£¥₩₹]"


def _strip_currency_tokens(text: str) -> str:
    pattern = r"(" + "|".join(_CURRENCY_CODES) + r")"
    return re.sub(pattern, "", text, flags=re.IGNORECASE)


def _normalize_number_string(text: str) -> str:
    cleaned = text.replace(" ", "").replace("\u00a0", "").replace("_", "")
    cleaned = re.sub(_CURRENCY_SYMBOLS, "", cleaned)
    cleaned = _strip_currency_tokens(cleaned)

    # Handle European decimals: "1.234,56" -> "1234.56"
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "")
            cleaned = cleaned.replace(",", ".")
    elif "," in cleaned and "." not in cleaned:
        # Treat comma as decimal if it looks like cents (one or two digits)
        parts = cleaned.split(",")
        if len(parts) == 2 and len(parts[-1]) in (1, 2):
            cleaned = ".".join(parts)
        else:
            cleaned = cleaned.replace(",", "")

    cleaned = cleaned.replace(",", "")
    return cleaned.strip()


def parse_numeric_value(value: Any) -> float | None:
    """
    Parse a monetary magnitude into a float.

    Returns None when the value is empty or cannot be interpreted as a number.
    Accounting negatives "(123)" are returned as negative numbers so that the
    range check can reject them.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        numeric = float(value)
        return numeric if math.isfinite(numeric) else None

    if pd.isna(value):
        return None

    text = str(value).strip()
    if text.lower() in _NULL_TOKENS:
        return None

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1].strip()

    cleaned = _normalize_number_string(text)
    if cleaned.startswith("-"):
        is_negative = True
        cleaned = cleaned[1:]
    cleaned = cleaned.lstrip("+")

    if cleaned.lower() in _NULL_TOKENS:
        return None

    try:
        numeric = float(cleaned)
    except ValueError:
        return None

    if not math.isfinite(numeric):
        return None

    if is_negative:
        numeric = -abs(numeric)

    return numeric


def parse_year(value: Any) -> int | None:
    """
    Parse a year into an int.

    Accepts integral floats and strings such as "2024" or "2024.0".
    Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None

    text = str(value).strip()
    if not text:
        return None

    if re.fullmatch(r"[+-]?\d+", text):
        return int(text)

    try:
        numeric = float(text)
    except ValueError:
        return None

    if math.isfinite(numeric) and numeric.is_integer():
        return int(numeric)
    return None
