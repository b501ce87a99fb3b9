"""
Token classification used by CSV schema inference.

A token is numeric when, after optional surrounding whitespace, it is an
optionally signed run of digits with at most one decimal point and at least
one digit. Exponents, "nan" and "inf" are text.
"""

import re
from enum import Enum


_INTEGER_RE = re.compile(r'^\s*[+-]?\d+\s*$')
_REAL_RE = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)\s*$')


class TokenClass(Enum):
    """Classification of a single delimited token."""
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"


def is_integer(token: str) -> bool:
    """True if token is an integral literal."""
    return bool(_INTEGER_RE.match(token))


def is_number(token: str) -> bool:
    """True if token is an integral or decimal literal."""
    return bool(_REAL_RE.match(token))


def classify(token: str) -> TokenClass:
    if is_integer(token):
        return TokenClass.INTEGER
    if is_number(token):
        return TokenClass.REAL
    return TokenClass.TEXT


__all__ = ["TokenClass", "is_integer", "is_number", "classify"]
