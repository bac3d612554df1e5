"""Boundary validation for raw request values.

Routes call these before any resolver / store work so that bad input fails fast
with zero side effects. Numeric parsing tolerates either ``.`` or ``,`` as the
fractional separator ("100,00" == "100.00"); anything with more than one
separator, digit-grouping underscores or a non-finite value is rejected.
"""

from __future__ import annotations

import math

from app.services.errors import (
    EmptyCode,
    InvalidAmount,
    InvalidCodeLength,
    InvalidRate,
    NegativeAmount,
    NonPositiveRate,
)

CODE_LENGTH = 3


def _parse_decimal(raw: str) -> float | None:
    """Return the parsed value or None when `raw` is not a plain real number."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text or "_" in text:
        return None
    try:
        value = float(text.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_amount(raw: str) -> float:
    value = _parse_decimal(raw)
    if value is None:
        raise InvalidAmount()
    if value < 0:
        raise NegativeAmount()
    return value


def parse_rate(raw: str) -> float:
    value = _parse_decimal(raw)
    if value is None:
        raise InvalidRate()
    if value <= 0:
        raise NonPositiveRate()
    return value


def validate_code(raw: str | None) -> str:
    # Raw length first, then the upper-cased code must be three ASCII letters
    # ("ßab" upper-cases to "SSAB").
    if not raw:
        raise EmptyCode()
    if len(raw) != CODE_LENGTH:
        raise InvalidCodeLength()
    code = raw.upper()
    if len(code) != CODE_LENGTH or not (code.isascii() and code.isalpha()):
        raise InvalidCodeLength()
    return code


__all__ = ["parse_amount", "parse_rate", "validate_code", "CODE_LENGTH"]
