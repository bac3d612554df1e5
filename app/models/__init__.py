"""Pydantic domain models for the currency converter API."""

from .currency import (
    ConversionOut,
    Currency,
    CurrencyIn,
    CurrencyRateIn,
    MessageOut,
    RateOut,
    utc_now,
)

__all__ = [
    "ConversionOut",
    "Currency",
    "CurrencyIn",
    "CurrencyRateIn",
    "MessageOut",
    "RateOut",
    "utc_now",
]
