"""Domain error taxonomy.

Every externally visible failure of the conversion / admin services is one of
the classes below. The HTTP layer maps them to responses through
``status_code`` and ``str(exc)``; ``kind`` gives tests and logs a stable name.
"""

from __future__ import annotations

from typing import Optional


class CurrencyServiceError(Exception):
    status_code: int = 500
    message: str = "currency service error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


# Input validation ------------------------------------------------------
class InvalidInput(CurrencyServiceError):
    status_code = 400


class InvalidAmount(InvalidInput):
    message = "invalid amount"


class NegativeAmount(InvalidInput):
    message = "amount must be non-negative"


class InvalidRate(InvalidInput):
    message = "invalid rate"


class NonPositiveRate(InvalidInput):
    message = "rate must be positive"


class EmptyCode(InvalidInput):
    message = "invalid currency code"


class InvalidCodeLength(InvalidInput):
    message = "invalid currency code, must be 3 characters long following ISO 4217"


class ResultOutOfRange(InvalidInput):
    message = "converted amount is out of range"


# Resolution / admin -----------------------------------------------------
class AlreadyExists(CurrencyServiceError):
    status_code = 409

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"currency {code} already exists")


class CurrencyNotFound(CurrencyServiceError):
    status_code = 404

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"currency {code} not found")


class ProviderUnavailable(CurrencyServiceError):
    status_code = 502

    def __init__(self, reason: str):
        super().__init__(f"rate provider unavailable: {reason}")


class Cancelled(CurrencyServiceError):
    status_code = 503
    message = "request cancelled"


class DeadlineExceeded(Cancelled):
    status_code = 504
    message = "deadline exceeded"


__all__ = [
    "CurrencyServiceError",
    "InvalidInput",
    "InvalidAmount",
    "NegativeAmount",
    "InvalidRate",
    "NonPositiveRate",
    "EmptyCode",
    "InvalidCodeLength",
    "ResultOutOfRange",
    "AlreadyExists",
    "CurrencyNotFound",
    "ProviderUnavailable",
    "Cancelled",
    "DeadlineExceeded",
]
