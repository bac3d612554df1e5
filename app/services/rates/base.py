from __future__ import annotations

"""Collaborator contracts for rate resolution.

The resolver and admin services only ever talk to these three shapes, so any
cache (in-process, Redis, ...), store or upstream feed can be plugged in.
Collaborator-level failures are signalled with the exceptions defined here;
the services translate them into the domain taxonomy in app.services.errors.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from app.models.currency import Currency


class CacheError(Exception):
    """Raised by cache implementations; always advisory for callers."""


class ProviderError(Exception):
    """Raised when the upstream rate feed cannot produce a snapshot."""


class StoreConflictError(Exception):
    pass


class DuplicateCurrencyError(StoreConflictError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"currency {code} already stored")


class MissingCurrencyError(StoreConflictError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"currency {code} not stored")


class RateCache(Protocol):
    def get(self, code: str) -> Optional[float]: ...

    def set(self, code: str, rate: float, ttl: timedelta) -> None: ...

    def delete(self, code: str) -> None: ...


class CurrencyStore(Protocol):
    def get_by_code(self, code: str) -> Optional["Currency"]: ...

    def create(self, currency: "Currency") -> None: ...

    def update(self, currency: "Currency") -> None: ...

    def delete(self, code: str) -> None: ...

    def list_currencies(self) -> List["Currency"]: ...


class RateProvider(ABC):
    base_currency: str = "USD"
    name: str = "abstract"

    @abstractmethod
    def fetch_snapshot(self, timeout: Optional[float] = None) -> Dict[str, float]:
        """Return units per 1 USD for every known currency code."""
        raise NotImplementedError
