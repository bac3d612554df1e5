"""Shared fixtures: call-counting fakes for the cache, store and provider."""

from __future__ import annotations

from datetime import timedelta
from typing import Dict, List, Optional

import pytest

from app.core.config import Settings
from app.models.currency import Currency
from app.services.rates.base import (
    CacheError,
    DuplicateCurrencyError,
    MissingCurrencyError,
    ProviderError,
    RateProvider,
)
from app.services.rates.cache_service import InMemoryRateCache


class CountingCache(InMemoryRateCache):
    def __init__(self, fail_writes: bool = False):
        super().__init__()
        self.fail_writes = fail_writes
        self.calls: List[str] = []

    def get(self, code: str) -> Optional[float]:
        self.calls.append("get")
        return super().get(code)

    def set(self, code: str, rate: float, ttl: timedelta) -> None:
        self.calls.append("set")
        self.last_ttl = ttl
        if self.fail_writes:
            raise CacheError("cache backend down")
        super().set(code, rate, ttl)

    def delete(self, code: str) -> None:
        self.calls.append("delete")
        if self.fail_writes:
            raise CacheError("cache backend down")
        super().delete(code)


class FakeStore:
    def __init__(self, currencies: Optional[List[Currency]] = None):
        self.records: Dict[str, Currency] = {c.code: c for c in currencies or []}
        self.calls: List[str] = []

    @property
    def mutations(self) -> List[str]:
        return [c for c in self.calls if c in ("create", "update", "delete")]

    def get_by_code(self, code: str) -> Optional[Currency]:
        self.calls.append("get_by_code")
        return self.records.get(code.upper())

    def create(self, currency: Currency) -> None:
        self.calls.append("create")
        if currency.code in self.records:
            raise DuplicateCurrencyError(currency.code)
        self.records[currency.code] = currency

    def update(self, currency: Currency) -> None:
        self.calls.append("update")
        if currency.code not in self.records:
            raise MissingCurrencyError(currency.code)
        self.records[currency.code] = currency

    def delete(self, code: str) -> None:
        self.calls.append("delete")
        if code not in self.records:
            raise MissingCurrencyError(code)
        del self.records[code]

    def list_currencies(self) -> List[Currency]:
        self.calls.append("list_currencies")
        return list(self.records.values())


class FakeProvider(RateProvider):
    name = "fake"

    def __init__(self, rates: Optional[Dict[str, float]] = None, error: Optional[str] = None):
        self.rates = dict(rates or {})
        self.error = error
        self.calls = 0
        self.timeouts: List[Optional[float]] = []

    def fetch_snapshot(self, timeout: Optional[float] = None) -> Dict[str, float]:
        self.calls += 1
        self.timeouts.append(timeout)
        if self.error:
            raise ProviderError(self.error)
        return dict(self.rates)


@pytest.fixture
def cache() -> CountingCache:
    return CountingCache()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider({"USD": 1.0, "EUR": 0.85, "BRL": 5.0})


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings(
        data_dir=tmp_path,
        db_filename="test.sqlite3",
        exchange_rate_provider="static",
        admin_api_key=None,
    )
    settings.init_post_load()
    return settings
