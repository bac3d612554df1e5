from __future__ import annotations

"""Rate resolution: cache -> store -> provider, writing back on every miss.

Steps run strictly in that order and stop at the first hit:

1. cache hit: return, nothing else is touched.
2. store hit: repopulate the cache (advisory) and return.
3. provider snapshot: persist a new Currency (authoritative), repopulate the
   cache (advisory) and return. A snapshot without the code is a
   CurrencyNotFound and leaves the store untouched.

Store calls propagate their errors. Cache calls go through `_advise_cache_*`,
which log and swallow CacheError so a broken cache can never fail a read.
"""
from datetime import timedelta
import logging
from typing import Optional

from app.core.context import CallContext, ensure_context
from app.models.currency import Currency, utc_now
from app.services.errors import CurrencyNotFound, DeadlineExceeded, ProviderUnavailable
from .base import (
    CacheError,
    CurrencyStore,
    DuplicateCurrencyError,
    ProviderError,
    RateCache,
    RateProvider,
)

CACHE_TTL = timedelta(hours=1)

logger = logging.getLogger("app.rates")


class CacheAdvisor:
    """Advisory cache writes shared by the resolver and the admin service."""

    def __init__(self, cache: RateCache):
        self._cache = cache

    def read(self, code: str, ctx: CallContext) -> Optional[float]:
        ctx.check()
        try:
            return self._cache.get(code)
        except CacheError as e:
            logger.warning(
                "cache read failed for %s: %s", code, e,
                extra={"event": "cache_read_failed", "currency": code},
            )
            return None

    def set(self, code: str, rate: float, ctx: CallContext) -> bool:
        if ctx.done:
            logger.warning(
                "cache write skipped for %s: call context done", code,
                extra={"event": "cache_write_failed", "currency": code},
            )
            return False
        try:
            self._cache.set(code, rate, CACHE_TTL)
        except CacheError as e:
            logger.warning(
                "cache write failed for %s: %s", code, e,
                extra={"event": "cache_write_failed", "currency": code},
            )
            return False
        return True

    def delete(self, code: str, ctx: CallContext) -> bool:
        if ctx.done:
            logger.warning(
                "cache delete skipped for %s: call context done", code,
                extra={"event": "cache_delete_failed", "currency": code},
            )
            return False
        try:
            self._cache.delete(code)
        except CacheError as e:
            logger.warning(
                "cache delete failed for %s: %s", code, e,
                extra={"event": "cache_delete_failed", "currency": code},
            )
            return False
        return True


def fetch_snapshot(provider: RateProvider, ctx: CallContext, default_timeout: float):
    """Call the provider once, mapping its failures onto the domain taxonomy."""
    ctx.check()
    try:
        return provider.fetch_snapshot(timeout=ctx.timeout_for(default_timeout))
    except ProviderError as e:
        if ctx.expired:
            raise DeadlineExceeded() from e
        raise ProviderUnavailable(str(e)) from e


class RateResolver:
    def __init__(
        self,
        cache: RateCache,
        store: CurrencyStore,
        provider: RateProvider,
        provider_timeout: float = 5.0,
    ):
        self._cache = CacheAdvisor(cache)
        self._store = store
        self._provider = provider
        self._provider_timeout = provider_timeout

    def resolve(self, code: str, ctx: Optional[CallContext] = None) -> float:
        ctx = ensure_context(ctx)
        code = code.upper()

        rate = self._cache.read(code, ctx)
        if rate is not None:
            return rate

        ctx.check()
        currency = self._store.get_by_code(code)
        if currency is not None:
            self._cache.set(code, currency.rate, ctx)
            return currency.rate

        snapshot = fetch_snapshot(self._provider, ctx, self._provider_timeout)
        rate = snapshot.get(code)
        if rate is None:
            raise CurrencyNotFound(code)

        self._persist(Currency(code=code, rate=rate, updated_at=utc_now()), ctx)
        self._cache.set(code, rate, ctx)
        logger.info("resolved %s from provider", code, extra={"currency": code})
        return rate

    def _persist(self, currency: Currency, ctx: CallContext) -> None:
        ctx.check()
        try:
            self._store.create(currency)
        except DuplicateCurrencyError:
            # A concurrent miss on the same code stored it first.
            logger.debug("currency %s already persisted", currency.code)
