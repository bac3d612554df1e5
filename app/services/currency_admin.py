"""Currency administration (add / update / remove / refresh).

Every mutation follows the same rule: the store write is authoritative and
its failure fails the operation; the cache write that follows is advisory and
only ever logged. Existence checks run before any mutation, so a rejected
call leaves both the store and the cache untouched.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from app.core.context import CallContext, ensure_context
from app.models.currency import Currency, utc_now
from app.services.errors import AlreadyExists, CurrencyNotFound
from app.services.rates.base import (
    CurrencyStore,
    DuplicateCurrencyError,
    MissingCurrencyError,
    RateCache,
    RateProvider,
)
from app.services.rates.resolver import CacheAdvisor, fetch_snapshot

logger = logging.getLogger("app.currency_admin")


class CurrencyAdmin:
    def __init__(
        self,
        cache: RateCache,
        store: CurrencyStore,
        provider: Optional[RateProvider] = None,
        provider_timeout: float = 5.0,
    ):
        self._cache = CacheAdvisor(cache)
        self._store = store
        self._provider = provider
        self._provider_timeout = provider_timeout

    def _require(self, code: str, ctx: CallContext) -> Currency:
        ctx.check()
        currency = self._store.get_by_code(code)
        if currency is None:
            raise CurrencyNotFound(code)
        return currency

    def add(self, currency: Currency, ctx: Optional[CallContext] = None) -> Currency:
        ctx = ensure_context(ctx)
        ctx.check()
        if self._store.get_by_code(currency.code) is not None:
            raise AlreadyExists(currency.code)
        ctx.check()
        try:
            self._store.create(currency)
        except DuplicateCurrencyError as e:
            raise AlreadyExists(currency.code) from e
        self._cache.set(currency.code, currency.rate, ctx)
        logger.info("currency %s added", currency.code, extra={"currency": currency.code})
        return currency

    def update(
        self,
        code: str,
        rate: float,
        actor: Optional[str] = None,
        ctx: Optional[CallContext] = None,
    ) -> Currency:
        ctx = ensure_context(ctx)
        code = code.upper()
        current = self._require(code, ctx)
        updated = current.model_copy(
            update={"rate": rate, "updated_at": utc_now(), "updated_by": actor}
        )
        ctx.check()
        try:
            self._store.update(updated)
        except MissingCurrencyError as e:
            raise CurrencyNotFound(code) from e
        self._cache.set(code, rate, ctx)
        logger.info("currency %s updated", code, extra={"currency": code})
        return updated

    def remove(self, code: str, ctx: Optional[CallContext] = None) -> None:
        ctx = ensure_context(ctx)
        code = code.upper()
        self._require(code, ctx)
        ctx.check()
        try:
            self._store.delete(code)
        except MissingCurrencyError as e:
            raise CurrencyNotFound(code) from e
        self._cache.delete(code, ctx)
        logger.info("currency %s removed", code, extra={"currency": code})

    def list(self, ctx: Optional[CallContext] = None) -> List[Currency]:
        ensure_context(ctx).check()
        return sorted(self._store.list_currencies(), key=lambda c: c.code)

    def refresh_from_provider(self, ctx: Optional[CallContext] = None) -> int:
        """Overwrite every stored rate the provider knows about.

        Codes missing from the snapshot keep their stored rate. Returns the
        number of refreshed records.
        """
        ctx = ensure_context(ctx)
        if self._provider is None:
            raise RuntimeError("CurrencyAdmin was built without a rate provider")
        snapshot = fetch_snapshot(self._provider, ctx, self._provider_timeout)
        refreshed = 0
        for currency in self.list(ctx):
            rate = snapshot.get(currency.code)
            if rate is None:
                continue
            updated = currency.model_copy(
                update={"rate": rate, "updated_at": utc_now(), "updated_by": None}
            )
            ctx.check()
            try:
                self._store.update(updated)
            except MissingCurrencyError:
                logger.info("currency %s removed during refresh", currency.code)
                continue
            self._cache.set(currency.code, rate, ctx)
            refreshed += 1
        logger.info("refreshed %d stored rates from provider", refreshed)
        return refreshed
