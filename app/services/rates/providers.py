from __future__ import annotations

"""Concrete rate providers and factory.

Every provider returns a full snapshot keyed by upper-case code, expressed as
units of that currency per 1 USD (USD itself is 1.0).
'static' serves a fixed table and is the default for local runs and tests;
'external-http' pulls a live snapshot from a JSON feed.
"""
import logging
import math
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from app.services.http_client import HttpError, get_json
from .base import ProviderError, RateProvider

if TYPE_CHECKING:  # pragma: no cover
    from app.core.config import Settings

logger = logging.getLogger("app.rates.provider")

_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.85,
    "GBP": 0.73,
    "BRL": 5.25,
    "JPY": 110.0,
    "BTC": 0.000016,
    "ETH": 0.00029,
}


def normalize_snapshot(raw: Mapping[str, Any]) -> Dict[str, float]:
    """Upper-case keys and drop entries that are not positive finite numbers."""
    snapshot: Dict[str, float] = {}
    for code, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        rate = float(value)
        if math.isfinite(rate) and rate > 0:
            snapshot[str(code).upper()] = rate
    return snapshot


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, rates: Optional[Mapping[str, float]] = None):
        self._rates = normalize_snapshot(rates if rates is not None else _STATIC_RATES)

    def fetch_snapshot(self, timeout: Optional[float] = None) -> Dict[str, float]:  # type: ignore[override]
        return dict(self._rates)


class ExternalHTTPRateProvider(RateProvider):
    """Snapshot from an open.er-api.com style feed: {"rates": {"EUR": 0.85, ...}}.

    Retries are the provider's own policy (``retries``); the resolver never
    retries on top of it.
    """

    name = "external-http"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        retries: int = 2,
        fetch_json: Callable[..., Dict[str, Any]] = get_json,
    ):
        self._url = url
        self._timeout = timeout
        self._retries = retries
        self._fetch_json = fetch_json

    def fetch_snapshot(self, timeout: Optional[float] = None) -> Dict[str, float]:  # type: ignore[override]
        effective = self._timeout if timeout is None else min(timeout, self._timeout)
        try:
            data = self._fetch_json(self._url, timeout=effective, retries=self._retries)
        except HttpError as e:
            logger.warning("rate feed request failed: %s", e)
            raise ProviderError(str(e)) from e
        rates = data.get("rates")
        if not isinstance(rates, dict):
            raise ProviderError("rate feed response has no 'rates' object")
        base = str(data.get("base_code") or data.get("base") or self.base_currency).upper()
        if base != self.base_currency:
            raise ProviderError(f"rate feed base is {base}, expected {self.base_currency}")
        snapshot = normalize_snapshot(rates)
        if not snapshot:
            raise ProviderError("rate feed returned no usable rates")
        snapshot.setdefault(self.base_currency, 1.0)
        logger.info("fetched %d rates from feed", len(snapshot))
        return snapshot


def make_rate_provider(kind: str, settings: Optional["Settings"] = None) -> RateProvider:
    if kind == "static":
        return StaticRateProvider()
    if kind == "external-http":
        if settings is None:
            raise ValueError("external-http provider needs settings for its URL")
        return ExternalHTTPRateProvider(
            str(settings.exchange_api_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
        )
    raise ValueError(f"Unknown rate provider kind '{kind}'")
