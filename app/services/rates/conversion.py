from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional, Protocol

from app.core.context import CallContext, ensure_context
from app.services.errors import ResultOutOfRange

"""Cross-rate conversion.

Both rates are quoted against the USD base, so dividing by the source rate
moves the amount into USD and multiplying by the target rate moves it out.
No rounding happens here; presentation is the caller's concern.
"""


class SupportsRateLookup(Protocol):
    def resolve(self, code: str, ctx: Optional[CallContext] = None) -> float: ...


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    from_rate: float
    to_rate: float
    result: float


def cross_convert(amount: float, from_rate: float, to_rate: float) -> float:
    usd_amount = amount / from_rate
    return usd_amount * to_rate


class ConversionEngine:
    def __init__(self, resolver: SupportsRateLookup):
        self._resolver = resolver

    def convert(
        self,
        from_currency: str,
        to_currency: str,
        amount: float,
        ctx: Optional[CallContext] = None,
    ) -> ConversionResult:
        ctx = ensure_context(ctx)
        # Resolve both sides even for a zero amount so unknown codes still fail.
        from_rate = self._resolver.resolve(from_currency, ctx)
        to_rate = self._resolver.resolve(to_currency, ctx)
        result = cross_convert(amount, from_rate, to_rate)
        if not math.isfinite(result):
            raise ResultOutOfRange()
        return ConversionResult(
            from_currency=from_currency.upper(),
            to_currency=to_currency.upper(),
            amount=amount,
            from_rate=from_rate,
            to_rate=to_rate,
            result=result,
        )
