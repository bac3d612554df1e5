from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from app.core.context import CallContext, get_call_context
from app.models.currency import RateOut
from app.routers.dependencies import get_currency_admin, get_resolver, require_admin
from app.services.currency_admin import CurrencyAdmin
from app.services.rates.resolver import RateResolver
from app.services.validation import validate_code

"""Rates router.

Endpoints:
    - GET /rates/{code}     -> resolve one rate through cache/store/provider
    - POST /rates/refresh   -> overwrite stored rates from a fresh provider snapshot
"""

router = APIRouter(prefix="/rates", tags=["rates"])


@router.post("/refresh", summary="Refresh stored rates from the rate provider")
def refresh_rates(
    _: bool = Depends(require_admin),
    admin: CurrencyAdmin = Depends(get_currency_admin),
    ctx: CallContext = Depends(get_call_context),
):
    refreshed = admin.refresh_from_provider(ctx)
    return {"refreshed": refreshed}


@router.get("/{code}", response_model=RateOut, summary="Resolve a single rate")
def get_rate(
    code: str = Path(..., description="Currency code"),
    resolver: RateResolver = Depends(get_resolver),
    ctx: CallContext = Depends(get_call_context),
):
    code = validate_code(code)
    return RateOut(code=code, rate=resolver.resolve(code, ctx))
