from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path

from app.core.context import CallContext, get_call_context
from app.models.currency import Currency, CurrencyIn, CurrencyRateIn, MessageOut, utc_now
from app.routers.dependencies import get_actor, get_currency_admin, require_admin
from app.services.currency_admin import CurrencyAdmin
from app.services.validation import parse_rate, validate_code

"""Currency administration router.

Endpoints:
    - GET /currency              -> list stored currencies
    - POST /currency             -> add {code, rate} (rate may be "0,85")
    - PUT /currency/{code}       -> update {rate}
    - DELETE /currency/{code}    -> remove

Mutating routes are guarded by `require_admin` (X-API-Key when
settings.admin_api_key is set). X-Actor-Id, when sent, is recorded as
`updated_by`.
"""

router = APIRouter(prefix="/currency", tags=["currency"])


def _raw(value) -> str:  # type: ignore[no-untyped-def]
    return "" if value is None else str(value)


@router.get("", response_model=List[Currency], summary="List stored currencies")
def list_currencies(
    admin: CurrencyAdmin = Depends(get_currency_admin),
    ctx: CallContext = Depends(get_call_context),
):
    return admin.list(ctx)


@router.post(
    "",
    response_model=MessageOut,
    status_code=201,
    summary="Add a currency with its rate against USD",
)
def add_currency(
    payload: CurrencyIn,
    _: bool = Depends(require_admin),
    actor: Optional[str] = Depends(get_actor),
    admin: CurrencyAdmin = Depends(get_currency_admin),
    ctx: CallContext = Depends(get_call_context),
):
    code = validate_code(payload.code)
    rate = parse_rate(_raw(payload.rate))
    admin.add(Currency(code=code, rate=rate, updated_at=utc_now(), updated_by=actor), ctx)
    return MessageOut(message="currency added successfully")


@router.put("/{code}", response_model=MessageOut, summary="Update a currency rate")
def update_currency(
    payload: CurrencyRateIn,
    code: str = Path(..., description="Currency code"),
    _: bool = Depends(require_admin),
    actor: Optional[str] = Depends(get_actor),
    admin: CurrencyAdmin = Depends(get_currency_admin),
    ctx: CallContext = Depends(get_call_context),
):
    code = validate_code(code)
    rate = parse_rate(_raw(payload.rate))
    admin.update(code, rate, actor, ctx)
    return MessageOut(message="currency updated successfully")


@router.delete("/{code}", response_model=MessageOut, summary="Remove a currency")
def remove_currency(
    code: str = Path(..., description="Currency code"),
    _: bool = Depends(require_admin),
    admin: CurrencyAdmin = Depends(get_currency_admin),
    ctx: CallContext = Depends(get_call_context),
):
    code = validate_code(code)
    admin.remove(code, ctx)
    return MessageOut(message="currency removed successfully")
