from fastapi import APIRouter, Depends, Query

from app.core.context import CallContext, get_call_context
from app.models.currency import ConversionOut
from app.routers.dependencies import get_conversion_engine
from app.services.rates.conversion import ConversionEngine
from app.services.validation import parse_amount, validate_code

router = APIRouter(tags=["convert"])


@router.get(
    "/convert",
    response_model=ConversionOut,
    summary="Convert an amount between two currencies",
)
def convert_currency(
    from_: str = Query("", alias="from", description="Source currency code"),
    to: str = Query("", description="Target currency code"),
    amount: str = Query("", description="Amount; '.' or ',' as decimal separator"),
    engine: ConversionEngine = Depends(get_conversion_engine),
    ctx: CallContext = Depends(get_call_context),
):
    # 1. Validate everything before touching cache/store/provider
    from_code = validate_code(from_)
    to_code = validate_code(to)
    value = parse_amount(amount)

    # 2. Resolve both rates and convert
    conversion = engine.convert(from_code, to_code, value, ctx)
    return ConversionOut(
        from_currency=conversion.from_currency,
        to_currency=conversion.to_currency,
        amount=conversion.amount,
        result=conversion.result,
    )
