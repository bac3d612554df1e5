from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Currency(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    rate: float = Field(..., gt=0, description="Units of this currency per 1 USD")
    updated_at: datetime = Field(default_factory=utc_now)
    updated_by: Optional[str] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()


class CurrencyIn(BaseModel):
    """Raw create payload; values are validated by app.services.validation.

    `rate` accepts a JSON number or a string such as "0,85".
    """

    code: str = ""
    rate: Optional[Union[float, str]] = Field(
        None, validation_alias=AliasChoices("rate", "rate_to_usd")
    )


class CurrencyRateIn(BaseModel):
    rate: Optional[Union[float, str]] = Field(
        None, validation_alias=AliasChoices("rate", "rate_to_usd")
    )


class ConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    amount: float
    result: float


class RateOut(BaseModel):
    code: str
    rate: float


class MessageOut(BaseModel):
    message: str
