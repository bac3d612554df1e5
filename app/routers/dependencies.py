"""Shared FastAPI dependencies.

Long-lived collaborators are built once by `create_app` and hung on
`app.state`; routes reach them only through these helpers.
"""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request

from app.core.config import Settings
from app.services.currency_admin import CurrencyAdmin
from app.services.rates.conversion import ConversionEngine
from app.services.rates.resolver import RateResolver


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resolver(request: Request) -> RateResolver:
    return request.app.state.resolver


def get_conversion_engine(request: Request) -> ConversionEngine:
    return request.app.state.conversion_engine


def get_currency_admin(request: Request) -> CurrencyAdmin:
    return request.app.state.currency_admin


def require_admin(
    request: Request, x_api_key: Optional[str] = Header(None)
) -> bool:
    settings = get_app_settings(request)
    if not settings.admin_api_key:
        return True
    if x_api_key is None or not hmac.compare_digest(x_api_key, settings.admin_api_key):
        raise HTTPException(status_code=401, detail="unauthorized")
    return True


def get_actor(x_actor_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_actor_id or None
