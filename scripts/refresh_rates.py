"""Refresh stored currency rates from the configured rate provider.

Run periodically (cron, systemd timer) to keep rates in the store current:

    python -m scripts.refresh_rates

Only currencies already in the store are refreshed; new codes are still
added lazily the first time a conversion asks for them. The API process keeps
its own in-memory cache, so it picks up refreshed values once cached entries
expire (at most one hour).
"""

from pprint import pprint

from app.core.config import get_settings
from app.core.context import CallContext
from app.core.logging import init_logging
from app.db.dal import Database
from app.db.migrate import apply_migrations
from app.services.currency_admin import CurrencyAdmin
from app.services.rates.cache_service import InMemoryRateCache
from app.services.rates.providers import make_rate_provider


def run() -> int:
    settings = get_settings()
    init_logging(debug=settings.debug, json_logs=settings.log_json)
    apply_migrations(settings.db_path)  # type: ignore[arg-type]
    admin = CurrencyAdmin(
        InMemoryRateCache(),
        Database(settings.db_path),  # type: ignore[arg-type]
        make_rate_provider(settings.exchange_rate_provider, settings),
        provider_timeout=settings.http_timeout_seconds,
    )
    refreshed = admin.refresh_from_provider(
        CallContext(timeout=settings.request_timeout_seconds)
    )
    pprint(
        {
            "provider": settings.exchange_rate_provider,
            "refreshed": refreshed,
            "currencies": {c.code: c.rate for c in admin.list()},
        }
    )
    return refreshed


if __name__ == "__main__":
    run()
