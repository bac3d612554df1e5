import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.dal import Database
from .db.migrate import apply_migrations
from .core import errors
from .routers import health, convert, currency, rates
from .services.currency_admin import CurrencyAdmin
from .services.errors import CurrencyServiceError
from .services.rates.base import CurrencyStore, RateCache, RateProvider
from .services.rates.cache_service import InMemoryRateCache
from .services.rates.conversion import ConversionEngine
from .services.rates.providers import make_rate_provider
from .services.rates.resolver import RateResolver


def create_app(
    settings_override: Settings | None = None,
    *,
    cache: Optional[RateCache] = None,
    store: Optional[CurrencyStore] = None,
    provider: Optional[RateProvider] = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    cache / store / provider: optional collaborator overrides; by default an
    in-process cache, the SQLite store at settings.db_path and the provider
    named by settings.exchange_rate_provider are built here, once.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug, json_logs=settings.log_json)

    if store is None:
        # Ensure database schema (idempotent) so test-injected fresh DBs have tables
        try:
            apply_migrations(settings.db_path)  # type: ignore[arg-type]
        except Exception:
            logging.getLogger("app").exception("failed to apply migrations on startup")
            raise
        store = Database(settings.db_path)  # type: ignore[arg-type]
    if cache is None:
        cache = InMemoryRateCache()
    if provider is None:
        provider = make_rate_provider(settings.exchange_rate_provider, settings)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )

    # Long-lived collaborators, injected into routes via app.routers.dependencies
    resolver = RateResolver(
        cache, store, provider, provider_timeout=settings.http_timeout_seconds
    )
    app.state.settings = settings
    app.state.resolver = resolver
    app.state.conversion_engine = ConversionEngine(resolver)
    app.state.currency_admin = CurrencyAdmin(
        cache, store, provider, provider_timeout=settings.http_timeout_seconds
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(CurrencyServiceError, errors.domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(convert.router)
    app.include_router(currency.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "Currency Converter API", "version": settings.version}

    logging.getLogger("app").info(
        "app created with provider %s", provider.name
    )
    return app


app = create_app()
