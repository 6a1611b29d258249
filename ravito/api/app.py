"""
FastAPI application factory.

* Registers routes for delivery, orders, suppliers and admin.
* Releases the Redis pool and database engine on shutdown.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ravito.api.middleware import limiter
from ravito.api.routes import admin, delivery, orders, suppliers
from ravito.infrastructure.database import engine
from ravito.infrastructure.redis_client import close_redis

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Nothing to start; close shared connections on shutdown."""
    yield
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="RAVITO Dispatch API",
        description=(
            "Beverage delivery checkout: picks the cheapest eligible "
            "supplier for the client's zone (night-guard aware), prices "
            "the courier delivery with the RAVITO margin, and tracks the "
            "order lifecycle."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(delivery.router, prefix="/api/v1")
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(suppliers.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
