from __future__ import annotations

import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .config import Settings, get_settings
from .observability import configure_logging, init_sentry
from .startup import validate_settings
from .routes import cart, grocery, health
from .ratelimit import limiter
from .services.cart_store import CartStore, build_cart_store
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("X-Frame-Options", "DENY")
        return response


def create_app(settings: Optional[Settings] = None, *, cart_store: Optional[CartStore] = None) -> FastAPI:
    s = settings or get_settings()
    configure_logging(json_logs=s.log_json, level=s.log_level)
    init_sentry(s)
    validate_settings(s)
    app = FastAPI(title=s.app_name)

    # Carts live behind an injected store; routes read it from app.state.
    app.state.cart_store = cart_store if cart_store is not None else build_cart_store(s)

    # CORS
    origins: List[str] = s.cors_allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)
    # Compression
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    # Routers
    prefix = "/v1"
    app.include_router(health.router, prefix=prefix)
    app.include_router(grocery.router, prefix=prefix)
    app.include_router(cart.router, prefix=prefix)

    # Rate limit handling
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Metrics
    if s.metrics_enabled:
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    return app


def run() -> None:
    import uvicorn

    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("cartsmash.main:create_app", factory=True, host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    run()
