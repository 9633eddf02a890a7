"""Storefront FastAPI application.

Processes commands synchronously over HTTP. Every request runs inside the
storefront domain context and carries a ``request_id`` in its log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import register_error_handlers
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, get_logger

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
storefront.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce backend: catalogue, cart, orders, payments and users",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the domain context and bind request-scoped log context."""
    request_id = request.headers.get("x-request-id") or uuid4().hex
    add_context(request_id=request_id, method=request.method, path=request.url.path)
    started = time.perf_counter()
    try:
        with storefront.domain_context():
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "Request handled",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.catalogue.api import category_router, product_router  # noqa: E402
from storefront.identity.api import user_router  # noqa: E402
from storefront.ordering.api import cart_router, order_router  # noqa: E402
from storefront.payments.api import payment_router  # noqa: E402

app.include_router(product_router)
app.include_router(category_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(payment_router)
app.include_router(user_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
            "environment": get_settings().environment,
        }
    )
