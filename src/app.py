"""Marketplace FastAPI application.

Processes commands synchronously over HTTP. Every request runs inside the
marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (notifications fire in-process)
#   - "production" → event_processing = "async" (notifications fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.domain import marketplace
from marketplace.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
marketplace.init()

app = FastAPI(
    title="Marketplace API",
    description="Multi-vendor orders, payments, delivery dispatch, payouts and notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and bind request info to the logs."""
    bind_request_context(method=request.method, path=request.url.path)
    try:
        with marketplace.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import ALL_ROUTERS, register_marketplace_exception_handlers  # noqa: E402

for router in ALL_ROUTERS:
    app.include_router(router)

register_marketplace_exception_handlers(app)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": marketplace.name})
