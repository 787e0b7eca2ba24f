"""Stock ledger FastAPI application.

Serves provisioning, adjustments and the dashboard rollup over HTTP. Every
request runs inside the stockledger domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload

Run exactly one worker process per database. Adjustments of a record are
serialized by in-process locks, so several uvicorn workers (``--workers`` or
``WEB_CONCURRENCY``) sharing one PostgreSQL database can lose updates.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockledger.domain import stockledger
from stockledger.stock.locks import warn_if_multi_process
from stockledger.utils.logging import bind_request_context, clear_request_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain.toml overlay (memory by default, PostgreSQL
# in production).
configure_logging()
stockledger.init()
warn_if_multi_process()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Stock Ledger API",
    description="Inventory stock records, adjustments and per-product rollups",
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
    """Push the stockledger domain context and tag log lines with a request id."""
    bind_request_context(request_id=request.headers.get("x-request-id", str(uuid.uuid4())))
    try:
        with stockledger.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from stockledger.api import register_error_handlers, stock_router  # noqa: E402

app.include_router(stock_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": stockledger.name}})
