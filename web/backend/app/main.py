"""FastAPI application for the Kudos compliment ledger.

Provides REST API endpoints wrapping the ``kudos`` package for:
- Giving, liking and listing compliments
- User reputation and counters
- Token supply, balances, transfers and burns
- Moderation and owner administration
- Outbound webhooks and audit export
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the kudos package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kudos import __version__
from kudos.errors import (
    AlreadyLiked,
    Blacklisted,
    LedgerError,
    NotFound,
    RateLimitExceeded,
    Unauthorized,
)
from web.backend.app.routers import admin, compliments, tokens, users, webhooks

# Ledger error -> HTTP status; anything unlisted is a 400
ERROR_STATUS: dict[type[LedgerError], int] = {
    NotFound: 404,
    Unauthorized: 403,
    Blacklisted: 403,
    AlreadyLiked: 409,
    RateLimitExceeded: 429,
}

app = FastAPI(
    title="Kudos API",
    description=(
        "REST API for the Kudos compliment ledger. "
        "Give and like compliments, earn reward units and reputation."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(compliments.router)
app.include_router(users.router)
app.include_router(tokens.router)
app.include_router(admin.router)
app.include_router(webhooks.router)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": exc.message},
    )


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "Kudos API",
        "version": __version__,
        "description": "Token-incentivized compliment ledger",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
