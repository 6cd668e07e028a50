"""Herald FastAPI application.

Serves the notification engine over HTTP. Commands are processed
synchronously; every request under ``/notifications`` runs inside the
herald domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it. PROTEAN_ENV
# selects the domain.toml overlay.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from herald.domain import herald

herald.init()

_DOMAIN_PREFIXES = ("/notifications",)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Herald API",
    description="Notification delivery, reminders and weekly digests",
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
    """Push the herald domain context for engine routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with herald.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from herald.api.routes import router as herald_router  # noqa: E402

app.include_router(herald_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": herald.name})
