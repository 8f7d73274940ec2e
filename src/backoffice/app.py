"""Back office FastAPI application.

Usage:
    uvicorn backoffice.app:app --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice.api.routes import order_router
from backoffice.config import get_settings
from backoffice.utils.logging import add_context, clear_context, configure_logging

configure_logging()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Back Office API",
    description="Order fulfillment back office: tracking import, batch actions, weight and inventory checks",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_context_middleware(request: Request, call_next):
    """Bind a request id and path to every log line emitted while handling the request."""
    clear_context()
    add_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


app.include_router(order_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "environment": settings.environment,
            "adapters": {
                "order_store": settings.order_store_adapter,
                "stock": settings.stock_adapter,
                "export": settings.export_adapter,
                "notifier": settings.notifier_adapter,
            },
        }
    )
