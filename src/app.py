"""Fulfillment FastAPI application.

Admin web server that processes commands synchronously via HTTP. Every
request runs inside the fulfillment domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - unset / "test" → event_processing = "sync"  (side effects fire in the request)
#   - "production"   → event_processing = "async" (side effects fire via the Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fulfillment.domain import fulfillment

fulfillment.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Fulfillment API",
    description="Wallet-funded order fulfillment: status board, assignments and bulk operations",
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
    """Push the fulfillment domain context and bind the actor to the request's log lines."""
    from fulfillment.utils.logging import bind_request_context, clear_request_context

    bind_request_context(actor_id=request.headers.get("x-actor-id"), path=request.url.path)
    try:
        with fulfillment.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from fulfillment.api.errors import register_exception_handlers  # noqa: E402
from fulfillment.api.routes import fulfillment_order_router, staff_router  # noqa: E402

register_exception_handlers(app)
app.include_router(fulfillment_order_router)
app.include_router(staff_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    from fulfillment.order.dispatch import failure_count

    return JSONResponse(
        content={
            "status": "ok",
            "domain": fulfillment.name,
            "side_effect_failures": {
                effect: failure_count(effect) for effect in ("commerce_sync", "notification", "audit")
            },
        }
    )
