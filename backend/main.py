import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import (
    admin_router,
    cart_router,
    checkout_router,
    orders_router,
    payments_router,
    vendor_portal_router,
    vendors_router,
)
from config import settings
from services.orphan_sweeper import orphan_sweeper

logger = logging.getLogger("beegrub")

app = FastAPI(title="BeeGrub API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vendors_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(vendor_portal_router)
app.include_router(admin_router)


@app.on_event("startup")
async def _on_startup() -> None:
    await orphan_sweeper.start()
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for local dev."
        )


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    await orphan_sweeper.stop()


@app.get("/api/health")
async def health():
    return {"status": "ok", "orphan_sweeper_running": orphan_sweeper.is_running}


@app.middleware("http")
async def log_preflight(request, call_next):
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "")
        logger.info("CORS preflight %s %s origin=%s", request.method, request.url.path, origin)
    response = await call_next(request)
    return response


@app.get("/api/diag/cors")
async def cors_diag():
    return {
        "allow_origins": allow_origins,
        "allow_credentials": True,
    }
