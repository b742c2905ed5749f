from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carwash.api.admin import router as admin_router
from carwash.api.appointments import router as appointments_router
from carwash.api.crm import router as crm_router
from carwash.api.inventory import router as inventory_router
from carwash.api.invoices import router as invoices_router
from carwash.api.reports import router as reports_router
from carwash.api.services import router as services_router
from carwash.core.config import settings
from carwash.core.errors import PersistenceError, ShopError
from carwash.db.base import Base
from carwash.db.seed import ensure_invoice_sequence, seed_inventory_if_empty, seed_services_if_empty
from carwash.db.session import SessionLocal, engine
import carwash.models  # noqa: F401 - register models with Base.metadata

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
)
logger = logging.getLogger("carwash")
request_logger = logging.getLogger("carwash.request")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_invoice_sequence(db, settings.invoice_prefix)
        if settings.seed_demo_data:
            seed_services_if_empty(db)
            seed_inventory_if_empty(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title="Carwash Manager API",
    description="Appointments, point-of-sale invoicing, inventory and CRM for a car-wash shop",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app_cors_origins.split(",") if settings.app_cors_origins else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    started = time.perf_counter()

    def took_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        response = await call_next(request)
    except Exception:
        request_logger.exception(
            "request_failed id=%s method=%s path=%s ms=%s", request_id, request.method, request.url.path, took_ms()
        )
        raise
    response.headers["x-request-id"] = request_id
    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    request_logger.log(
        level,
        "request_done id=%s method=%s path=%s status=%s ms=%s",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        took_ms(),
    )
    return response


@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    if isinstance(exc, PersistenceError):
        logger.error("persistence_error path=%s", request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"detail": "; ".join(problems) or "Invalid request"})


app.include_router(admin_router)
app.include_router(appointments_router)
app.include_router(crm_router)
app.include_router(inventory_router)
app.include_router(invoices_router)
app.include_router(reports_router)
app.include_router(services_router)


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.app_env, "currency": settings.currency}
