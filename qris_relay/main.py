import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.responses import ORJSONResponse

from qris_relay.core.config import get_settings
from qris_relay.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
)
from qris_relay.core.logging import bind_request_id, configure_logging, get_logger
from qris_relay.routers import balance, donations

APP_NAME = "Saweria QRIS Relay"
APP_VERSION = "1.0.0"

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Origin, X-Requested-With, Content-Type, Accept, Authorization"

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)

app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    default_response_class=ORJSONResponse,
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    log.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


def _allow_origin(request: Request) -> str | None:
    origins = settings.cors_origins
    if "*" in origins:
        return "*"
    origin = request.headers.get("Origin")
    return origin if origin in origins else None


# Registered last so it wraps everything, including preflight short-circuits
# and unhandled faults (those would otherwise bypass it on the way out).
@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await generic_exception_handler(request, exc)
    allow_origin = _allow_origin(request)
    if allow_origin:
        response.headers["Access-Control-Allow-Origin"] = allow_origin
        if allow_origin != "*":
            response.headers["Vary"] = "Origin"
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(donations.router, tags=["donations"])
app.include_router(balance.router, tags=["balance"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    log.info("startup", msg="relay ready", host=settings.host, port=settings.port)


@app.get("/")
async def root():
    """Service info and endpoint map."""
    return {
        "name": APP_NAME,
        "message": "Saweria API is running!",
        "version": APP_VERSION,
        "endpoints": {
            "POST /qris": "Generate QRIS payment",
            "GET /status/:donationId": "Check payment status",
            "GET /balance": "Check account balance",
        },
    }


@app.get("/health")
async def health():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}
