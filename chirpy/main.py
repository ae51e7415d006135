import logging
import os
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

from chirpy.config import settings
from chirpy.auth import router as auth_router
from chirpy.routers.admin import router as admin_router
from chirpy.routers.chirps import router as chirps_router
from chirpy.core import exceptions
from chirpy.core.logging import configure_logging
from chirpy.core.metrics import FileserverMetrics

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")
FILESERVER_PREFIX = "/app"

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json"
)
app.state.metrics = FileserverMetrics()

app.mount(FILESERVER_PREFIX, StaticFiles(directory=STATIC_DIR, html=True), name="app")


@app.middleware("http")
async def count_fileserver_hits(request: Request, call_next):
    path = request.url.path
    if path == FILESERVER_PREFIX or path.startswith(f"{FILESERVER_PREFIX}/"):
        request.app.state.metrics.increment()
    return await call_next(request)


@app.middleware("http")
async def log_non_ok_responses(request: Request, call_next):
    response = await call_next(request)
    if response.status_code >= 400:
        logger.warning("[NON-OK] %s %s - Status: %s", request.method, request.url.path, response.status_code)
    return response


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

# Exception Handlers
app.add_exception_handler(exceptions.ChirpyError, exceptions.chirpy_exception_handler)  # type: ignore
app.add_exception_handler(RequestValidationError, exceptions.validation_exception_handler)  # type: ignore
app.add_exception_handler(IntegrityError, exceptions.integrity_exception_handler)  # type: ignore

# Routers
app.include_router(auth_router.router, prefix=settings.API_PREFIX, tags=["Auth"])
app.include_router(chirps_router, prefix=f"{settings.API_PREFIX}/chirps", tags=["Chirps"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])

@app.get(f"{settings.API_PREFIX}/healthz", response_class=PlainTextResponse)
async def healthz():
    return "OK"


@app.on_event("startup")
async def validate_settings_on_startup() -> None:
    _validate_security_settings()
    logger.info("%s %s started (platform=%s)", settings.PROJECT_NAME, settings.VERSION, settings.PLATFORM)


def _validate_security_settings() -> None:
    if settings.APP_ENV != "production":
        return

    errors: list[str] = []
    if len(settings.SECRET_KEY.strip()) < 24:
        errors.append("SECRET_KEY must be at least 24 characters in production.")
    if settings.is_dev_platform:
        errors.append("PLATFORM=dev is not allowed in production.")

    if errors:
        raise RuntimeError("; ".join(errors))
