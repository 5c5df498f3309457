import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ems.core.config import settings
from ems.core.exceptions import AppError, UnauthorizedError
from ems.api import auth as auth_api
from ems.api import employees as employees_api
from ems.api import attendance as attendance_api
from ems.api import reports as reports_api
from ems.api import health as health_api

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the default admin on startup."""
    from ems.core.seed import init_database

    init_database()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


# Disable API docs in production
docs_url = "/docs" if settings.ENVIRONMENT != "production" else None
redoc_url = "/redoc" if settings.ENVIRONMENT != "production" else None

app = FastAPI(
    title=settings.APP_NAME,
    description="Employee attendance management API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


# ── Error responses ──────────────────────────────────────────────────

def _error_body(request, status_code, detail):
    return {
        "detail": detail,
        "status_code": status_code,
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _log_failure(request, status_code, detail):
    if status_code >= 500:
        logger.error("%s %s %s - %s", request.method, request.url.path, status_code, detail)
    else:
        logger.warning("%s %s %s - %s", request.method, request.url.path, status_code, detail)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    _log_failure(request, exc.status_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.message),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report every violation at once as {field, value, constraint}."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc),
            "value": err.get("input"),
            "constraint": err.get("msg"),
        })
    _log_failure(request, 400, f"{len(errors)} validation error(s)")
    body = _error_body(request, 400, "Validation failed")
    body["errors"] = errors
    return JSONResponse(status_code=400, content=jsonable_encoder(body))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    _log_failure(request, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


# Global exception handler - always return JSON (never plain text)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    body = _error_body(request, 500, "Internal server error")
    headers = {}
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        headers[CORRELATION_HEADER] = correlation_id
    return JSONResponse(status_code=500, content=body, headers=headers)


# ── Middleware ───────────────────────────────────────────────────────

@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER, "Content-Disposition"],
)


@app.get("/")
def root():
    return {"service": settings.APP_NAME, "version": "1.0.0", "docs": docs_url}


app.include_router(health_api.router)
app.include_router(auth_api.router)
app.include_router(employees_api.router)
app.include_router(attendance_api.router)
app.include_router(reports_api.router)
