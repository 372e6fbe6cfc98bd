from contextlib import asynccontextmanager
import logging
import traceback

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from loan_eligibility.api.admin_routes import router as admin_router
from loan_eligibility.api.auth_routes import router as auth_router
from loan_eligibility.api.loan_routes import router as loan_router
from loan_eligibility.core.config import settings
from loan_eligibility.database.connection import init_db, close_db

logger = logging.getLogger("server_exception_handler")

ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    503: "service_unavailable",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to every non-OPTIONS response.

    OPTIONS requests are left alone so CORSMiddleware can answer preflights.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    close_db()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Loan eligibility checks, applications and administration",
    version=settings.VERSION,
    lifespan=lifespan
)


def _error_response(status_code: int, code: str, message, **extra) -> JSONResponse:
    body = {"error": {"code": code, "message": message, "status_code": status_code, **extra}}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTPException handled: %s %s", exc.status_code, exc.detail)
    code = ERROR_CODES.get(exc.status_code, "http_error")
    response = _error_response(exc.status_code, code, exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error: %s", exc.errors())
    return _error_response(422, "validation_error", "Request validation failed", details=exc.errors())


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_exception_handler(request: Request, exc: DuplicateKeyError):
    logger.warning("Duplicate key: %s", exc)
    return _error_response(409, "duplicate_entry", "Duplicate entry detected")


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError):
    logger.error("Database operation failed: %s", exc)
    return _error_response(500, "database_error", "Database operation failed")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error("Unhandled exception: %s\n%s", exc, tb)
    return _error_response(500, "internal_server_error", "An unexpected error occurred")

# Middlewares run in reverse order of registration: CORS must run first to answer preflights
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=3600,
)

app.include_router(auth_router)
app.include_router(loan_router)
app.include_router(admin_router)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}
