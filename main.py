"""authcore - account registration, login and password reset API."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from authcore.config import get_settings
from authcore.errors import STATUS_CODES, AuthError, ErrorKind
from authcore.rate_limit import limiter
from authcore.routers import auth_router, users_router

# Logging
logger = logging.getLogger("authcore")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()
settings.validate_runtime()
for warning in settings.validate():
    logger.warning(warning)

app = FastAPI(title="authcore", version="0.1.0")
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MB, JSON bodies only

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(
                status_code=413,
                content={"success": False, "code": ErrorKind.VALIDATION.value, "detail": "Request body too large"},
            )
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {"/api/v1/auth/", "/api/v1/users/"}

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log auth mutations; the path never carries a password, but reset tokens are redacted
        path = request.url.path
        method = request.method
        if method in ("POST", "PUT", "DELETE") and any(path.startswith(p) for p in self.AUDIT_PATHS):
            if path.startswith("/api/v1/auth/reset-password/"):
                path = "/api/v1/auth/reset-password/***"
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)

# API routers
app.include_router(auth_router)
app.include_router(users_router)


def _error_response(kind: ErrorKind, detail: str, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or STATUS_CODES[kind],
        content={"success": False, "code": kind.value, "detail": detail},
    )


# --- Auth error handler ---
@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render a known failure as JSON with its status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# --- Request validation: missing or mistyped fields are a 400 ---
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body validation failures as validation errors."""
    missing = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("type") == "missing"})
    detail = f"Some values are missing: {', '.join(missing)}" if missing else "Invalid request body"
    return _error_response(ErrorKind.VALIDATION, detail)


# --- Rate limit error handler ---
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return _error_response(ErrorKind.RATE_LIMITED, "Rate limit exceeded. Try again later.")


# --- Framework HTTP errors (404 route, 405 method) ---
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render framework HTTP errors in the same JSON shape."""
    kind = ErrorKind.NOT_FOUND if exc.status_code == 404 else ErrorKind.VALIDATION
    return _error_response(kind, str(exc.detail), exc.status_code)


# --- Anything else is an internal error ---
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(ErrorKind.INTERNAL, "Internal server error")


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "authcore", "version": "0.1.0"}
