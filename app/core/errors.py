"""Exception handlers: every error leaves the API as ``{"error": ...}``."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> list[dict]:
    out = []
    for err in exc.errors():
        # loc = ("body", "description") -> "description"
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return out


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": _field_errors(exc)}, status_code=status.HTTP_400_BAD_REQUEST)


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("[DB] integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        {"error": "A record with this value already exists"},
        status_code=status.HTTP_409_CONFLICT,
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[API] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
