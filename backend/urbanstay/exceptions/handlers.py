import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .custom import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    UrbanStayError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc.message)


async def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    missing = False
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        if err.get("type") == "missing":
            missing = True
        errors.append({"field": ".".join(loc), "message": err.get("msg", "")})
    message = "Missing required fields" if missing else "Validation failed"
    return _error(400, message, errors=errors)


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    logger.warning("Authentication failed on %s %s: %s", request.method, request.url.path, exc.message)
    return _error(401, exc.message)


async def authorization_error_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    logger.info("Forbidden on %s %s: %s", request.method, request.url.path, exc.message)
    return _error(403, exc.message)


async def not_found_error_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message)


async def urbanstay_error_handler(_request: Request, exc: UrbanStayError) -> JSONResponse:
    return _error(exc.status_code, exc.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")
