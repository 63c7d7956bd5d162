from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from app.services.errors import (
    AlreadyCancelledError,
    AlreadyRegisteredError,
    CapacityTooLowError,
    EventFullError,
    ForbiddenError,
    LedgerError,
    NotFoundError,
    TransientConflictError,
)

STATUS_CODES: dict[type[LedgerError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    EventFullError: status.HTTP_409_CONFLICT,
    AlreadyRegisteredError: status.HTTP_409_CONFLICT,
    AlreadyCancelledError: status.HTTP_409_CONFLICT,
    CapacityTooLowError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TransientConflictError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info("{} {} -> {} {}", request.method, request.url.path, status_code, type(exc).__name__)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
