"""
Maps booking store errors to HTTP responses.

Error bodies are {"error": "<message>"} for every mapped class.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from billetter.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from billetter.core.logging import get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.info("request_conflict", error=str(exc))
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(InvalidArgumentError, invalid_argument_handler)
