"""Exception → HTTP response translation.

Services raise domain errors (personal_blog/services/errors.py) and never
touch HTTP.  This module owns the mapping and the error body shape:

  {"status": 404, "error": "Not Found", "message": "Post not found",
   "timestamp": "2024-01-01T12:00:00.123456+00:00"}

Every 4xx is logged at WARNING.  Anything that escapes the domain
taxonomy becomes a 500 with a generic message; the traceback goes to the
log, never to the client.
"""

from __future__ import annotations

import datetime
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from personal_blog.services.errors import (
    BlogError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    timestamp: datetime.datetime


_STATUS_BY_ERROR: dict[type[BlogError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
}


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(
        status=status_code,
        error=HTTPStatus(status_code).phrase,
        message=message,
        timestamp=datetime.datetime.now(datetime.UTC),
    )
    if status_code < 500:
        logger.warning("%d – %s", status_code, message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _status_for(exc: BlogError) -> int:
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def _blog_error(_request: Request, exc: BlogError) -> JSONResponse:
    return error_response(_status_for(exc), exc.message)


async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    # "body.username: String should have at least 3 characters; ..."
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err.get("loc", ()))
        problems.append(f"{where}: {err.get('msg', 'invalid value')}")
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems))


async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, _blog_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)
