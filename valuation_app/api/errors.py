"""Translate service exceptions into HTTP error responses"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from valuation_app.core.exceptions import (
    ExternalServiceError,
    InvalidInputError,
    NotFoundError,
    RenderError,
    StorageError,
    ValidationError,
    ValuationAppError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RenderError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: Exception) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def valuation_error_handler(request: Request, exc: ValuationAppError):
    """Return the service error message as the response detail"""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=True)
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    content = {"detail": str(exc)}
    if isinstance(exc, RenderError) and exc.attempts:
        content["attempts"] = exc.attempts
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValuationAppError, valuation_error_handler)
