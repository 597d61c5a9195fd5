from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.exceptions import (
    DeserializationError,
    FormFillError,
    NetworkError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger("app.form_fill")

# (status code, client-facing detail). Details are fixed strings: internal messages
# may mention identifiers or upstream status codes.
_ERROR_RESPONSES: dict[type[FormFillError], tuple[int, str]] = {
    NotFoundError: (404, "Benefit not found"),
    NetworkError: (502, "LLM service failed"),
    DeserializationError: (502, "LLM service failed"),
    StorageError: (500, "Artifact storage failed"),
}


def _response_for(exc: FormFillError) -> tuple[int, str]:
    for error_type, response in _ERROR_RESPONSES.items():
        if isinstance(exc, error_type):
            return response
    return 500, "Form fill failed"


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(FormFillError)
    async def handle_form_fill_error(request: Request, exc: FormFillError) -> JSONResponse:
        status_code, detail = _response_for(exc)
        request_id = getattr(request.state, "request_id", None) or request.headers.get(
            "X-Request-ID"
        )
        logger.info(
            "Form fill request failed",
            extra={
                "request_id": request_id,
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": status_code,
                "error": exc.__class__.__name__,
            },
        )
        return JSONResponse(status_code=status_code, content={"detail": detail})
