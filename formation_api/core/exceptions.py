"""Application-level exceptions and FastAPI exception handlers."""


import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

    def details(self) -> dict:
        """Extra fields merged into the error body."""
        return {}

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class BadRequestError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="BAD_REQUEST")

class PayloadTooLargeError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=413, code="PAYLOAD_TOO_LARGE")

class InvalidEventTypeError(AppException):
    def __init__(self, value: object):
        super().__init__(
            f"Invalid event type '{value}'", status_code=400, code="INVALID_EVENT_TYPE"
        )

class InvalidDocumentTypeError(AppException):
    def __init__(self, value: object):
        super().__init__(
            f"Invalid document type '{value}'", status_code=400, code="INVALID_DOCUMENT_TYPE"
        )

class DocumentRequiredError(AppException):
    """Raised when a gated progress event is completed before its document exists."""

    def __init__(self, event_type: str, document_type: str):
        self.event_type = event_type
        self.document_type = document_type
        super().__init__(
            f"Upload a {document_type} document before completing {event_type}",
            status_code=400,
            code="DOCUMENT_REQUIRED",
        )

    def details(self) -> dict:
        return {"eventType": self.event_type, "requiredDocumentType": self.document_type}

class PersistenceError(AppException):
    """Raised when a transactional write is rejected by the database."""

    def __init__(self, message: str = "Failed to persist changes"):
        super().__init__(message, status_code=500, code="PERSISTENCE_ERROR")

class StorageError(AppException):
    """Raised when the document store cannot save or read an object."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="STORAGE_ERROR")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, **exc.details()),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
        message = "Missing or invalid fields: " + ", ".join(f for f in fields if f)
        return JSONResponse(
            status_code=400,
            content=_error_body("VALIDATION_ERROR", message),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
