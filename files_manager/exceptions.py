from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class Unauthorized(APIException):
    """Missing, invalid or expired session token."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=401, detail=detail)


class ValidationError(APIException):
    """Missing or invalid request field."""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class Forbidden(APIException):
    """The record exists but the caller is not allowed to change it."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=403, detail=detail)


class NotFound(APIException):
    """No such record, or a record the caller is not allowed to see."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class StorageError(APIException):
    """The metadata store, the session cache or the blob store is unavailable."""

    def __init__(self, detail: str = "Storage error"):
        super().__init__(status_code=500, detail=detail)


class JobError(Exception):
    """A thumbnail job that can never succeed (malformed or unresolvable)."""


class JobQueueFull(Exception):
    pass


def create_error_response(error_message: str) -> dict:
    """Create a standardized error response"""
    return {"error": error_message}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query strings are plain 400s"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"Invalid {field}" if field else "Invalid request"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=create_error_response(message))
