"""
Error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as the same envelope:

    {"success": false, "message": "...", "code": "...", "errors": [...]}

Repositories and the transition engine raise the typed errors below; routes
never inspect database error codes or message strings.
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    retriable = False

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message, "code": self.code}
        if self.errors:
            body["errors"] = self.errors
        if self.retriable:
            body["retriable"] = True
        return body


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls("Validation failed", errors=[{"field": field, "message": message}])


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class TransitionError(AppError):
    """Base for every refusal raised by the transition engine."""
    status_code = 409
    code = "TRANSITION_ERROR"


class InvalidTransition(TransitionError):
    status_code = 422
    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, from_state: str, to_state: str):
        super().__init__(f"Cannot move {entity} from '{from_state}' to '{to_state}'")
        self.entity = entity
        self.from_state = from_state
        self.to_state = to_state


class PreconditionFailed(TransitionError):
    status_code = 409
    code = "PRECONDITION_FAILED"


class ConcurrentModification(TransitionError):
    status_code = 409
    code = "CONCURRENT_MODIFICATION"
    retriable = True

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity.capitalize()} {entity_id} was modified by another request, reload and retry")
        self.entity = entity
        self.entity_id = entity_id


class AuthenticationError(AppError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class AuthorizationError(AppError):
    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class DependencyError(AppError):
    status_code = 503
    code = "DEPENDENCY_ERROR"
    retriable = True


def _field_name(loc) -> str:
    # ("body", "deadline") -> "deadline", ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            message = err.get("msg", "Invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.append({"field": _field_name(err.get("loc", ())), "message": message})
        return JSONResponse(
            status_code=400,
            content=ValidationError("Validation failed", errors=errors).to_dict(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = {401: "AUTHENTICATION_ERROR", 403: "AUTHORIZATION_ERROR", 404: "NOT_FOUND",
                405: "METHOD_NOT_ALLOWED"}.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail), "code": code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "code": "INTERNAL_ERROR"},
        )
