"""
Error Taxonomy

Every failure a request can hit maps to one exception type here.
Handlers installed on the app turn each into a JSON error body.

DESIGN RULES:
- Raise at the layer that detects the failure
- Convert to HTTP only at the app boundary
- Never retry
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class TutorError(Exception):
    """Base for errors reported to the caller as a JSON body."""

    status_code = 500
    error = "server error"

    def __init__(self, details: Optional[str] = None):
        super().__init__(details or self.error)
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(TutorError):
    """A required request field is missing, empty or unusable."""

    status_code = 400

    def __init__(self, field: str, problem: str = "required"):
        self.field = field
        self.error = f"{field} {problem}"
        super().__init__()


class SafetyRejection(TutorError):
    """The message matched the content denylist."""

    status_code = 400
    error = "message failed safety check"


class UpstreamError(TutorError):
    """
    The completion API returned a non-success status or was unreachable.

    Carries the upstream status (None for network failures) and the
    upstream body text verbatim.
    """

    status_code = 502
    error = "upstream completion error"

    def __init__(self, details: str, upstream_status: Optional[int] = None):
        super().__init__(details)
        self.upstream_status = upstream_status

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["status"] = self.upstream_status
        return body


class StoreUnavailable(TutorError):
    """The conversation store backend failed."""

    status_code = 500
    error = "session store unavailable"


class RateLimited(TutorError):
    """The caller exceeded the request rate for its address."""

    status_code = 429
    error = "rate limit exceeded"


def _field_name(error: Dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    return ".".join(loc) or "body"


def install_exception_handlers(app: FastAPI) -> None:
    """Register JSON error handlers for the taxonomy above."""

    @app.exception_handler(TutorError)
    async def tutor_error_handler(request: Request, exc: TutorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.error}: {exc.details}")
        else:
            logger.info(f"{request.url.path} rejected: {exc.error}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        field = _field_name(errors[0]) if errors else "body"
        missing = bool(errors) and errors[0].get("type") == "missing"
        message = f"{field} required" if missing else f"invalid {field}"
        logger.info(f"{request.url.path} rejected: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{request.url.path} crashed: {exc}")
        return JSONResponse(status_code=500, content={"error": "server error", "details": str(exc)})
