from typing import Any, Dict, Optional
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = structlog.get_logger(__name__)


class AppException(Exception):
    """Base for errors raised by the service layer with a fixed HTTP mapping."""

    status_code = 400
    code = "APP_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}


class InvalidKubeconfigError(AppException):
    """The kubeconfig in the request could not be turned into an API client."""

    status_code = 400
    code = "INVALID_KUBECONFIG"


class ManifestParseError(AppException):
    """The manifest payload is not well-formed YAML; fatal to the whole batch."""

    status_code = 400
    code = "MANIFEST_PARSE_ERROR"


class ClusterOperationError(AppException):
    """The API server (or the transport to it) rejected a single-resource operation."""

    status_code = 500
    code = "CLUSTER_ERROR"


class ApplyTimeoutError(AppException):
    status_code = 504
    code = "APPLY_TIMEOUT"


class ApplyCancelledError(AppException):
    """The caller went away; documents not yet attempted were skipped."""

    # nginx convention for a request the client closed
    status_code = 499
    code = "APPLY_CANCELLED"


def _build_error_payload(
    *,
    message: str,
    code: str = "APP_ERROR",
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": request_id or str(uuid.uuid4()),
    }
    if details:
        payload["details"] = details
    return payload


def _summarize_validation_errors(errors: list[Dict[str, Any]]) -> str:
    fields = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        if loc and loc[0] not in fields:
            fields.append(loc[0])
    if not fields:
        return "Invalid request body"
    return f"Invalid or missing fields: {', '.join(fields)}"


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that render every failure as ``{"error": ...}``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        req_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        payload = _build_error_payload(message=message, code="HTTP_ERROR", request_id=req_id)
        logger.warning("http.exception", status=exc.status_code, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content=payload, headers={"X-Request-ID": req_id})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        req_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        errors = list(exc.errors())
        payload = _build_error_payload(
            message=_summarize_validation_errors(errors),
            code="VALIDATION_ERROR",
            details={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
            request_id=req_id,
        )
        logger.info("http.validation_error", path=request.url.path, errors=len(errors))
        return JSONResponse(status_code=400, content=payload, headers={"X-Request-ID": req_id})

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):  # type: ignore[override]
        req_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        payload = _build_error_payload(
            message=exc.message,
            code=exc.code,
            details=exc.details,
            request_id=req_id,
        )
        logger.warning("http.app_exception", status=exc.status_code, code=exc.code, path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content=payload, headers={"X-Request-ID": req_id})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[override]
        req_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
        logger.exception("http.unhandled_exception", path=request.url.path)
        payload = _build_error_payload(
            message=str(exc) or "Unknown error",
            code="INTERNAL_SERVER_ERROR",
            request_id=req_id,
        )
        return JSONResponse(status_code=500, content=payload, headers={"X-Request-ID": req_id})
