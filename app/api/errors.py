"""Exception handlers producing the uniform error envelope for every failure."""

import traceback
from datetime import UTC, datetime
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, get_settings
from app.core.errors import INTERNAL_ERROR_MESSAGE, AppError
from app.core.log_context import get_logger
from app.schemas.error import ErrorResponse

logger = get_logger(__name__)


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        messages.append(f"{field}: {err.get('msg', 'invalid value')}")
    return messages


def _envelope(
    request: Request,
    status_code: int,
    message: str | list[str],
    error: str,
    exc: BaseException,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        statusCode=status_code,
        timestamp=datetime.now(UTC).isoformat(),
        path=request.url.path,
        method=request.method,
        message=message,
        error=error,
    )
    _log_failure(body, exc, _request_settings(request))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _request_settings(request: Request) -> Settings:
    """Settings as the routes see them, honoring dependency overrides on the app."""
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return provider()


def _log_failure(body: ErrorResponse, exc: BaseException, settings: Settings) -> None:
    context = {
        "statusCode": body.statusCode,
        "path": body.path,
        "method": body.method,
        "message": body.message,
    }
    if body.statusCode >= 500:
        if not settings.is_production:
            context["stack"] = "".join(traceback.format_exception(exc))
        logger.error("Server error occurred", context=context)
    else:
        logger.warning("Client error occurred", context=context)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers so app errors, HTTP errors and validation errors share one shape."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        return _envelope(request, exc.status_code, exc.message, exc.error, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, (str, list)) else _phrase(exc.status_code)
        return _envelope(
            request,
            exc.status_code,
            message,
            _phrase(exc.status_code),
            exc,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _envelope(request, 400, _validation_messages(exc), "Bad Request", exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # Never echo internal exception text to clients.
        return _envelope(request, 500, INTERNAL_ERROR_MESSAGE, "Internal Server Error", exc)
