from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from guardian.core.errors import GuardianError
from guardian.core.logger import get_logger
from guardian.schemas.responses import ErrorResponse

log = get_logger(__name__)


def fallback_response(status_code: int, error: str, *, risks=None, actions=None,
                      extra_info=None) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        detected_risks=risks or [],
        recommended_actions=actions or ["Please try again"],
        extra_info=extra_info or {},
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def guardian_error_handler(request: Request, exc: GuardianError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return fallback_response(
        exc.status_code, exc.message,
        risks=exc.risks, actions=exc.actions, extra_info=exc.extra_info,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        message = "Invalid request format. Please try again."
    else:
        first = errors[0] if errors else {}
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {loc} {first.get('msg', '')}".strip()
    return fallback_response(
        400, message,
        risks=["Invalid request"],
        actions=["Please check your input and try again"],
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return fallback_response(
            404, "Endpoint not found",
            risks=["Endpoint not found"], actions=["Check the API endpoint"],
        )
    return fallback_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return fallback_response(
        500, "Internal server error",
        risks=["Server error occurred"], actions=["Please try again later"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GuardianError, guardian_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
