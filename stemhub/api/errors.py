"""
Translate engine errors into HTTP responses.

Services raise typed EngineError subclasses and know nothing about HTTP;
this is the only place a ``kind`` becomes a status code.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from stemhub.kernel.errors import EngineError, ErrorKind
from stemhub.logging_config import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    """Render an EngineError as ``{"detail", "code"}``."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info(
        "Request rejected",
        extra={
            "path": request.url.path,
            "method": request.method,
            "code": exc.kind.value,
            "status_code": status_code,
        },
    )
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.kind.value},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EngineError, engine_error_handler)
