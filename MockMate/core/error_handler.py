import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from packages.mm_core.errors import MockMateError
from packages.mm_core.time import utc_now_iso

logger = logging.getLogger("mockmate.error_handler")


async def mockmate_exception_handler(request: Request, exc: MockMateError) -> JSONResponse:
    """Translate a MockMateError into the standard error envelope."""
    # 5xx responses keep the traceback in the log
    if exc.status_code >= 500:
        logger.exception(f"Unhandled MockMateError: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"MockMateError ({exc.code}) on {request.url.path}: {exc.message}")

    content = {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "detail": exc.details,
        },
        "timestamp": utc_now_iso(),
    }

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
    )
