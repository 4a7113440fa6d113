import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from hashlink_app.api.v1 import redirect, urls
from hashlink_app.config import settings
from hashlink_app.exceptions import InternalError, NotFoundError, ShortenerError
from hashlink_app.logging_config import setup_logging

setup_logging(settings.log_level)
logger = logging.getLogger("hashlink_app.web")

# Only /p, /s and /l are served; docs routes stay off so everything else is a 404
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A hash-based URL shortener built with FastAPI",
    debug=settings.debug,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


def error_response(error: ShortenerError) -> PlainTextResponse:
    return PlainTextResponse(error.message, status_code=error.status_code)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log each request and its response status with duration.

    Faults outside the error taxonomy become a generic InternalError here,
    before Starlette's debug traceback page could render them.
    """
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        response = error_response(InternalError())
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
    )
    return response


@app.exception_handler(ShortenerError)
async def shortener_error_handler(request: Request, exc: ShortenerError):
    return error_response(exc)


######## Include routers
app.include_router(urls.router)
app.include_router(redirect.router)


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
               include_in_schema=False)
async def not_found(path: str):
    raise NotFoundError()
