from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette_context import middleware, plugins

from nexus.config import ORIGINS, DEBUG
from nexus.elections.exceptions import NexusError
from nexus.logger import logger


def register_middlewares(app):
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        middleware.ContextMiddleware,
        plugins=(
            plugins.RequestIdPlugin(),
            plugins.ForwardedForPlugin(),
        ),
    )


def error_response(status_code: int, message: str, **extra):
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


async def nexus_error_handler(request: Request, exc: NexusError):
    extra = {}
    if getattr(exc, "errors", None):
        extra["errors"] = exc.errors
    return error_response(exc.status_code, exc.message, **extra)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(400, "Validation failed", errors=errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s" % (request.method, request.url.path))
    extra = {"error": repr(exc)} if DEBUG else {}
    return error_response(500, "Internal server error", **extra)


def register_exception_handlers(app):
    app.add_exception_handler(NexusError, nexus_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
