from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import GalleryException
from ..schemas import ErrorResponse

_VALUE_ERROR_PREFIX = "Value error, "


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"

    message = str(errors[0].get("msg", "Invalid input"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX) :]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GalleryException)
    async def gallery_exception_handler(
        request: Request, exc: GalleryException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=exc.message, code=exc.code).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _first_validation_message(exc)
        logger.warning(f"{request.method} {request.url.path} rejected: {message}")
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message=message, code="VALIDATION_ERROR").model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None),
        )
