from typing import Optional
from fastapi import FastAPI, HTTPException, Request,status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from storefront.common.logging_setup import get_logger
from storefront.common.utils import build_error, json_error
from storefront.common.constants import request_id_ctx

logger = get_logger("storefront.errors")


class StoreError(HTTPException):
    """Base for domain errors. Rendered by http_exception_handler like any HTTPException."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)


class InvalidInput(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class EmptyCart(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cart is empty"


class Unauthorized(StoreError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class Forbidden(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(StoreError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class OutOfStock(StoreError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Insufficient stock"

    def __init__(self, product_name: Optional[str] = None, detail: Optional[str] = None):
        if detail is None and product_name:
            detail = f"Insufficient stock for {product_name}"
        super().__init__(detail)
        self.product_name = product_name


class PersistenceError(StoreError):
    """Storage failure. Detail stays in logs, clients get a generic message."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to process request"


async def fallback_handler(request: Request, exc: Exception):

    rid = request_id_ctx.get(None)

    logger.error(
        "unexpected.exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": rid,
        },
        exc_info=exc,
    )

    payload = build_error("Internal Server Error")
    return json_error(payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    msg = str(errors[0].get("msg", "Invalid request"))
    # pydantic prefixes custom validator messages
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return msg


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = request_id_ctx.get(None)
    logger.warning(
        "request.validation_failed",
        extra={
            "errors": exc.errors(),
            "path": request.url.path,
            "request_id": rid,
        },
    )

    payload = build_error(first_validation_message(exc))
    return json_error(payload, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):

    status_code = exc.status_code
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    if status_code >= 500:
        logger.error("http.server_error", extra={"path": request.url.path, "status": status_code})

    payload = build_error(message)
    return json_error(payload, status_code=status_code, headers=getattr(exc, "headers", None))


def register_all_exceptions(app: FastAPI):

    app.add_exception_handler(
        Exception, # catch all unidentified/unhandled exceptions
        fallback_handler
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler
    )

    app.add_exception_handler(
        StarletteHTTPException, # includes FastAPI HTTPException and domain errors
        http_exception_handler
    )
