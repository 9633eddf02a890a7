"""Maps domain exceptions to JSON error responses.

Every body carries ``message``; validation failures add ``errors`` keyed by
field. Internal error details are only exposed in development.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import get_settings
from storefront.shared.errors import AccessDenied, InvalidWebhookSignature, PaymentGatewayError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _first_message(errors) -> str:
    if isinstance(errors, dict):
        for messages in errors.values():
            if isinstance(messages, (list, tuple)) and messages:
                return str(messages[0])
            if messages:
                return str(messages)
    if isinstance(errors, (list, tuple)) and errors:
        return str(errors[0])
    return str(errors) if errors else "Validation failed"


def _messages(exc) -> object:
    return getattr(exc, "messages", None) or str(exc)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    errors = _messages(exc)
    return JSONResponse(status_code=400, content={"message": _first_message(errors), "errors": errors})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        errors.setdefault(field or "request", []).append(error["msg"])
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    messages = _messages(exc)
    return JSONResponse(status_code=404, content={"message": _first_message(messages)})


async def access_denied_handler(request: Request, exc: AccessDenied) -> JSONResponse:
    return JSONResponse(status_code=403, content={"message": exc.message})


async def webhook_signature_handler(request: Request, exc: InvalidWebhookSignature) -> JSONResponse:
    logger.warning("Webhook signature verification failed", error=exc.message)
    return JSONResponse(status_code=400, content={"message": f"Webhook Error: {exc.message}"})


async def payment_gateway_handler(request: Request, exc: PaymentGatewayError) -> JSONResponse:
    logger.error("Payment provider error", error=exc.message, provider_code=exc.provider_code, path=request.url.path)
    return JSONResponse(status_code=502, content={"message": exc.message, "code": exc.provider_code})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    detail = str(exc) if get_settings().is_development else "Internal server error"
    return JSONResponse(status_code=500, content={"message": "Internal server error", "error": detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(AccessDenied, access_denied_handler)
    app.add_exception_handler(InvalidWebhookSignature, webhook_signature_handler)
    app.add_exception_handler(PaymentGatewayError, payment_gateway_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
