"""Translation of domain errors into HTTP responses.

Starlette picks the handler registered for the nearest class in the
exception's MRO, so ``InsufficientStock`` and ``EmptyCart`` get their own
status codes rather than the generic ``ValidationError`` one.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ProteanException,
    ValidationError,
)

from storefront.errors import EmptyCart, Forbidden, InsufficientStock, TransactionFailed

logger = structlog.get_logger(__name__)


def _error_body(exc: Exception, **extra) -> dict:
    messages = getattr(exc, "messages", None)
    return {"errors": messages if isinstance(messages, dict) else {"_error": [str(exc)]}, **extra}


def _responder(status_code):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            status_code=status_code,
            error=exc.__class__.__name__,
        )
        return JSONResponse(status_code=status_code, content=_error_body(exc))

    return handler


async def _insufficient_stock(request: Request, exc: InsufficientStock) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        status_code=409,
        error="InsufficientStock",
        product_id=exc.product_id,
    )
    return JSONResponse(status_code=409, content=_error_body(exc, product_id=exc.product_id))


async def _transaction_failed(request: Request, exc: TransactionFailed) -> JSONResponse:
    logger.warning("Transaction failed", path=request.url.path, operation=exc.operation)
    return JSONResponse(status_code=503, content=_error_body(exc, retryable=True), headers={"Retry-After": "1"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ObjectNotFoundError, _responder(404))
    app.add_exception_handler(Forbidden, _responder(403))
    app.add_exception_handler(EmptyCart, _responder(400))
    app.add_exception_handler(InsufficientStock, _insufficient_stock)
    app.add_exception_handler(InvalidOperationError, _responder(409))
    app.add_exception_handler(ValidationError, _responder(422))
    app.add_exception_handler(TransactionFailed, _transaction_failed)
    app.add_exception_handler(ProteanException, _responder(500))
