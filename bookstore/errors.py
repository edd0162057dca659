"""Checkout error taxonomy and the FastAPI handlers that render it.

Every error carries a stable ``code`` and an HTTP status; the response
envelope is ``{"error": {"code": ..., "message": ...}}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookstoreError(Exception):
    code = "BOOKSTORE_ERROR"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class Unauthenticated(BookstoreError):
    code = "UNAUTHENTICATED"
    http_status = status.HTTP_401_UNAUTHORIZED


class Forbidden(BookstoreError):
    code = "FORBIDDEN"
    http_status = status.HTTP_403_FORBIDDEN


class NotFound(BookstoreError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class EmptyCart(BookstoreError):
    code = "EMPTY_CART"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Cannot create an order with no books"):
        super().__init__(message)


class InvalidPromotion(BookstoreError):
    code = "INVALID_PROMOTION"
    http_status = status.HTTP_400_BAD_REQUEST


class PromotionNotStarted(BookstoreError):
    code = "PROMOTION_NOT_STARTED"
    http_status = status.HTTP_400_BAD_REQUEST


class PromotionEnded(BookstoreError):
    code = "PROMOTION_ENDED"
    http_status = status.HTTP_400_BAD_REQUEST


class PersistenceFailure(BookstoreError):
    code = "PERSISTENCE_FAILURE"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class CartChanged(PersistenceFailure):
    """The cart was checked out or modified by a concurrent request."""
    code = "CART_CHANGED"
    http_status = status.HTTP_409_CONFLICT


def register_error_handlers(app: FastAPI) -> None:
    """Register the domain and validation error handlers on the app."""

    @app.exception_handler(BookstoreError)
    async def bookstore_error_handler(request: Request, exc: BookstoreError):
        if exc.http_status >= 500:
            logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        headers = None
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in e["loc"]),
                            "message": e["msg"],
                        }
                        for e in exc.errors()
                    ],
                }
            },
        )
