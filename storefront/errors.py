from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class StorefrontException(Exception):
    """This is the base class for all Storefront errors"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "server_error"
    default_message: str = "Opps, Something went wrong. Please try again later"
    is_operational: bool = True

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "timestamp": self.timestamp.isoformat(),
        }


# --- Generic HTTP-shaped errors ---
class BadRequest(StorefrontException):
    """Client sent invalid data or broke a business rule"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "bad_request"
    default_message = "Bad Request"


class Unauthorized(StorefrontException):
    """Authentication is required"""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(StorefrontException):
    """Authenticated, but not allowed to touch this resource"""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_message = "Forbidden"


class NotFound(StorefrontException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Resource not found"


class Conflict(StorefrontException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_message = "Conflict"


class ValidationFailed(StorefrontException):
    """Request failed field validation; carries field -> messages"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "validation_failed"
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class RateLimitExceeded(StorefrontException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "rate_limit_exceeded"
    default_message = "Too many requests"


class InternalServerError(StorefrontException):
    """Not operational: indicates a bug"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "server_error"
    is_operational = False


class ServiceUnavailable(StorefrontException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "service_unavailable"
    default_message = "Service unavailable"


# --- Auth ---
class InvalidToken(Unauthorized):
    """User has been provided an invalid or expired token"""
    error_code = "invalid_token"
    default_message = "you provided an invalid or expired token"


class AccessTokenRequired(Unauthorized):
    """User has been provided a refresh token when an access token is needed"""
    error_code = "access_token_required"
    default_message = "Access token is required"


class InsufficientPermission(Forbidden):
    error_code = "insufficient_permission"
    default_message = "You do not have sufficient permission"


class AccountNotVerified(Forbidden):
    error_code = "account_not_verified"
    default_message = "Your account is not verified"


class UserNotFound(NotFound):
    error_code = "user_does_not_exists"
    default_message = "User not found"


# --- Products & reviews ---
class ProductNotFound(NotFound):
    error_code = "product_does_not_exists"
    default_message = "Product not found"


class ReviewNotFound(NotFound):
    error_code = "review_does_not_exists"
    default_message = "Review not found"


class InvalidRating(BadRequest):
    error_code = "invalid_rating"
    default_message = "Rating must be between 1 and 5"


class ReviewAlreadyExists(BadRequest):
    error_code = "review_exists"
    default_message = "You have already reviewed this product"


class ReviewOwnershipRequired(Unauthorized):
    """Only the author of a review may change or remove it"""
    error_code = "review_ownership_required"
    default_message = "You can only modify your own reviews"


class SelfHelpfulVote(BadRequest):
    error_code = "self_helpful_vote"
    default_message = "You cannot mark your own review as helpful"


# --- Discounts ---
class DiscountNotFound(NotFound):
    error_code = "discount_does_not_exists"
    default_message = "Discount not found"


class InvalidDiscount(BadRequest):
    """Discount code failed validation; message carries the reason"""
    error_code = "invalid_discount"
    default_message = "Invalid discount code"


class InvalidDiscountValue(BadRequest):
    error_code = "invalid_discount_value"
    default_message = "Discount value must be positive"


class MinimumPurchaseNotMet(BadRequest):
    error_code = "minimum_purchase_not_met"
    default_message = "Order does not meet minimum amount for discount"


class DiscountUsageExceeded(BadRequest):
    error_code = "discount_usage_exceeded"
    default_message = "You have already used this discount code"


class DiscountCodeAlreadyExists(Conflict):
    error_code = "discount_exists"
    default_message = "A discount with this code already exists"


def create_exception_handler() -> Callable[[Request, Exception], JSONResponse]:
    async def exception_handler(request: Request, exc: StorefrontException):
        if exc.is_operational and exc.status_code < 500:
            logger.warning(
                f"Client error {exc.status_code} {exc.error_code}: {exc.message} - {request.method} {request.url.path}"
            )
            content = exc.to_dict()
        else:
            logger.error(
                f"Server error {exc.status_code} {exc.error_code}: {exc.message} - {request.method} {request.url.path}",
                exc_info=exc,
            )
            content = exc.to_dict()
            if not exc.is_operational:
                content["message"] = StorefrontException.default_message

        return JSONResponse(
            content=content,
            status_code=exc.status_code
        )

    return exception_handler


def register_all_errors(app: FastAPI):
    app.add_exception_handler(StorefrontException, create_exception_handler())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body")
            errors.setdefault(field or "body", []).append(error["msg"])
        return await create_exception_handler()(request, ValidationFailed(errors=errors))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error - {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message": StorefrontException.default_message,
                "error_code": "server_error",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
