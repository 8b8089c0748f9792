# Authentication and Authorization Dependencies

from fastapi import Request, Depends
from fastapi.security import HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Any
import uuid

from storefront.db.main import get_session
from storefront.db.models import User
from storefront.db.repository import Repository

from .utils import decode_token
from storefront.errors import (
    InvalidToken,
    AccessTokenRequired,
    InsufficientPermission,
    AccountNotVerified,
    UserNotFound,
)


class TokenBearer(HTTPBearer):
    """Base class for JWT token validation.
    Extends FastAPI's HTTPBearer to add custom token validation logic.
    """
    def __init__(self, auto_error=True):
        super().__init__(auto_error=auto_error)

    async def __call__(self, request: Request) -> dict:
        """Validate the Bearer token from the Authorization header.

        Returns:
            dict: Decoded token data if valid

        Raises:
            InvalidToken: If token is missing or invalid
        """
        authorization = request.headers.get("Authorization")
        if not authorization or not authorization.startswith("Bearer "):
            raise InvalidToken()

        token_data = decode_token(authorization[7:])
        self.verify_token_data(token_data)
        return token_data

    def verify_token_data(self, token_data):
        """Abstract method for token-specific validation logic."""
        raise NotImplementedError("Please Override this method in child classes")


class AccessTokenBearer(TokenBearer):
    def verify_token_data(self, token_data: dict) -> None:
        if token_data.get("refresh"):
            raise AccessTokenRequired()


async def get_current_user(
    token_details: dict = Depends(AccessTokenBearer()),
    session: AsyncSession = Depends(get_session)
) -> User:
    try:
        user_uid = uuid.UUID(token_details['user']['user_uid'])
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()

    return await Repository(session, User, not_found=UserNotFound).get_or_404(user_uid)


class RoleChecker:
    """Role-Based Access Control (RBAC) implementation.
    Used as a dependency to protect routes based on user roles.
    """
    def __init__(self, allowed_roles: List[str]) -> None:
        self.allowed_roles = allowed_roles

    async def __call__(self, current_user: User = Depends(get_current_user)) -> Any:
        """Check if the current user has sufficient role-based permissions.

        Raises:
            AccountNotVerified: If user's email is not verified
            InsufficientPermission: If user's role is not in allowed_roles
        """
        if not current_user.is_verified:
            raise AccountNotVerified()

        if current_user.role in self.allowed_roles:
            return True

        raise InsufficientPermission()


# Pre-configured checker for admin-only routes
admin_role_checker = RoleChecker(allowed_roles=["admin"])
