# JWT Utilities

from datetime import timedelta, datetime, timezone
from storefront.errors import InvalidToken
from storefront.config import Config
import jwt  # JSON Web Token implementation
import uuid
import logging

logger = logging.getLogger(__name__)

# Token expiry time in seconds
ACCESS_TOKEN_EXPIRY = Config.ACCESS_TOKEN_EXPIRY_DAYS * 24 * 60 * 60


def create_access_token(user_data: dict, expiry: timedelta = None, refresh: bool = False) -> str:
    """Create a JWT access token for authentication.

    Args:
        user_data (dict): User information to encode in the token (user_uid, email, role)
        expiry (timedelta, optional): Custom expiration time. Defaults to ACCESS_TOKEN_EXPIRY
        refresh (bool, optional): Whether this is a refresh token. Defaults to False

    Returns:
        str: Encoded JWT token
    """
    payload = {
        'user': user_data,
        'exp': datetime.now(timezone.utc) + (expiry if expiry is not None else timedelta(seconds=ACCESS_TOKEN_EXPIRY)),
        'jti': str(uuid.uuid4()),
        'refresh': refresh
    }

    return jwt.encode(
        payload = payload,
        key = Config.JWT_SECRET,
        algorithm = Config.JWT_ALGORITHM
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        InvalidToken: If the token is malformed, tampered with or expired
    """
    if not token:
        raise InvalidToken()

    try:
        return jwt.decode(
            jwt = token,
            key = Config.JWT_SECRET,
            algorithms = [Config.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError as e:
        logger.warning(f"Token expired: {str(e)}")
        raise InvalidToken("Token has expired")
    except jwt.PyJWTError as e:
        logger.warning(f"JWT error: {str(e)}")
        raise InvalidToken()
