import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import Response

from student_portal.core.config import settings
from student_portal.models.user import Role
from student_portal.schemas.base import CamelModel
from student_portal.schemas.user_schema import UserData

logger = logging.getLogger(__name__)


class TokenClaims(CamelModel):
    user_id: int
    email: str
    role: Role
    iat: int
    exp: int


def create_access_token(user: UserData, expires_delta: Optional[timedelta] = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "userId": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": issued_at,
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )
    return encoded_jwt


def verify_token(token: Optional[str]) -> Optional[TokenClaims]:
    """
    Return the claims of a valid token, or None.

    Bad signature, malformed structure, missing claims and expiry all give
    None; a partially trusted result is never returned.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True, "require_iat": True},
        )
        return TokenClaims.model_validate(payload)
    except JWTError as e:
        logger.info("Token verification failed: %s", e)
        return None
    except PydanticValidationError:
        logger.info("Token verification failed: unexpected claims shape")
        return None


def extract_token_from_header(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[len("Bearer "):].strip() or None


def build_auth_cookie(token: str) -> str:
    """Set-Cookie value carrying the session token."""
    parts = [
        f"{settings.AUTH_COOKIE_NAME}={token}",
        "HttpOnly",
    ]
    if settings.cookie_secure:
        parts.append("Secure")
    parts.extend([
        "SameSite=Strict",
        f"Max-Age={settings.token_lifetime_seconds}",
        "Path=/",
    ])
    return "; ".join(parts)


def build_clear_cookie() -> str:
    """Set-Cookie value that deletes the session cookie immediately."""
    return f"{settings.AUTH_COOKIE_NAME}=; HttpOnly; SameSite=Strict; Max-Age=0; Path=/"


def set_auth_cookie(response: Response, token: str) -> None:
    response.headers.append("set-cookie", build_auth_cookie(token))


def clear_auth_cookie(response: Response) -> None:
    response.headers.append("set-cookie", build_clear_cookie())
