"""
Session tokens for marketplace profiles.

Access tokens carry the profile's role so a request can be told apart as a
renter or a rent provider before the profile is loaded. Refresh tokens only
identify the profile; a new access token is minted from the reloaded profile,
so a role change takes effect on the next refresh.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from jose import ExpiredSignatureError, JWTError, jwt
from rental_marketplace.config import settings
from rental_marketplace.models.profile import Profile, ProfileRole
from rental_marketplace.utils.exceptions import InvalidTokenError, TokenExpiredError
import enum
import uuid


class TokenType(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims of a session token."""
    profile_id: uuid.UUID
    email: str
    token_type: TokenType
    expires_at: datetime
    role: Optional[ProfileRole] = None


def _encode(claims: Dict[str, Any], lifetime: timedelta) -> str:
    issued_at = datetime.now(timezone.utc)
    return jwt.encode(
        {**claims, "iat": issued_at, "exp": issued_at + lifetime},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: ProfileRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Access token for a profile; lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES."""
    return _encode(
        {"sub": str(user_id), "email": email, "role": ProfileRole(role).value, "type": TokenType.ACCESS.value},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    return _encode(
        {"sub": str(user_id), "email": email, "type": TokenType.REFRESH.value},
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    )


def issue_tokens(profile: Profile) -> Tuple[str, str]:
    """Access and refresh token pair handed out on signup and login."""
    return (
        create_access_token(profile.id, profile.email, profile.role),
        create_refresh_token(profile.id, profile.email)
    )


def decode_token(token: str, expected: TokenType) -> TokenPayload:
    """
    Verify a session token and return its claims.

    Args:
        token: Encoded JWT
        expected: Token type the caller accepts; a refresh token is never
            accepted where an access token is required and vice versa

    Raises:
        TokenExpiredError: If the token is past its expiry
        InvalidTokenError: If the signature, type or claims are wrong
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}")

    if claims.get("type") != expected.value:
        raise InvalidTokenError(f"Expected {expected.value} token")

    try:
        return TokenPayload(
            profile_id=uuid.UUID(claims["sub"]),
            email=claims["email"],
            token_type=expected,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            role=ProfileRole(claims["role"]) if expected is TokenType.ACCESS else None
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenError("Invalid token claims")
