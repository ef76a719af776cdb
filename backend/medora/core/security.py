"""Password hashing and JWT issuance/verification.

SECURITY:
- Passwords hashed with bcrypt (passlib)
- Access tokens (15 min) and refresh tokens (7 days) are signed with
  independent secrets and carry a "type" claim, so one kind never
  validates as the other
"""
import uuid
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from medora.core.config import settings
from medora.models.enums import Role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when a token is malformed, tampered with or expired."""


class TokenPayload(BaseModel):
    sub: str
    role: Role
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def token_payload_for(user) -> TokenPayload:
    """Claims embedded in both token kinds for the given user."""
    return TokenPayload(
        sub=str(user.id),
        role=user.role,
        email=user.email or None,
        phone=user.phone or None,
    )


def _encode(payload: TokenPayload, kind: str, secret: str, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = payload.model_dump(mode="json", exclude_none=True)
    to_encode.update({
        "type": kind,
        "exp": now + expires_delta,
        "iat": now,
    })
    if kind == REFRESH:
        # Unique per issue so the stored copy never collides
        to_encode["jti"] = uuid.uuid4().hex
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def _decode(token: str, kind: str, secret: str) -> TokenPayload:
    try:
        data = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise TokenError(f"Invalid or expired {kind} token")
    if data.get("type") != kind:
        raise TokenError(f"Invalid or expired {kind} token")
    try:
        return TokenPayload(**data)
    except ValueError:
        raise TokenError(f"Invalid or expired {kind} token")


def create_access_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        payload,
        ACCESS,
        settings.JWT_SECRET,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        payload,
        REFRESH,
        settings.JWT_REFRESH_SECRET,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_access_token(token: str) -> TokenPayload:
    return _decode(token, ACCESS, settings.JWT_SECRET)


def decode_refresh_token(token: str) -> TokenPayload:
    return _decode(token, REFRESH, settings.JWT_REFRESH_SECRET)
