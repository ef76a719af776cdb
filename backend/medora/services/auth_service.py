"""
Token issuing and the refresh-token store.

Every refresh token handed to a client has a row in refresh_tokens; a token
whose row is gone (logout, password change, expiry) is no longer accepted
even if its signature still verifies.
"""
import logging
from datetime import datetime, timedelta
from typing import Tuple

from sqlalchemy.orm import Session

from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.security import (
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    token_payload_for,
)
from medora.models.refresh_token import RefreshToken
from medora.models.user import User

logger = logging.getLogger(__name__)


def issue_tokens(db: Session, user: User) -> Tuple[str, str]:
    """Create an access/refresh pair and persist the refresh token. Caller commits."""
    payload = token_payload_for(user)
    access_token = create_access_token(payload)
    refresh_token = create_refresh_token(payload)
    db.add(RefreshToken(
        token=refresh_token,
        user_id=user.id,
        expires_at=datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    ))
    return access_token, refresh_token


def refresh_access_token(db: Session, refresh_token: str) -> str:
    """
    Exchange a stored refresh token for a new access token.

    The refresh token itself is not rotated. An expired row is deleted
    before rejecting the request.
    """
    try:
        decode_refresh_token(refresh_token)
    except TokenError as e:
        raise BusinessError.unauthorized("Invalid refresh token", reason=str(e))

    stored = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
    if not stored:
        raise BusinessError.unauthorized("Invalid refresh token", reason="refresh token not in store")

    if stored.expires_at < datetime.utcnow():
        owner_id = stored.user_id
        db.delete(stored)
        db.commit()
        raise BusinessError.unauthorized("Refresh token expired", reason=f"user {owner_id}")

    user = db.query(User).filter(User.id == stored.user_id).first()
    if not user:
        raise BusinessError.unauthorized("Invalid refresh token", reason="token owner missing")

    # Claims come from the current user row so a role change takes effect on refresh
    return create_access_token(token_payload_for(user))


def revoke_refresh_token(db: Session, refresh_token: str) -> bool:
    deleted = db.query(RefreshToken).filter(RefreshToken.token == refresh_token).delete()
    db.commit()
    return bool(deleted)


def revoke_all_for_user(db: Session, user_id: int) -> int:
    """Drop every refresh token the user holds. Caller commits."""
    count = db.query(RefreshToken).filter(RefreshToken.user_id == user_id).delete()
    logger.info(f"Revoked {count} refresh token(s) for user {user_id}")
    return count
