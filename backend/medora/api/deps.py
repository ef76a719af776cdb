"""FastAPI dependencies: DB session and caller identity from the bearer token.

authenticate() never raises: it yields the verified claims or None and each
handler decides how to react (usually via require_role / require_auth).
"""
import logging
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medora.core.security import TokenError, TokenPayload, decode_access_token
from medora.db.session import SessionLocal

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[TokenPayload]:
    """Parse `Authorization: Bearer <token>` into claims, or None if absent/invalid/expired."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    try:
        return decode_access_token(credentials.credentials)
    except TokenError as e:
        logger.debug(f"Rejected bearer token on {request.url.path}: {e}")
        return None


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
