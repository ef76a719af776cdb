"""Auth: register, login, token refresh and the caller's own profile.

SECURITY FEATURES:
- Password hashing with bcrypt
- Password strength validation (pydantic schema)
- Short access token expiry (15 minutes), refresh tokens stored server-side
- Generic "Invalid credentials" message on any login failure
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, client_ip, get_db
from medora.core.audit import AuditLog
from medora.core.exceptions import BusinessError
from medora.core.permissions import require_auth
from medora.core.security import TokenPayload, get_password_hash, verify_password
from medora.models.enums import Role
from medora.models.user import User
from medora.schemas.common import MessageResponse
from medora.schemas.user import (
    AccessTokenResponse,
    AuthResponse,
    ChangePassword,
    ProfileUpdate,
    RefreshRequest,
    UserCreate,
    UserEnvelope,
    UserLogin,
)
from medora.services import auth_service

router = APIRouter()


def _current_user(db: Session, claims: Optional[TokenPayload]) -> User:
    claims = require_auth(claims)
    user = db.query(User).filter(User.id == claims.user_id).first()
    if not user:
        raise BusinessError.not_found("User")
    return user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """
    Register a customer account and log it in.

    Requirements:
    - email or phone (each unique)
    - password: 8+ chars with an uppercase letter, a lowercase letter and a digit
    """
    conditions = []
    if data.email:
        conditions.append(User.email == data.email)
    if data.phone:
        conditions.append(User.phone == data.phone)
    if db.query(User).filter(or_(*conditions)).first():
        AuditLog.log_authentication(
            "register", data.email or data.phone, client_ip(request), False, reason="duplicate"
        )
        raise BusinessError.bad_request("User with this email or phone already exists")

    user = User(
        name=data.name,
        email=data.email,
        phone=data.phone,
        hashed_password=get_password_hash(data.password),
        role=Role.CUSTOMER,
    )
    db.add(user)
    db.flush()
    access_token, refresh_token = auth_service.issue_tokens(db, user)
    db.commit()
    db.refresh(user)

    AuditLog.log_authentication("register", user.email or user.phone, client_ip(request), True)
    return AuthResponse(user=user, access_token=access_token, refresh_token=refresh_token)


@router.post("/login", response_model=AuthResponse)
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Login with email or phone. Same error for unknown user and wrong password."""
    identifier = data.email_or_phone.strip()
    user = db.query(User).filter(or_(User.email == identifier, User.phone == identifier)).first()
    if not user or not verify_password(data.password, user.hashed_password):
        AuditLog.log_authentication(
            "failed_login", identifier, client_ip(request), False, reason="invalid credentials"
        )
        raise BusinessError.unauthorized("Invalid credentials")

    access_token, refresh_token = auth_service.issue_tokens(db, user)
    db.commit()

    AuditLog.log_authentication("login", identifier, client_ip(request), True)
    return AuthResponse(user=user, access_token=access_token, refresh_token=refresh_token)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(data: RefreshRequest, db: Session = Depends(get_db)):
    if not data.refresh_token:
        raise BusinessError.bad_request("Refresh token is required")
    access_token = auth_service.refresh_access_token(db, data.refresh_token)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
def logout(data: RefreshRequest, request: Request, db: Session = Depends(get_db)):
    """Forget the refresh token. Logging out with an unknown token still succeeds."""
    if data.refresh_token:
        revoked = auth_service.revoke_refresh_token(db, data.refresh_token)
        AuditLog.log_authentication("logout", "refresh-token", client_ip(request), revoked)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserEnvelope)
def me(db: Session = Depends(get_db), claims: Optional[TokenPayload] = Depends(authenticate)):
    """Get current authenticated user."""
    return UserEnvelope(user=_current_user(db, claims))


@router.put("/me", response_model=UserEnvelope)
def update_me(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    user = _current_user(db, claims)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("email") and updates["email"] != user.email:
        if db.query(User).filter(User.email == updates["email"], User.id != user.id).first():
            raise BusinessError.conflict("Email already in use")
    if updates.get("phone") and updates["phone"] != user.phone:
        if db.query(User).filter(User.phone == updates["phone"], User.id != user.id).first():
            raise BusinessError.conflict("Phone already in use")

    # the account must keep at least one login identifier
    if not updates.get("email", user.email) and not updates.get("phone", user.phone):
        raise BusinessError.bad_request("Either email or phone is required")

    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return UserEnvelope(user=user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePassword,
    request: Request,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Change password and sign out every other session (all refresh tokens dropped)."""
    user = _current_user(db, claims)
    if not verify_password(data.current_password, user.hashed_password):
        AuditLog.log_authentication(
            "password_change", str(user.id), client_ip(request), False, reason="wrong current password"
        )
        raise BusinessError.bad_request("Current password is incorrect")

    user.hashed_password = get_password_hash(data.new_password)
    auth_service.revoke_all_for_user(db, user.id)
    db.commit()

    AuditLog.log_authentication("password_change", str(user.id), client_ip(request), True)
    return MessageResponse(message="Password changed successfully")
