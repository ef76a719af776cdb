"""Back-office user management (ADMIN only)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.audit import AuditLog
from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.permissions import ADMIN_ONLY, require_role
from medora.core.security import TokenPayload
from medora.models.enums import Role
from medora.models.order import Order
from medora.models.prescription import Prescription
from medora.models.review import Review
from medora.models.user import User
from medora.schemas.common import MessageResponse
from medora.schemas.refs import OrderSummary
from medora.schemas.user import (
    AdminUserDetail,
    AdminUserList,
    AdminUserListItem,
    AdminUserUpdate,
    UserPrescriptionSummary,
    UserResponse,
    UserReviewSummary,
)
from medora.services.pagination import paginate

router = APIRouter()

RECENT_ACTIVITY = 10


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.not_found("User")
    return user


def _count(db: Session, column, user_id: int) -> int:
    return db.query(func.count(column)).filter(column == user_id).scalar() or 0


@router.get("/users", response_model=AdminUserList)
def admin_list_users(
    role: Optional[Role] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Users newest first, with order / review / prescription counts. Search covers name, email and phone."""
    require_role(claims, ADMIN_ONLY)

    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern), User.phone.ilike(pattern)))

    users, pagination = paginate(q.order_by(User.created_at.desc(), User.id.desc()), page, limit)

    items = []
    for user in users:
        item = AdminUserListItem.model_validate(user)
        item.order_count = _count(db, Order.user_id, user.id)
        item.review_count = _count(db, Review.user_id, user.id)
        item.prescription_count = _count(db, Prescription.user_id, user.id)
        items.append(item)
    return AdminUserList(users=items, pagination=pagination)


@router.get("/users/{user_id}", response_model=AdminUserDetail)
def admin_get_user(
    user_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, ADMIN_ONLY)
    user = _get_user(db, user_id)

    orders = (
        db.query(Order).filter(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc()).limit(RECENT_ACTIVITY).all()
    )
    prescriptions = (
        db.query(Prescription).filter(Prescription.user_id == user.id)
        .order_by(Prescription.created_at.desc(), Prescription.id.desc()).limit(RECENT_ACTIVITY).all()
    )
    reviews = (
        db.query(Review).filter(Review.user_id == user.id)
        .order_by(Review.created_at.desc(), Review.id.desc()).limit(RECENT_ACTIVITY).all()
    )

    return AdminUserDetail(
        **UserResponse.model_validate(user).model_dump(),
        orders=[OrderSummary.model_validate(o) for o in orders],
        prescriptions=[UserPrescriptionSummary.model_validate(p) for p in prescriptions],
        reviews=[
            UserReviewSummary(
                id=r.id,
                rating=r.rating,
                comment=r.comment,
                medicine_id=r.medicine_id,
                medicine_name=r.medicine.name if r.medicine else None,
                created_at=r.created_at,
            )
            for r in reviews
        ],
    )


@router.put("/users/{user_id}", response_model=UserResponse)
def admin_update_user(
    user_id: int,
    data: AdminUserUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Edit profile fields, verification flags or role. Role changes are audited separately."""
    actor = require_role(claims, ADMIN_ONLY)
    user = _get_user(db, user_id)
    updates = data.model_dump(exclude_unset=True)

    old_role = user.role
    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    if user.role != old_role:
        AuditLog.log_permission_change(
            user_id=user.id,
            granted_by=actor.user_id,
            old_role=old_role.value,
            new_role=user.role.value,
        )
    AuditLog.log_action("update", "user", user.id, actor, changes=updates)
    return user


@router.delete("/users/{user_id}", response_model=MessageResponse)
def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Delete a user with no orders and no prescription approvals. Their prescriptions, reviews and refresh tokens go too."""
    actor = require_role(claims, ADMIN_ONLY)
    if actor.user_id == user_id:
        raise BusinessError.bad_request("Cannot delete your own account")

    user = _get_user(db, user_id)
    if _count(db, Order.user_id, user.id) > 0:
        raise BusinessError.bad_request("Cannot delete user with existing orders")
    if _count(db, Prescription.approved_by, user.id) > 0:
        raise BusinessError.bad_request("Cannot delete user who has approved prescriptions")

    db.delete(user)
    db.commit()

    AuditLog.log_action("delete", "user", user_id, actor)
    return MessageResponse(message="User deleted successfully")
