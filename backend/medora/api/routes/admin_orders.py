"""Back-office order fulfilment and prescription review (ADMIN / PHARMACIST)."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.audit import AuditLog
from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.permissions import STAFF_ROLES, require_role
from medora.core.security import TokenPayload
from medora.models.enums import OrderStatus, PrescriptionStatus
from medora.models.order import Order
from medora.models.prescription import Prescription
from medora.models.user import User
from medora.schemas.order import OrderList, OrderResponse, OrderStatusUpdate
from medora.schemas.prescription import PrescriptionList, PrescriptionResponse, PrescriptionReview
from medora.services import order_service
from medora.services.pagination import paginate

router = APIRouter()


# ==============================================================================
# ORDERS
# ==============================================================================

def _get_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise BusinessError.not_found("Order")
    return order


@router.get("/orders", response_model=OrderList)
def admin_list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Search covers order number, customer name, customer email and delivery phone."""
    require_role(claims, STAFF_ROLES)

    q = db.query(Order).join(User, Order.user_id == User.id)
    if order_status:
        q = q.filter(Order.status == order_status)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            Order.order_number.ilike(pattern),
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            Order.delivery_phone.ilike(pattern),
        ))

    orders, pagination = paginate(q.order_by(Order.created_at.desc(), Order.id.desc()), page, limit)
    return OrderList(orders=orders, pagination=pagination)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def admin_get_order(
    order_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)
    return _get_order(db, order_id)


@router.put("/orders/{order_id}", response_model=OrderResponse)
def admin_update_order(
    order_id: int,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """
    Update status / payment status / tracking.

    Any status may be set from any status. DELIVERED stamps deliveredAt.
    """
    actor = require_role(claims, STAFF_ROLES)
    order = _get_order(db, order_id)

    changes = order_service.apply_status_update(order, data)
    db.commit()
    db.refresh(order)

    AuditLog.log_action("status_change", "order", order.id, actor, changes=changes)
    return order


# ==============================================================================
# PRESCRIPTIONS
# ==============================================================================

def _get_prescription(db: Session, prescription_id: int) -> Prescription:
    prescription = db.query(Prescription).filter(Prescription.id == prescription_id).first()
    if not prescription:
        raise BusinessError.not_found("Prescription")
    return prescription


@router.get("/prescriptions", response_model=PrescriptionList)
def admin_list_prescriptions(
    prescription_status: Optional[PrescriptionStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)

    q = db.query(Prescription)
    if prescription_status:
        q = q.filter(Prescription.status == prescription_status)

    prescriptions, pagination = paginate(
        q.order_by(Prescription.created_at.desc(), Prescription.id.desc()), page, limit
    )
    return PrescriptionList(prescriptions=prescriptions, pagination=pagination)


@router.get("/prescriptions/{prescription_id}", response_model=PrescriptionResponse)
def admin_get_prescription(
    prescription_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)
    return _get_prescription(db, prescription_id)


@router.put("/prescriptions/{prescription_id}", response_model=PrescriptionResponse)
def admin_review_prescription(
    prescription_id: int,
    data: PrescriptionReview,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Approve / reject. Approval records the reviewer and the time."""
    actor = require_role(claims, STAFF_ROLES)
    prescription = _get_prescription(db, prescription_id)
    changes = {}

    if data.status is not None:
        changes["status"] = {"from": prescription.status.value, "to": data.status.value}
        prescription.status = data.status
        if data.status == PrescriptionStatus.APPROVED:
            prescription.approved_by = actor.user_id
            prescription.approved_at = datetime.utcnow()
    if "admin_notes" in data.model_fields_set:
        prescription.admin_notes = data.admin_notes
        changes["admin_notes"] = data.admin_notes

    db.commit()
    db.refresh(prescription)

    AuditLog.log_action("review", "prescription", prescription.id, actor, changes=changes)
    return prescription
