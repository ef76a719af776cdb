"""
Order creation and back-office status updates.

COMPLIANCE NOTE:
- Money fields are stored exactly as the client computed them
- No stock check or reservation happens at checkout
- Status transitions are not validated; DELIVERED stamps delivered_at
"""
import logging
import secrets
import string
import time
from datetime import datetime
from typing import Dict

from sqlalchemy.orm import Session

from medora.core.exceptions import BusinessError
from medora.models.enums import OrderStatus
from medora.models.medicine import Medicine
from medora.models.order import Order, OrderItem
from medora.models.prescription import Prescription
from medora.schemas.order import OrderCreate, OrderStatusUpdate

logger = logging.getLogger(__name__)

_ORDER_SUFFIX = string.digits + string.ascii_uppercase


def generate_order_number() -> str:
    """ORD-<epoch millis>-<5 random base-36 chars>."""
    suffix = "".join(secrets.choice(_ORDER_SUFFIX) for _ in range(5))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def create_order(db: Session, user_id: int, data: OrderCreate) -> Order:
    medicine_ids = {item.medicine_id for item in data.items}
    medicines: Dict[int, Medicine] = {
        m.id: m for m in db.query(Medicine).filter(Medicine.id.in_(medicine_ids)).all()
    }
    missing = sorted(medicine_ids - medicines.keys())
    if missing:
        raise BusinessError.not_found(f"Medicine {missing[0]}")

    if data.prescription_id is not None:
        prescription = db.query(Prescription).filter(
            Prescription.id == data.prescription_id,
            Prescription.user_id == user_id,
        ).first()
        if not prescription:
            raise BusinessError.not_found("Prescription")

    items = []
    for line in data.items:
        unit_price = line.price if line.price is not None else medicines[line.medicine_id].effective_price
        items.append(OrderItem(
            medicine_id=line.medicine_id,
            quantity=line.quantity,
            price=unit_price,
            discount=0.0,
            total=unit_price * line.quantity,
        ))

    subtotal = data.subtotal if data.subtotal is not None else sum(i.total for i in items)

    order = Order(
        order_number=generate_order_number(),
        user_id=user_id,
        payment_method=data.payment_method,
        subtotal=subtotal,
        tax=data.tax,
        delivery_fee=data.delivery_fee,
        discount=data.discount,
        total=data.total,
        delivery_address=data.delivery_address,
        delivery_city=data.delivery_city,
        delivery_state=data.delivery_state,
        delivery_zip_code=data.delivery_zip_code,
        delivery_phone=data.delivery_phone,
        prescription_id=data.prescription_id,
        notes=data.notes,
        items=items,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.order_number} created for user {user_id} ({len(items)} items)")
    return order


def apply_status_update(order: Order, data: OrderStatusUpdate) -> dict:
    """Copy the provided fields onto the order. Returns the changes for the audit log."""
    changes = {}
    provided = data.model_fields_set

    if "status" in provided and data.status is not None:
        changes["status"] = {"from": order.status.value, "to": data.status.value}
        order.status = data.status
        if data.status == OrderStatus.DELIVERED:
            order.delivered_at = datetime.utcnow()
    if "payment_status" in provided and data.payment_status is not None:
        changes["payment_status"] = {"from": order.payment_status.value, "to": data.payment_status.value}
        order.payment_status = data.payment_status
    for field in ("tracking_number", "estimated_delivery", "notes"):
        if field in provided:
            setattr(order, field, getattr(data, field))
            changes[field] = getattr(data, field)

    return changes
